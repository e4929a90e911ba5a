from .json_utils import strip_code_fences, parse_json_object
from .result import Result

__all__ = ['strip_code_fences', 'parse_json_object', 'Result']
