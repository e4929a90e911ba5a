from .deep_dive import DeepDiveGenerator, should_generate_deep_dive, format_for_ui

__all__ = ['DeepDiveGenerator', 'should_generate_deep_dive', 'format_for_ui']
