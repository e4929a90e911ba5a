from .handlers import ManovaHandlers

__all__ = ['ManovaHandlers']
