"""HTTP layer: routes and error handlers"""
from .error_handlers import register_error_handlers
from .routes import router

__all__ = [
    'register_error_handlers',
    'router'
]
