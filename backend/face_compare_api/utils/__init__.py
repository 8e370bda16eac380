"""Utility functions for image acquisition and logging"""
from .image import (
    ImageFetcher,
    decode_base64_image,
    decode_image,
    is_http_url
)
from .observability import setup_logging

__all__ = [
    'ImageFetcher',
    'decode_base64_image',
    'decode_image',
    'is_http_url',
    'setup_logging'
]
