"""Data models and type definitions"""
from .types import (
    CompareRequest,
    CompareResult,
    Confidence,
    DetectRequest,
    DetectResult,
    ErrorResponse,
    GreetingResponse,
    HealthState,
    HealthStatus,
)

__all__ = [
    'CompareRequest',
    'CompareResult',
    'Confidence',
    'DetectRequest',
    'DetectResult',
    'ErrorResponse',
    'GreetingResponse',
    'HealthState',
    'HealthStatus'
]
