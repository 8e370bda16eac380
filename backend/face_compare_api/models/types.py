"""Data models and type definitions"""
from typing import Literal
from typing_extensions import NotRequired, TypedDict

Confidence = Literal['high', 'medium', 'low']
HealthState = Literal['ready', 'loading', 'ok']

class CompareRequest(TypedDict, total=False):
    imageUrl: str
    base64Image: str

class DetectRequest(TypedDict, total=False):
    base64Image: str

class CompareResult(TypedDict):
    success: bool
    match: bool
    distance: float
    similarity: float
    threshold: float
    confidence: Confidence
    processingTimeMs: int

class DetectResult(TypedDict):
    faceFound: bool
    processingTimeMs: int

class HealthStatus(TypedDict):
    status: HealthState
    timestamp: str
    uptime: int

class GreetingResponse(TypedDict):
    message: str

class ErrorResponse(TypedDict):
    error: str
    success: NotRequired[bool]
    message: NotRequired[str]
    path: NotRequired[str]
