"""Core readiness, scoring and error types.

The dlib-backed engine lives in ``core.face_detection`` and is imported on
demand, so importing this package stays cheap.
"""
from .backend import (
    FaceDetectionError,
    FeatureExtractionError,
    NoFaceDetectedError,
    RecognitionBackend
)
from .errors import (
    InternalError,
    NotFoundError,
    NotReadyError,
    ServiceError,
    ValidationError
)
from .readiness import ReadinessState, utc_timestamp
from .scoring import analyze_distance

__all__ = [
    'FaceDetectionError',
    'FeatureExtractionError',
    'NoFaceDetectedError',
    'RecognitionBackend',
    'InternalError',
    'NotFoundError',
    'NotReadyError',
    'ServiceError',
    'ValidationError',
    'ReadinessState',
    'utc_timestamp',
    'analyze_distance'
]
