"""Contract between the HTTP layer and the recognition engine."""

from typing import Protocol

from ..models.types import CompareResult, DetectResult


class FaceDetectionError(Exception):
    """Base exception for face detection errors."""
    pass


class NoFaceDetectedError(FaceDetectionError):
    """Exception raised when no face is detected in an image."""
    pass


class FeatureExtractionError(FaceDetectionError):
    """Exception raised when face features cannot be extracted."""
    pass


class RecognitionBackend(Protocol):
    """Face comparison and detection engine consumed by the routes.

    Implementations are synchronous and CPU-bound; the routes call them from
    the threadpool.
    """

    def load(self) -> None:
        """Load models. Called once at startup, may take a while."""
        ...

    def compare(self, reference: bytes, probe: bytes) -> CompareResult:
        """Compare the faces found in two encoded images."""
        ...

    def detect(self, image: bytes) -> DetectResult:
        """Report whether an encoded image contains a face."""
        ...
