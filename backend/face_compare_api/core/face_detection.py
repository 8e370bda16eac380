"""Face detection and comparison backend.

This module implements the recognition engine behind /compare and /detect
using the dlib models shipped with ``face_recognition``. Images arrive as
encoded bytes (JPEG, PNG, ...) and are decoded with OpenCV.
"""

import logging
import time
from typing import Iterator, List, Tuple

import numpy as np
import face_recognition

from ..models.types import CompareResult, DetectResult
from ..utils.image import ImageFormatError, decode_image
from .backend import FeatureExtractionError, NoFaceDetectedError
from .scoring import DEFAULT_THRESHOLD, analyze_distance

logger = logging.getLogger(__name__)

# (top, right, bottom, left), as returned by face_recognition
Location = Tuple[int, int, int, int]

def _elapsed_ms(started: float) -> int:
    return max(0, int((time.perf_counter() - started) * 1000))

class FaceRecognitionBackend:
    """Detects faces and compares them with dlib face encodings."""

    MIN_FACE_RATIO = 0.01  # Minimum face area relative to image
    MIN_ASPECT_RATIO = 0.5
    MAX_ASPECT_RATIO = 1.5
    ROTATIONS = (0, 90, 180, 270)

    def __init__(self, threshold: float = DEFAULT_THRESHOLD, model: str = "hog"):
        self.threshold = threshold
        self.model = model

    def load(self) -> None:
        """Warm up the detector and encoder on a blank frame.

        The first call into dlib deserializes the detector, landmark and
        encoder models; doing it here keeps that cost off the first request.
        """
        blank = np.zeros((64, 64, 3), dtype=np.uint8)
        face_recognition.face_locations(blank, model=self.model)
        face_recognition.face_encodings(blank, known_face_locations=[(0, 63, 63, 0)])
        logger.info(f"Face recognition models ready (detector={self.model})")

    def _rotations(self, image: np.ndarray) -> Iterator[Tuple[int, np.ndarray]]:
        for angle in self.ROTATIONS:
            yield angle, np.rot90(image, k=angle // 90) if angle else image

    def locate_faces(self, image: np.ndarray) -> List[Location]:
        """Find plausible faces in an RGB image, largest first.

        Detections that are tiny relative to the image or have an implausible
        aspect ratio are dropped as false positives.
        """
        height, width = image.shape[:2]
        img_area = height * width

        results = []
        for (top, right, bottom, left) in face_recognition.face_locations(image, model=self.model):
            w = right - left
            h = bottom - top
            if w <= 0 or h <= 0:
                continue
            if (w * h) / img_area < self.MIN_FACE_RATIO:
                continue
            if not (self.MIN_ASPECT_RATIO <= w / h <= self.MAX_ASPECT_RATIO):
                continue
            results.append((top, right, bottom, left))

        results.sort(key=lambda loc: (loc[1] - loc[3]) * (loc[2] - loc[0]), reverse=True)
        return results

    def encode_largest_face(self, image: np.ndarray, label: str) -> np.ndarray:
        """Encode the largest face, trying each orientation in turn.

        Raises:
            NoFaceDetectedError: If no orientation yields a face.
            FeatureExtractionError: If a face was found but could not be encoded.
        """
        for angle, rotated in self._rotations(image):
            # dlib needs a contiguous buffer, np.rot90 returns a view
            rotated = np.ascontiguousarray(rotated)
            faces = self.locate_faces(rotated)
            if not faces:
                continue

            logger.debug(f"{label}: {len(faces)} face(s) at {angle} degrees")
            encodings = face_recognition.face_encodings(rotated, known_face_locations=faces[:1])
            if not encodings:
                raise FeatureExtractionError(f"Failed to extract features from {label} image")
            return encodings[0]

        raise NoFaceDetectedError(f"No face detected in {label} image")

    def detect(self, image: bytes) -> DetectResult:
        """Report whether the image contains a face.

        Bytes that are not a readable image simply contain no face.
        """
        started = time.perf_counter()
        try:
            rgb = decode_image(image)
        except ImageFormatError as e:
            logger.info(f"Detection on undecodable image: {str(e)}")
            return {'faceFound': False, 'processingTimeMs': _elapsed_ms(started)}

        found = False
        for _, rotated in self._rotations(rgb):
            if self.locate_faces(np.ascontiguousarray(rotated)):
                found = True
                break

        return {
            'faceFound': found,
            'processingTimeMs': _elapsed_ms(started)
        }

    def compare(self, reference: bytes, probe: bytes) -> CompareResult:
        """Compare the largest face in each image.

        Args:
            reference: Image fetched from the caller's imageUrl.
            probe: Image decoded from the caller's base64Image.

        Returns:
            Comparison result with distance, similarity and confidence.
        """
        started = time.perf_counter()
        reference_encoding = self.encode_largest_face(decode_image(reference), "reference")
        probe_encoding = self.encode_largest_face(decode_image(probe), "probe")

        distance = float(face_recognition.face_distance([reference_encoding], probe_encoding)[0])
        match, similarity, confidence = analyze_distance(distance, self.threshold)
        logger.info(f"Face distance: {distance:.4f}, similarity: {similarity:.2f}%")

        return {
            'success': True,
            'match': match,
            'distance': round(distance, 4),
            'similarity': similarity,
            'threshold': self.threshold,
            'confidence': confidence,
            'processingTimeMs': _elapsed_ms(started)
        }
