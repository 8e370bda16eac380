"""Turn a face distance into the similarity figures returned by /compare."""

from typing import Tuple

from ..models.types import Confidence

DEFAULT_THRESHOLD = 0.5
HIGH_CONFIDENCE_DISTANCE = 0.4
MEDIUM_CONFIDENCE_DISTANCE = 0.6


def distance_to_similarity(distance: float) -> float:
    """Map a face distance onto a 0-100 similarity score.

    Args:
        distance: Euclidean distance between two face encodings.

    Returns:
        Similarity percentage, clamped to [0, 100] and rounded to 2 places.
    """
    similarity = (1.0 - distance) * 100
    return round(min(100.0, max(0.0, similarity)), 2)


def confidence_for(distance: float) -> Confidence:
    if distance < HIGH_CONFIDENCE_DISTANCE:
        return 'high'
    if distance < MEDIUM_CONFIDENCE_DISTANCE:
        return 'medium'
    return 'low'


def analyze_distance(distance: float, threshold: float = DEFAULT_THRESHOLD) -> Tuple[bool, float, Confidence]:
    """Score a face distance.

    Args:
        distance: Euclidean distance between two face encodings.
        threshold: Largest distance still considered the same person.

    Returns:
        Tuple of (match, similarity, confidence).

    Raises:
        ValueError: If distance is negative.
    """
    if distance < 0:
        raise ValueError(f"Face distance cannot be negative: {distance}")
    return (
        bool(distance <= threshold),
        distance_to_similarity(distance),
        confidence_for(distance)
    )
