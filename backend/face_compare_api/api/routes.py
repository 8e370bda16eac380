"""Face comparison API routes.

This module provides the API endpoints: health probes, face comparison
between a remote image and an uploaded one, and face detection. Handlers
validate input, gate on model readiness and hand the actual work to the
recognition backend stored on the application state.
"""

import logging
import time
from typing import Dict, Optional

from fastapi import APIRouter, Body, Depends, Request
from fastapi.concurrency import run_in_threadpool

from ..core.backend import FaceDetectionError, RecognitionBackend
from ..core.errors import InternalError, NotReadyError, ServiceError, ValidationError
from ..core.readiness import ReadinessState, utc_timestamp
from ..models.types import (
    CompareRequest,
    CompareResult,
    DetectRequest,
    DetectResult,
    GreetingResponse,
    HealthStatus,
)
from ..utils.image import ImageFetcher, ImageProcessingError, decode_base64_image, is_http_url

logger = logging.getLogger(__name__)

router = APIRouter()

def get_readiness(request: Request) -> ReadinessState:
    return request.app.state.readiness

def get_backend(request: Request) -> RecognitionBackend:
    return request.app.state.backend

def get_fetcher(request: Request) -> ImageFetcher:
    return request.app.state.fetcher

def require_ready(readiness: ReadinessState = Depends(get_readiness)) -> None:
    """Refuse work until the recognition models are loaded."""
    if not readiness.is_ready:
        raise NotReadyError()

@router.get("/", response_model=GreetingResponse)
async def root(request: Request) -> Dict:
    return {'message': request.app.state.settings.greeting}

@router.get("/health", response_model=HealthStatus)
async def health(readiness: ReadinessState = Depends(get_readiness)) -> Dict:
    """Readiness probe: reports whether models have finished loading."""
    return {
        'status': readiness.status,
        'timestamp': utc_timestamp(),
        'uptime': readiness.uptime_seconds()
    }

@router.get("/health/live", response_model=HealthStatus)
async def liveness(readiness: ReadinessState = Depends(get_readiness)) -> Dict:
    """Liveness probe: ok as long as the process answers."""
    return {
        'status': 'ok',
        'timestamp': utc_timestamp(),
        'uptime': readiness.uptime_seconds()
    }

@router.post("/compare", response_model=CompareResult, dependencies=[Depends(require_ready)])
async def compare_faces(
    request_data: Optional[CompareRequest] = Body(None),
    backend: RecognitionBackend = Depends(get_backend),
    fetcher: ImageFetcher = Depends(get_fetcher),
) -> Dict:
    """Compare the face at imageUrl with the face in base64Image.

    Args:
        request_data: JSON body.
            - imageUrl: http(s) URL of the reference photo
            - base64Image: Base64 string of the photo to check

    Returns:
        Comparison result with match, distance, similarity (0-100),
        threshold, confidence and processingTimeMs.

    Raises:
        ValidationError: Missing fields, bad URL, undecodable or faceless images.
        InternalError: Any other failure in the backend.
    """
    request_data = request_data or {}
    image_url = request_data.get('imageUrl')
    base64_image = request_data.get('base64Image')

    if not image_url or not base64_image:
        raise ValidationError("Missing imageUrl or base64Image")

    if not is_http_url(image_url):
        raise ValidationError("Invalid image URL format")

    try:
        probe = decode_base64_image(base64_image)
        reference = await fetcher.fetch(image_url)
        return await run_in_threadpool(backend.compare, reference, probe)

    except ImageProcessingError as e:
        logger.warning(f"Image error: {str(e)}")
        raise ValidationError(str(e))
    except FaceDetectionError as e:
        logger.warning(f"Face detection error: {str(e)}")
        raise ValidationError(str(e))
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Comparison failed: {str(e)}", exc_info=True)
        raise InternalError(str(e) or type(e).__name__) from e

@router.post("/detect", response_model=DetectResult, dependencies=[Depends(require_ready)])
async def detect_face(
    request_data: Optional[DetectRequest] = Body(None),
    backend: RecognitionBackend = Depends(get_backend),
) -> Dict:
    """Report whether base64Image contains a face.

    Any present base64Image gets an answer: payloads that are not valid
    base64 or not a readable image report faceFound false.
    """
    started = time.perf_counter()
    request_data = request_data or {}
    base64_image = request_data.get('base64Image')

    if not base64_image:
        raise ValidationError("Missing base64Image image")

    try:
        image = decode_base64_image(base64_image)
        return await run_in_threadpool(backend.detect, image)

    except ImageProcessingError as e:
        logger.info(f"No face in undecodable image: {str(e)}")
        return {
            'faceFound': False,
            'processingTimeMs': max(0, int((time.perf_counter() - started) * 1000))
        }
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Detection failed: {str(e)}", exc_info=True)
        raise InternalError(str(e) or type(e).__name__) from e
