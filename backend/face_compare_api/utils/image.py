"""Image acquisition utilities.

This module turns what callers send us into images: base64 payloads
(optionally wrapped in a data URL), images referenced by URL, and encoded
bytes decoded into arrays with OpenCV.
"""

import asyncio
import base64
import binascii
import ipaddress
import logging

import cv2
import httpx
import numpy as np

logger = logging.getLogger(__name__)

ALLOWED_URL_SCHEMES = ('http://', 'https://')

class ImageProcessingError(Exception):
    """Base exception for image processing errors."""
    pass

class ImageDecodingError(ImageProcessingError):
    """Exception raised when base64 decoding fails."""
    pass

class ImageFormatError(ImageProcessingError):
    """Exception raised when image format is invalid."""
    pass

class ImageFetchError(ImageProcessingError):
    """Exception raised when an image URL cannot be downloaded."""
    pass

def is_http_url(url: str) -> bool:
    return url.startswith(ALLOWED_URL_SCHEMES)

def decode_base64_image(base64_string: str) -> bytes:
    """Decode a base64 string to raw image bytes.

    Args:
        base64_string: Base64 encoded image string, optionally with data URL prefix.
            Example formats:
            - "data:image/jpeg;base64,/9j/4AAQSkZ..."
            - "/9j/4AAQSkZ..." (without prefix)

    Returns:
        Decoded bytes. They are not checked to be a valid image here.

    Raises:
        ImageDecodingError: If the string is not valid base64.
    """
    # Remove data URL prefix if present
    if ';base64,' in base64_string:
        base64_string = base64_string.split(';base64,', 1)[1]
    elif base64_string.startswith('data:') and ',' in base64_string:
        base64_string = base64_string.split(',', 1)[1]

    payload = ''.join(base64_string.split())
    try:
        image_bytes = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodingError(f"Invalid base64Image: {str(e)}")

    if not image_bytes:
        raise ImageDecodingError("Invalid base64Image: empty payload")
    return image_bytes

def decode_image(image_bytes: bytes) -> np.ndarray:
    """Decode encoded image bytes into an RGB array.

    Args:
        image_bytes: Raw file contents of a JPEG, PNG or other OpenCV-readable image.

    Returns:
        Image as numpy array in RGB order.

    Raises:
        ImageFormatError: If the bytes cannot be read as an image.
    """
    if not image_bytes:
        raise ImageFormatError("Invalid image data: empty payload")

    nparr = np.frombuffer(image_bytes, np.uint8)
    image = cv2.imdecode(nparr, cv2.IMREAD_COLOR)
    if image is None:
        raise ImageFormatError("Invalid image data: could not decode image")

    # face_recognition expects RGB
    return cv2.cvtColor(image, cv2.COLOR_BGR2RGB)

class ImageFetcher:
    """Downloads images referenced by URL with a shared httpx client.

    Redirects are not followed and, unless ``allow_private_hosts`` is set,
    hosts must resolve to public addresses only.
    """

    def __init__(self, client: httpx.AsyncClient, max_bytes: int, allow_private_hosts: bool = False):
        self.client = client
        self.max_bytes = max_bytes
        self.allow_private_hosts = allow_private_hosts

    async def check_host(self, url: str) -> None:
        """Refuse URLs whose host is loopback, private, link-local or otherwise non-public.

        Raises:
            ImageFetchError: If the host is missing, unresolvable or not public.
        """
        try:
            host = httpx.URL(url).host
        except httpx.InvalidURL as e:
            raise ImageFetchError(f"Invalid imageUrl: {str(e)}")
        if not host:
            raise ImageFetchError("Invalid imageUrl: missing host")

        try:
            addresses = [ipaddress.ip_address(host.split('%')[0])]
        except ValueError:
            loop = asyncio.get_running_loop()
            try:
                infos = await loop.getaddrinfo(host, None)
            except OSError:
                raise ImageFetchError(f"Invalid imageUrl: cannot resolve {host}")
            addresses = [ipaddress.ip_address(info[4][0].split('%')[0]) for info in infos]

        for address in addresses:
            if not address.is_global:
                raise ImageFetchError(f"Invalid imageUrl: {host} is not a public address")

    async def fetch(self, url: str) -> bytes:
        """Download an image.

        Raises:
            ImageFetchError: On non-public hosts, network errors, redirects,
                non-2xx responses, empty or oversized bodies.
        """
        if not self.allow_private_hosts:
            await self.check_host(url)

        logger.info(f"Fetching image from {url}")
        try:
            async with self.client.stream('GET', url, follow_redirects=False) as response:
                if response.is_redirect:
                    raise ImageFetchError("Invalid imageUrl: redirects are not followed")
                if not response.is_success:
                    raise ImageFetchError(
                        f"Invalid imageUrl: server responded with {response.status_code}"
                    )

                chunks = []
                received = 0
                async for chunk in response.aiter_bytes():
                    received += len(chunk)
                    if received > self.max_bytes:
                        raise ImageFetchError(
                            f"Invalid imageUrl: image exceeds {self.max_bytes} bytes"
                        )
                    chunks.append(chunk)
        except httpx.HTTPError as e:
            raise ImageFetchError(f"Invalid imageUrl: {str(e) or type(e).__name__}")

        if not received:
            raise ImageFetchError("Invalid imageUrl: empty response body")
        return b''.join(chunks)
