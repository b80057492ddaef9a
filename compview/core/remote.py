"""
HTTP client for the external compression service.

The service runs the DCT/SVD transforms and answers a multipart upload with
the whole family of reconstructions as JSON. This client only moves bytes; the
payload is validated by the browsing controller.
"""
import logging
from typing import Any, Dict, Optional, Union

import httpx

from compview.errors import CompressionServiceError
from compview.models.base import CompressionMethod

# Set up logging
logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120.0


def extract_error_message(response: httpx.Response) -> str:
    """
    Pull the service's error message out of a failed response.

    Returns:
        The ``error`` field of a JSON body verbatim when present, otherwise a
        generic description of the HTTP status
    """
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, str) and error:
            return error
    return f"Request failed with status code {response.status_code}"


class CompressionServiceClient:
    """Async client for ``POST /api/compress`` on the compression service"""

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport)

    async def compress(
        self,
        image: bytes,
        filename: str,
        content_type: Optional[str],
        method: Union[str, CompressionMethod],
        num_components: int
    ) -> Dict[str, Any]:
        """
        Upload an image for compression.

        Args:
            image: Raw image bytes
            filename: Filename sent with the upload
            content_type: MIME type of the image
            method: DCT or SVD
            num_components: Largest component count to compute

        Returns:
            The decoded JSON body of a successful response

        Raises:
            CompressionServiceError: On network errors, non-2xx responses or a
                body that is not JSON
        """
        method_value = CompressionMethod(method).value
        files = {"image": (filename, image, content_type or "application/octet-stream")}
        data = {"method": method_value, "numComponents": str(num_components)}

        logger.info(f"Sending {filename} ({len(image)} bytes) for {method_value} compression with {num_components} components")
        try:
            async with self._client() as client:
                response = await client.post("/api/compress", files=files, data=data)
        except httpx.HTTPError as e:
            detail = str(e) or e.__class__.__name__
            logger.error(f"Compression service request failed: {detail}")
            raise CompressionServiceError(f"Network error: {detail}")

        if response.is_error:
            message = extract_error_message(response)
            logger.error(f"Compression service returned {response.status_code}: {message}")
            raise CompressionServiceError(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError:
            raise CompressionServiceError(
                "Compression service returned a response that is not JSON",
                status_code=response.status_code
            )

    async def check_health(self) -> Dict[str, Any]:
        """
        Probe the service's health endpoint.

        Returns:
            Dictionary with a ``status`` of ``ok`` or ``error`` and details
        """
        try:
            async with self._client() as client:
                response = await client.get("/api/health")
        except httpx.HTTPError as e:
            return {"status": "error", "message": str(e) or e.__class__.__name__}

        if response.is_error:
            return {"status": "error", "message": extract_error_message(response)}
        return {"status": "ok", "url": self.base_url}
