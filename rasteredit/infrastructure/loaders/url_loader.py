from typing import Optional

import requests

from rasteredit.domain.errors import DecodeError
from rasteredit.domain.interfaces import IImageSource
from rasteredit.domain.types import PixelBuffer
from rasteredit.infrastructure.loaders.pil_loader import decode_bytes
from rasteredit.kernel.system.config import APP_CONFIG
from rasteredit.kernel.system.logging import get_logger

logger = get_logger(__name__)

URL_SCHEMES = ("http://", "https://")


def is_url(location: str) -> bool:
    return location.lower().startswith(URL_SCHEMES)


def fetch_url(
    url: str,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
) -> bytes:
    """
    Downloads the raw bytes behind an http(s) URL.

    Raises:
        DecodeError: network error, non-2xx response, or a body larger than
            APP_CONFIG.max_download_bytes.
    """
    if not is_url(url):
        raise DecodeError(f"Not an http(s) URL: {url}")

    http = session or requests.Session()
    limit = APP_CONFIG.max_download_bytes
    try:
        with http.get(url, timeout=timeout or APP_CONFIG.url_timeout_s, stream=True) as resp:
            resp.raise_for_status()
            chunks = []
            received = 0
            for chunk in resp.iter_content(chunk_size=64 * 1024):
                received += len(chunk)
                if received > limit:
                    raise DecodeError(f"Download exceeds {limit} bytes: {url}")
                chunks.append(chunk)
    except requests.RequestException as e:
        raise DecodeError(f"Failed to load image from {url}: {e}") from e
    finally:
        if session is None:
            http.close()

    return b"".join(chunks)


def load_url(url: str, session: Optional[requests.Session] = None) -> PixelBuffer:
    """
    Fetches and decodes a remote image. Never substitutes a placeholder.
    """
    buffer = decode_bytes(fetch_url(url, session=session))
    logger.info(f"Loaded {url} ({buffer.width}x{buffer.height})")
    return buffer


class UrlSource(IImageSource):
    def __init__(self, url: str, session: Optional[requests.Session] = None):
        self.url = url
        self.session = session

    def read(self) -> PixelBuffer:
        return load_url(self.url, session=self.session)
