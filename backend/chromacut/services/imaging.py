"""
Chromacut Imaging Utilities
Resolves image URIs and decodes them into RGBA pixel buffers.

Supported sources: http(s) URLs, file:// URIs, content:// and asset:// URIs
resolved under configured roots, base64 data URIs, and bare filesystem paths.
Every failure is reported as None; callers never see loader exceptions.
"""
import base64
import binascii
import io
from pathlib import Path
from typing import Optional
from urllib.parse import unquote

import numpy as np
import requests
from loguru import logger
from PIL import Image

from chromacut.config import config

HTTP_PREFIXES = ("http://", "https://")
FILE_PREFIX = "file://"
CONTENT_PREFIX = "content://"
ASSET_PREFIX = "asset://"
DATA_PREFIX = "data:image"
DOWNLOAD_CHUNK_SIZE = 64 * 1024


class ImageLoadError(Exception):
    """An image source could not be read or decoded."""


def _decode_bytes(data: bytes, source: str) -> Image.Image:
    if len(data) > config.max_file_bytes:
        raise ImageLoadError(f"{source}: image exceeds {config.MAX_FILE_MB}MB")
    image = Image.open(io.BytesIO(data))
    image.load()
    return image


def _fetch_remote(uri: str) -> Image.Image:
    """Download a remote image, stopping as soon as it passes the size limit."""
    limit = config.max_file_bytes
    too_large = f"{uri}: image exceeds {config.MAX_FILE_MB}MB"

    with requests.get(uri, timeout=config.HTTP_TIMEOUT, stream=True) as response:
        response.raise_for_status()
        declared = response.headers.get("Content-Length", "")
        if declared.isdigit() and int(declared) > limit:
            raise ImageLoadError(too_large)

        data = bytearray()
        for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
            data.extend(chunk)
            if len(data) > limit:
                raise ImageLoadError(too_large)

    return _decode_bytes(bytes(data), uri)


def _decode_data_uri(uri: str) -> Image.Image:
    if "," not in uri:
        raise ImageLoadError("Data URI has no payload")
    payload = uri.split(",", 1)[1]
    return _decode_bytes(base64.b64decode(payload), "data URI")


def _resolve_under(root: Optional[str], relative: str, scheme: str) -> Path:
    """Resolve a URI path under a configured root, refusing escapes."""
    if not root:
        raise ImageLoadError(f"{scheme} URIs are disabled (no root configured)")
    base = Path(root).resolve()
    path = (base / unquote(relative).lstrip("/")).resolve()
    if path != base and base not in path.parents:
        raise ImageLoadError(f"{scheme} path escapes its root: {relative}")
    return path


def _open_file(path: Path) -> Image.Image:
    if not path.is_file():
        raise ImageLoadError(f"No such file: {path}")
    return _decode_bytes(path.read_bytes(), str(path))


def open_image(uri: str) -> Image.Image:
    """
    Open the image a URI points to.

    Raises:
        ImageLoadError: Unsupported or unresolvable source
        requests.RequestException: Network failures and HTTP errors
        OSError: Unreadable files and undecodable image data
        binascii.Error: Malformed base64 payloads
    """
    if uri.startswith(HTTP_PREFIXES):
        return _fetch_remote(uri)
    if uri.startswith(FILE_PREFIX):
        return _open_file(Path(unquote(uri[len(FILE_PREFIX):])))
    if uri.startswith(CONTENT_PREFIX):
        return _open_file(_resolve_under(config.CONTENT_ROOT, uri[len(CONTENT_PREFIX):], "content"))
    if uri.startswith(ASSET_PREFIX):
        return _open_file(_resolve_under(config.ASSET_DIR, uri[len(ASSET_PREFIX):], "asset"))
    if uri.startswith(DATA_PREFIX):
        return _decode_data_uri(uri)

    # Try as file path
    return _open_file(Path(uri))


def load_image(uri: str) -> Optional[np.ndarray]:
    """
    Load an image URI as an RGBA pixel buffer.

    Args:
        uri: http(s), file, content, asset or data URI, or a filesystem path

    Returns:
        (H, W, 4) uint8 array, or None if the image can't be loaded
    """
    try:
        image = open_image(uri)
        rgba = np.asarray(image.convert("RGBA"), dtype=np.uint8)
    except (ImageLoadError, requests.RequestException, OSError, ValueError,
            binascii.Error, Image.DecompressionBombError) as e:
        logger.warning(f"Failed to load image {_describe(uri)}: {e}")
        return None

    logger.debug(f"Loaded {_describe(uri)} as {rgba.shape[1]}x{rgba.shape[0]} RGBA")
    return rgba


def _describe(uri: str) -> str:
    # data URIs can be megabytes long
    return uri if len(uri) <= 80 else f"{uri[:77]}..."
