import time
from typing import Optional

import requests
from loguru import logger

from .config import settings

CHUNK_SIZE = 16 * 1024


def fetch_text(url: str, headers: dict, timeout: float, max_bytes: Optional[int] = None) -> str:
    """
    GET `url` and return its decoded body.

    `timeout` bounds the whole exchange, not each socket operation: the body is
    streamed and the read loop gives up with `requests.Timeout` once the
    deadline passes, so a server trickling bytes cannot hold the call open.
    Bodies longer than `max_bytes` are cut off there.
    """
    max_bytes = max_bytes or settings.max_body_bytes
    deadline = time.monotonic() + timeout

    with requests.get(url, headers=headers, timeout=timeout, stream=True) as resp:
        resp.raise_for_status()
        body = bytearray()
        while len(body) < max_bytes:
            if time.monotonic() > deadline:
                raise requests.Timeout(f"Reading {url} took longer than {timeout}s")
            chunk = resp.raw.read1(CHUNK_SIZE, decode_content=True)
            if not chunk:
                break
            body.extend(chunk)
        else:
            logger.warning(f"Body of {url} exceeds {max_bytes} bytes, truncating")

        if time.monotonic() > deadline:
            raise requests.Timeout(f"Reading {url} took longer than {timeout}s")
        encoding = resp.encoding or "utf-8"

    try:
        return bytes(body[:max_bytes]).decode(encoding, errors="replace")
    except LookupError:
        return bytes(body[:max_bytes]).decode("utf-8", errors="replace")
