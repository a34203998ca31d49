"""
Request Compression for the ActorGate API Client

Gzips outgoing bodies that are large enough to be worth it. Compression is
an optimization only; it never fails a request.
"""

import gzip
import logging
from dataclasses import replace
from typing import Any, Callable, Optional

from requests.structures import CaseInsensitiveDict

from .request_builder import RequestDescriptor, is_bytes_like


MIN_GZIP_BYTES = 1024

logger = logging.getLogger(__name__)


def maybe_gzip_value(value: Any, min_bytes: int = MIN_GZIP_BYTES) -> Optional[bytes]:
    """Gzip the value when it is a string or bytes of at least min_bytes, otherwise return None"""
    # Unsupported types are skipped rather than rejected.
    if isinstance(value, str):
        raw = value.encode('utf-8')
    elif is_bytes_like(value):
        raw = bytes(value)
    else:
        return None

    if len(raw) < min_bytes:
        return None
    return gzip.compress(raw)


def maybe_gzip_request(descriptor: RequestDescriptor, min_bytes: int = MIN_GZIP_BYTES) -> RequestDescriptor:
    """Request interceptor: compress the body unless the caller set Content-Encoding"""
    if 'Content-Encoding' in descriptor.headers:
        return descriptor

    try:
        compressed = maybe_gzip_value(descriptor.data, min_bytes)
    except (OSError, ValueError, MemoryError) as e:
        logger.debug(f"Skipping request compression: {e}")
        return descriptor

    if compressed is None:
        return descriptor

    headers = CaseInsensitiveDict(descriptor.headers)
    headers['Content-Encoding'] = 'gzip'
    return replace(descriptor, data=compressed, headers=headers)


def gzip_interceptor(min_bytes: int = MIN_GZIP_BYTES) -> Callable[[RequestDescriptor], RequestDescriptor]:
    """Build a compression interceptor with a custom threshold"""
    def interceptor(descriptor: RequestDescriptor) -> RequestDescriptor:
        return maybe_gzip_request(descriptor, min_bytes)

    interceptor.__name__ = 'maybe_gzip_request'
    return interceptor
