"""ActorGate - Python client for the ActorGate platform API

Resilient HTTP transport with body codecs, gzip compression, retries with
exponential backoff, classified errors and cursor pagination.
"""

__version__ = "0.1.0"
__author__ = "ActorGate Team"
__description__ = "Python client for the ActorGate platform API"

from .client import ActorGateClient
from .core.config_manager import ClientConfig, ConfigManager
from .api.errors import (
    CallCancelledError, ClassifiedError, ErrorKind, HttpStatusError,
    InvalidResponseBodyError, NetworkError, AttemptTimeoutError, RequestValidationError
)
from .api.request_builder import Code

__all__ = [
    "ActorGateClient",
    "ClientConfig",
    "ConfigManager",
    "CallCancelledError",
    "ClassifiedError",
    "ErrorKind",
    "HttpStatusError",
    "InvalidResponseBodyError",
    "NetworkError",
    "AttemptTimeoutError",
    "RequestValidationError",
    "Code",
]
