"""
ActorGate API Client Package

HTTP transport for the ActorGate platform API. Provides body serialization
and compression, response parsing, retries with exponential backoff,
classified errors and cursor pagination.
"""

from .client import HTTPClient, ClientStatistics, DEFAULT_BASE_URL
from .errors import (
    CallCancelledError, ClassifiedError, ErrorKind, HttpStatusError,
    InvalidResponseBodyError, NetworkError, AttemptTimeoutError, RequestValidationError
)
from .interceptors import InterceptorPipeline
from .pagination import PageResult, PaginationIterator
from .request_builder import Code, RequestBuilder, RequestDescriptor
from .response_handler import BodyKind, ResponseEnvelope
from .retry import BackoffEngine, RetryPolicy
from .endpoints import (
    BaseEndpoint, ActorCollectionEndpoints, ActorEndpoints,
    RequestQueueCollectionEndpoints, RequestQueueEndpoints, UserEndpoints
)

__all__ = [
    'HTTPClient',
    'ClientStatistics',
    'DEFAULT_BASE_URL',
    'CallCancelledError',
    'ClassifiedError',
    'ErrorKind',
    'HttpStatusError',
    'InvalidResponseBodyError',
    'NetworkError',
    'AttemptTimeoutError',
    'RequestValidationError',
    'InterceptorPipeline',
    'PageResult',
    'PaginationIterator',
    'Code',
    'RequestBuilder',
    'RequestDescriptor',
    'BodyKind',
    'ResponseEnvelope',
    'BackoffEngine',
    'RetryPolicy',
    'BaseEndpoint',
    'ActorCollectionEndpoints',
    'ActorEndpoints',
    'RequestQueueCollectionEndpoints',
    'RequestQueueEndpoints',
    'UserEndpoints'
]
