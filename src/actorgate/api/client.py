"""
Core HTTP Client for the ActorGate API

HTTP transport with session management, connection pooling, an interceptor
pipeline for request/response bodies, retries with exponential backoff and
classified errors.
"""

import logging
import platform
import threading
import time
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests
from requests.adapters import HTTPAdapter
from requests.exceptions import (
    ConnectionError, InvalidHeader, InvalidSchema, InvalidURL,
    MissingSchema, RequestException, Timeout, URLRequired
)
from urllib3.util.retry import Retry

from .. import __version__
from .errors import AttemptTimeoutError, NetworkError, RequestValidationError
from .interceptors import InterceptorPipeline
from .compression import MIN_GZIP_BYTES
from .request_builder import RequestBuilder, RequestDescriptor, is_stream
from .response_handler import RATE_LIMIT_EXCEEDED_STATUS_CODE, ResponseEnvelope, StatusCodeHandler
from .retry import BackoffEngine, RetryPolicy


DEFAULT_BASE_URL = "https://api.actorgate.io/v2"
DEFAULT_TIMEOUT_SECS = 360

_MALFORMED_REQUEST_ERRORS = (InvalidURL, MissingSchema, InvalidSchema, InvalidHeader, URLRequired)


class ConnectionPool:
    """Connection pool manager for efficient HTTP connections"""

    def __init__(self, pool_connections: int = 10, pool_maxsize: int = 10):
        self.pool_connections = pool_connections
        self.pool_maxsize = pool_maxsize
        self.adapters = {}

    def get_adapter(self, scheme: str) -> HTTPAdapter:
        """Get or create HTTP adapter for the given scheme"""
        if scheme not in self.adapters:
            adapter = HTTPAdapter(
                pool_connections=self.pool_connections,
                pool_maxsize=self.pool_maxsize,
                max_retries=Retry(total=0, raise_on_status=False)  # We handle retries at a higher level
            )
            self.adapters[scheme] = adapter

        return self.adapters[scheme]


class ClientStatistics:
    """Call statistics of a client instance"""

    def __init__(self):
        self.calls = 0
        self.requests = 0
        self.rate_limit_errors: List[int] = []
        self.total_response_time = 0.0
        self._lock = threading.Lock()

    def record_call(self):
        with self._lock:
            self.calls += 1

    def record_request(self):
        with self._lock:
            self.requests += 1

    def record_response_time(self, response_time: float):
        with self._lock:
            self.total_response_time += response_time

    def add_rate_limit_error(self, attempt: int):
        """Count a 429 response, indexed by attempt (1-based)"""
        if attempt < 1:
            raise ValueError(f"Attempt must be at least 1, got {attempt}")
        with self._lock:
            missing = attempt - len(self.rate_limit_errors)
            if missing > 0:
                self.rate_limit_errors.extend([0] * missing)
            self.rate_limit_errors[attempt - 1] += 1

    def get_metrics(self) -> Dict[str, Any]:
        """Get current statistics"""
        with self._lock:
            return {
                'calls': self.calls,
                'requests': self.requests,
                'rate_limit_errors': list(self.rate_limit_errors),
                'average_response_time': self.total_response_time / self.requests if self.requests else 0.0
            }

    def reset(self):
        """Reset all counters"""
        with self._lock:
            self.calls = 0
            self.requests = 0
            self.rate_limit_errors = []
            self.total_response_time = 0.0


class HTTPClient:
    """
    HTTP transport shared by all resource clients.

    Features:
    - Session management with pooled connections
    - Body serialization, compression and parsing via interceptors
    - Retry logic with exponential backoff and jitter
    - Classified errors with the response and cause attached
    - Call statistics
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: Optional[str] = None,
        timeout_secs: float = DEFAULT_TIMEOUT_SECS,
        retry_policy: Optional[RetryPolicy] = None,
        gzip_enabled: bool = True,
        min_gzip_bytes: int = MIN_GZIP_BYTES,
        pool_connections: int = 10,
        pool_maxsize: int = 10,
        verify_ssl: bool = True,
        proxies: Optional[Dict[str, str]] = None,
        user_agent_suffix: Optional[str] = None,
        stringify_functions: bool = False,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Initialize HTTP client with configuration

        Args:
            base_url: Base URL for all API requests
            token: API token sent as a bearer header
            timeout_secs: Timeout of a single attempt in seconds
            retry_policy: Retry policy for calls that don't supply their own
            gzip_enabled: Whether request bodies may be gzipped
            min_gzip_bytes: Minimum body size to compress
            pool_connections: Number of connection pools
            pool_maxsize: Maximum size per connection pool
            verify_ssl: Whether to verify SSL certificates
            proxies: Proxy configuration
            user_agent_suffix: Appended to the User-Agent header
            stringify_functions: Default for calls that don't choose themselves
            sleep: Function used to wait between attempts
        """
        self.base_url = base_url.rstrip('/')
        self.timeout_secs = timeout_secs
        self.retry_policy = retry_policy or RetryPolicy()
        self.verify_ssl = verify_ssl
        self.proxies = proxies or {}
        self.user_agent = self._build_user_agent(user_agent_suffix)
        self.stringify_functions = stringify_functions
        self._sleep = sleep

        # Initialize components
        self.session = requests.Session()
        self.request_builder = RequestBuilder(self.base_url, default_timeout=timeout_secs)
        self.pipeline = InterceptorPipeline.default(gzip_enabled=gzip_enabled, min_gzip_bytes=min_gzip_bytes)
        self.connection_pool = ConnectionPool(pool_connections, pool_maxsize)
        self.stats = ClientStatistics()

        # Setup logging
        self.logger = logging.getLogger(__name__)

        # Configure session
        self._configure_session(token)

    @staticmethod
    def _build_user_agent(suffix: Optional[str]) -> str:
        user_agent = f"ActorGateClient/{__version__} ({platform.system()}; Python/{platform.python_version()})"
        if suffix:
            user_agent = f"{user_agent} {suffix}"
        return user_agent

    def _configure_session(self, token: Optional[str]):
        """Configure the requests session with adapters and headers"""
        self.session.headers.update({
            'User-Agent': self.user_agent,
            'Accept': 'application/json, */*'
        })
        if token:
            self.session.headers['Authorization'] = f"Bearer {token}"

        for scheme in ['http', 'https']:
            adapter = self.connection_pool.get_adapter(scheme)
            self.session.mount(f'{scheme}://', adapter)

        self.session.verify = self.verify_ssl
        if self.proxies:
            self.session.proxies.update(self.proxies)

    def _perform_attempt(self, descriptor: RequestDescriptor, attempt: int) -> ResponseEnvelope:
        """Run one attempt: interceptors, transport, response classification"""
        self.stats.record_request()
        prepared = self.pipeline.run_request(descriptor)
        timeout = prepared.timeout or self.timeout_secs
        body = prepared.data
        if isinstance(body, str):
            body = body.encode('utf-8')

        self.logger.debug(f"Attempt {attempt}: {prepared.method} {prepared.url}")
        try:
            response = self.session.request(
                method=prepared.method,
                url=prepared.url,
                params=prepared.params,
                data=body,
                headers=dict(prepared.headers),
                timeout=timeout,
                stream=prepared.response_type == 'stream'
            )
        except Timeout as e:
            raise AttemptTimeoutError(f"Request timed out after {timeout} seconds", cause=e)
        except _MALFORMED_REQUEST_ERRORS as e:
            raise RequestValidationError(f"Malformed request: {e}", cause=e)
        except ConnectionError as e:
            raise NetworkError(f"Connection error: {e}", cause=e)
        except RequestException as e:
            raise NetworkError(f"Request failed: {e}", cause=e)

        try:
            return self._handle_response(response, prepared, attempt)
        except BaseException:
            response.close()
            raise

    def _handle_response(
        self,
        response: requests.Response,
        prepared: RequestDescriptor,
        attempt: int
    ) -> ResponseEnvelope:
        """
        Parse the response of one attempt, raising HttpStatusError on error statuses

        Streamed error responses are read in full so the platform's error
        details reach the raised error. The caller closes the response when this raises.
        """
        if prepared.response_type == 'stream' and not StatusCodeHandler.is_ok(response.status_code):
            prepared = replace(prepared, response_type='bytes')

        envelope = ResponseEnvelope.from_response(response, prepared)
        self.stats.record_response_time(envelope.elapsed_ms)

        # May raise InvalidResponseBodyError, which the retry engine handles
        envelope = self.pipeline.run_response(envelope)

        if StatusCodeHandler.is_ok(envelope.status_code):
            return envelope

        if envelope.status_code == RATE_LIMIT_EXCEEDED_STATUS_CODE:
            self.stats.add_rate_limit_error(attempt)

        raise StatusCodeHandler.build_error(envelope, attempt)

    def call(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        data: Any = None,
        headers: Optional[Dict[str, str]] = None,
        *,
        stringify_functions: Optional[bool] = None,
        force_buffer: bool = False,
        response_type: str = 'bytes',
        timeout: Optional[float] = None,
        retry_policy: Optional[RetryPolicy] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> ResponseEnvelope:
        """
        Perform a logical call, retrying failed attempts

        Args:
            method: HTTP method (GET, POST, PUT, DELETE, etc.)
            path: Path relative to the base URL, or an absolute URL
            params: URL query parameters
            data: Request body (structured value, str, bytes or stream)
            headers: Additional headers
            stringify_functions: Send Code values in JSON bodies as source text
            force_buffer: Return the body as raw bytes, never parse it
            response_type: 'bytes' to read the body, 'stream' for the raw stream
            timeout: Timeout of a single attempt in seconds
            retry_policy: Overrides the client's retry policy for this call
            cancel_event: Setting this event cancels remaining attempts and delays

        Returns:
            ResponseEnvelope with the parsed body

        Raises:
            ClassifiedError: When the call fails
            CallCancelledError: When cancel_event is set
        """
        self.stats.record_call()
        descriptor = self.request_builder.build_request(
            method,
            path,
            params=params,
            data=data,
            headers=headers,
            stringify_functions=self.stringify_functions if stringify_functions is None else stringify_functions,
            force_buffer=force_buffer,
            response_type=response_type,
            timeout=timeout
        )

        policy = retry_policy or self.retry_policy
        attempt_fn, repeatable = self._attempt_function(descriptor)
        if not repeatable:
            # A consumed stream cannot be sent twice
            self.logger.debug("Request body is a non-seekable stream, disabling retries")
            policy = policy.with_overrides(max_attempts=1)

        engine = BackoffEngine(policy, sleep=self._sleep)
        try:
            return engine.run(attempt_fn, cancel_event=cancel_event)
        except Exception as e:
            self.logger.debug(f"{descriptor.method} {descriptor.url} failed: {e}")
            raise

    def _attempt_function(self, descriptor: RequestDescriptor) -> Tuple[Callable[[int], ResponseEnvelope], bool]:
        """Attempt function for the call and whether it is safe to repeat"""
        data = descriptor.data

        def attempt_fn(attempt: int) -> ResponseEnvelope:
            return self._perform_attempt(descriptor, attempt)

        if not is_stream(data):
            return attempt_fn, True

        seekable = getattr(data, 'seekable', None)
        if not (callable(seekable) and seekable()):
            return attempt_fn, False

        start = data.tell()

        def rewinding_attempt_fn(attempt: int) -> ResponseEnvelope:
            data.seek(start)
            return self._perform_attempt(descriptor, attempt)

        return rewinding_attempt_fn, True

    def get(self, path: str, params: Optional[Dict[str, Any]] = None, **kwargs) -> ResponseEnvelope:
        """Make GET request"""
        return self.call('GET', path, params=params, **kwargs)

    def post(self, path: str, data: Any = None, **kwargs) -> ResponseEnvelope:
        """Make POST request"""
        return self.call('POST', path, data=data, **kwargs)

    def put(self, path: str, data: Any = None, **kwargs) -> ResponseEnvelope:
        """Make PUT request"""
        return self.call('PUT', path, data=data, **kwargs)

    def delete(self, path: str, **kwargs) -> ResponseEnvelope:
        """Make DELETE request"""
        return self.call('DELETE', path, **kwargs)

    def get_metrics(self) -> Dict[str, Any]:
        """Get call statistics"""
        return self.stats.get_metrics()

    def close(self):
        """Close the HTTP client and cleanup resources"""
        if self.session:
            self.session.close()
            self.logger.debug("HTTP client session closed")

    def __enter__(self) -> 'HTTPClient':
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()
