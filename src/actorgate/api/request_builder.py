"""
Request Builder for the ActorGate API Client

Builds request descriptors from resource-client calls and serializes
outgoing bodies: JSON encoding, content-type handling, and rendering of
function-valued payload fields as source text.
"""

import inspect
import json
import logging
import re
import textwrap
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Dict, Optional, Tuple

from requests.structures import CaseInsensitiveDict

from .errors import RequestValidationError


RESPONSE_TYPES = ('bytes', 'stream')
ALLOWED_METHODS = ('GET', 'HEAD', 'POST', 'PUT', 'PATCH', 'DELETE')
CONTENT_TYPE_JSON = 'application/json'

_TOKEN = r"[!#$%&'*+.^_`|~0-9A-Za-z-]+"
_TYPE_RE = re.compile(rf'^{_TOKEN}/{_TOKEN}$')
_PARAM_RE = re.compile(rf'^\s*({_TOKEN})=({_TOKEN}|"(?:[^"\\]|\\.)*")\s*$')


@dataclass(frozen=True)
class Code:
    """
    Function-valued payload field, carried as its source text.

    Platform inputs may contain functions (e.g. page functions of a crawler).
    Python cannot ship live callables, so they travel as this tagged variant
    and are rendered as plain strings when ``stringify_functions`` is on.
    """
    source: str
    kind: str = field(default='code', init=False)

    @classmethod
    def from_function(cls, func) -> 'Code':
        """Capture the source text of a Python callable"""
        try:
            source = inspect.getsource(func)
        except (OSError, TypeError) as e:
            raise RequestValidationError(f"Cannot read source of {func!r}", cause=e)
        return cls(textwrap.dedent(source).strip())


@dataclass
class RequestDescriptor:
    """Everything needed to perform a single HTTP attempt"""
    method: str
    url: str
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    params: Optional[Dict[str, Any]] = None
    data: Any = None
    stringify_functions: bool = False
    force_buffer: bool = False
    response_type: str = 'bytes'
    timeout: Optional[float] = None

    def copy(self) -> 'RequestDescriptor':
        """Copy with independent header and parameter mappings"""
        return replace(
            self,
            headers=CaseInsensitiveDict(self.headers),
            params=dict(self.params) if self.params is not None else None
        )


def is_bytes_like(value: Any) -> bool:
    return isinstance(value, (bytes, bytearray, memoryview))


def is_stream(value: Any) -> bool:
    """File-like objects and iterators are sent as-is by requests"""
    if isinstance(value, (str, bytes, bytearray, memoryview, dict, list, tuple)):
        return False
    return hasattr(value, 'read') or hasattr(value, '__next__')


class _PlatformJSONEncoder(json.JSONEncoder):
    """JSON encoder that understands dates"""

    def default(self, o):
        if isinstance(o, (datetime, date)):
            return o.isoformat()
        return super().default(o)


class _FunctionsJSONEncoder(_PlatformJSONEncoder):
    """Renders Code values as their source text instead of dropping them"""

    def default(self, o):
        if isinstance(o, Code):
            return o.source
        return super().default(o)


def _drop_code_values(value: Any) -> Any:
    """Remove Code values the way a plain JSON encoder drops functions"""
    if isinstance(value, dict):
        return {k: _drop_code_values(v) for k, v in value.items() if not isinstance(v, Code)}
    if isinstance(value, (list, tuple)):
        return [None if isinstance(v, Code) else _drop_code_values(v) for v in value]
    return value


def stringify_with_functions(data: Any) -> str:
    """json.dumps() that serializes Code values to strings"""
    return json.dumps(data, cls=_FunctionsJSONEncoder, separators=(',', ':'), ensure_ascii=False)


class ContentTypeHandler:
    """Handles content types for request and response bodies"""

    @staticmethod
    def parse_header(header: Optional[str]) -> Tuple[str, Dict[str, str]]:
        """
        Parse a Content-Type header into (type, parameters)

        Raises:
            ValueError: If the header is missing or malformed
        """
        if not header or not isinstance(header, str):
            raise ValueError("Content-Type header is missing")

        media_type, _, rest = header.partition(';')
        media_type = media_type.strip().lower()
        if not _TYPE_RE.match(media_type):
            raise ValueError(f"Invalid media type: {media_type!r}")

        parameters = {}
        for chunk in filter(None, (p.strip() for p in rest.split(';'))):
            match = _PARAM_RE.match(chunk)
            if not match:
                raise ValueError(f"Invalid Content-Type parameter: {chunk!r}")
            key, value = match.groups()
            if value.startswith('"'):
                value = re.sub(r'\\(.)', r'\1', value[1:-1])
            parameters[key.lower()] = value

        return media_type, parameters

    @staticmethod
    def prepare_json_content(data: Any) -> bytes:
        """Serialize structured data to UTF-8 JSON"""
        try:
            body = json.dumps(
                _drop_code_values(data),
                cls=_PlatformJSONEncoder,
                separators=(',', ':'),
                ensure_ascii=False
            )
        except (TypeError, ValueError) as e:
            raise RequestValidationError(f"Failed to serialize JSON data: {e}", cause=e)
        return body.encode('utf-8')

    @classmethod
    def default_transform(cls, data: Any, headers: CaseInsensitiveDict) -> Any:
        """
        Structural transform for outgoing bodies

        Raw bytes, strings and streams pass through untouched. Anything else
        is encoded as JSON and the Content-Type header is set if missing.
        """
        if data is None or is_bytes_like(data) or isinstance(data, str) or is_stream(data):
            return data

        body = cls.prepare_json_content(data)
        if 'Content-Type' not in headers:
            headers['Content-Type'] = CONTENT_TYPE_JSON
        return body


def serialize_request(descriptor: RequestDescriptor) -> RequestDescriptor:
    """Request interceptor: serialize the body and set content headers"""
    if descriptor.data is None:
        return descriptor

    headers = CaseInsensitiveDict(descriptor.headers)
    data = ContentTypeHandler.default_transform(descriptor.data, headers)

    # Second encoding, this time keeping Code values as source text
    if descriptor.stringify_functions and isinstance(descriptor.data, (dict, list, tuple)):
        try:
            content_type, _ = ContentTypeHandler.parse_header(headers.get('Content-Type'))
        except ValueError:
            content_type = None

        if content_type == CONTENT_TYPE_JSON:
            try:
                data = stringify_with_functions(descriptor.data).encode('utf-8')
            except (TypeError, ValueError) as e:
                raise RequestValidationError(f"Failed to serialize JSON data: {e}", cause=e)

    return replace(descriptor, data=data, headers=headers)


class RequestBuilder:
    """
    Builds request descriptors for the transport.

    Features:
    - URL construction relative to the API base URL
    - Query parameter cleanup
    - Default header management
    - Early validation of malformed requests
    - Sanitized request logging
    """

    def __init__(
        self,
        base_url: str,
        default_headers: Optional[Dict[str, str]] = None,
        default_timeout: Optional[float] = None
    ):
        self.base_url = base_url.rstrip('/')
        self.default_headers = CaseInsensitiveDict(default_headers or {})
        self.default_timeout = default_timeout
        self.logger = logging.getLogger(__name__)

    def build_url(self, path: str) -> str:
        """Build full URL from base URL and path"""
        if path.startswith(('http://', 'https://')):
            return path
        if not path:
            return self.base_url
        return f"{self.base_url}/{path.lstrip('/')}"

    @staticmethod
    def clean_params(params: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        """Drop None values and render booleans the way the API expects"""
        if not params:
            return None
        cleaned = {}
        for key, value in params.items():
            if value is None:
                continue
            if isinstance(value, bool):
                value = 'true' if value else 'false'
            cleaned[key] = value
        return cleaned or None

    def build_request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        data: Any = None,
        headers: Optional[Dict[str, str]] = None,
        stringify_functions: bool = False,
        force_buffer: bool = False,
        response_type: str = 'bytes',
        timeout: Optional[float] = None
    ) -> RequestDescriptor:
        """
        Build a request descriptor

        Raises:
            RequestValidationError: If the request is malformed
        """
        method = (method or '').upper()
        if method not in ALLOWED_METHODS:
            raise RequestValidationError(f"Unsupported HTTP method: {method!r}")
        if response_type not in RESPONSE_TYPES:
            raise RequestValidationError(f"Unsupported response type: {response_type!r}")
        if timeout is not None and timeout <= 0:
            raise RequestValidationError(f"Timeout must be positive, got {timeout}")
        if not isinstance(path, str):
            raise RequestValidationError(f"Request path must be a string, got {type(path).__name__}")

        final_headers = CaseInsensitiveDict(self.default_headers)
        if headers:
            final_headers.update(headers)

        descriptor = RequestDescriptor(
            method=method,
            url=self.build_url(path),
            headers=final_headers,
            params=self.clean_params(params),
            data=data,
            stringify_functions=stringify_functions,
            force_buffer=force_buffer,
            response_type=response_type,
            timeout=timeout or self.default_timeout
        )

        self.logger.debug(f"Built request: {self._sanitize_for_logging(descriptor)}")
        return descriptor

    def _sanitize_for_logging(self, descriptor: RequestDescriptor) -> Dict[str, Any]:
        """Sanitize request for logging (mask credentials, truncate bodies)"""
        headers = dict(descriptor.headers)
        sensitive_headers = ['authorization', 'x-api-key', 'cookie']

        for key in list(headers.keys()):
            if key.lower() in sensitive_headers:
                headers[key] = '[MASKED]'

        data = descriptor.data
        if isinstance(data, (str, bytes)) and len(data) > 1000:
            data = data[:1000] + ('... [TRUNCATED]' if isinstance(data, str) else b'... [TRUNCATED]')
        elif data is not None and not isinstance(data, (str, bytes)):
            data = f"<{type(data).__name__}>"

        return {
            'method': descriptor.method,
            'url': descriptor.url,
            'params': descriptor.params,
            'headers': headers,
            'data': data
        }
