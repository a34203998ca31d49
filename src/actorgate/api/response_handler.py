"""
Response Handler for the ActorGate API Client

Parses response bodies by content type and turns error statuses into
classified errors carrying the platform's error details.
"""

import json
import logging
import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlparse

import requests
from requests.structures import CaseInsensitiveDict

from .errors import HttpStatusError, InvalidResponseBodyError
from .request_builder import CONTENT_TYPE_JSON, ContentTypeHandler, RequestDescriptor


RATE_LIMIT_EXCEEDED_STATUS_CODE = 429

_TEXT_TYPE_RXS = (
    re.compile(r'^text/', re.IGNORECASE),
    re.compile(r'^application/.*xml$', re.IGNORECASE),
)


class BodyKind(Enum):
    """Closed set of body representations, RAW being the fallback"""
    JSON = "json"
    TEXT = "text"
    RAW = "raw"

    @classmethod
    def for_content_type(cls, content_type: str) -> 'BodyKind':
        if content_type == CONTENT_TYPE_JSON:
            return cls.JSON
        if any(rx.match(content_type) for rx in _TEXT_TYPE_RXS):
            return cls.TEXT
        return cls.RAW


@dataclass
class ResponseEnvelope:
    """Response of a single attempt together with the request that produced it"""
    status_code: int
    headers: CaseInsensitiveDict
    body: Any
    request: RequestDescriptor
    elapsed_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    @property
    def content_type(self) -> Optional[str]:
        return self.headers.get('Content-Type')

    def summary(self) -> Dict[str, Any]:
        """Compact description of the response for error reports"""
        return {
            'status': self.status_code,
            'headers': dict(self.headers),
            'method': self.request.method,
            'url': self.request.url
        }

    @classmethod
    def from_response(cls, response: requests.Response, request: RequestDescriptor) -> 'ResponseEnvelope':
        """Wrap a requests.Response, reading the body unless it is streamed"""
        if request.response_type == 'stream':
            body = response.raw
        else:
            body = response.content

        elapsed_ms = 0.0
        if getattr(response, 'elapsed', None) is not None:
            elapsed_ms = response.elapsed.total_seconds() * 1000

        return cls(
            status_code=response.status_code,
            headers=CaseInsensitiveDict(response.headers),
            body=body,
            request=request,
            elapsed_ms=elapsed_ms
        )


class ResponseParser:
    """Parses response bodies based on content type"""

    @staticmethod
    def decode(body: bytes, charset: Optional[str]) -> str:
        return bytes(body).decode(charset or 'utf-8')

    @classmethod
    def maybe_parse_body(cls, body: bytes, content_type_header: Optional[str]) -> Any:
        """
        Parse body according to its content type

        Bodies with an unknown or unparsable content type are returned unchanged.
        """
        try:
            content_type, parameters = ContentTypeHandler.parse_header(content_type_header)
        except ValueError:
            return body

        kind = BodyKind.for_content_type(content_type)
        if kind is BodyKind.RAW:
            return body

        text = cls.decode(body, parameters.get('charset'))
        if kind is BodyKind.JSON:
            return json.loads(text)
        return text


def parse_response_body(envelope: ResponseEnvelope) -> ResponseEnvelope:
    """Response interceptor: parse the raw body into a structured value"""
    request = envelope.request
    if (
        envelope.body is None
        or request.response_type != 'bytes'
        or request.force_buffer
    ):
        return envelope

    if len(envelope.body) == 0:
        # Empty bodies are reported as None
        return replace(envelope, body=None)

    try:
        body = ResponseParser.maybe_parse_body(envelope.body, envelope.content_type)
    except (ValueError, LookupError) as e:
        # json.JSONDecodeError and UnicodeDecodeError are both ValueErrors,
        # LookupError covers an unknown charset
        raise InvalidResponseBodyError(envelope, e)

    return replace(envelope, body=body)


class StatusCodeHandler:
    """Turns error responses into HttpStatusError"""

    @staticmethod
    def is_ok(status_code: int) -> bool:
        return 200 <= status_code < 400

    @classmethod
    def build_error(cls, envelope: ResponseEnvelope, attempt: int = 1) -> HttpStatusError:
        details = cls._extract_error_details(envelope)
        request = envelope.request
        return HttpStatusError(
            message=details.get('message') or f"HTTP {envelope.status_code} error",
            http_status=envelope.status_code,
            response=envelope,
            error_type=details.get('type'),
            attempt=attempt,
            http_method=request.method,
            path=urlparse(request.url).path,
            details=details
        )

    @staticmethod
    def _extract_error_details(envelope: ResponseEnvelope) -> Dict[str, Any]:
        """Extract error details from an already parsed body"""
        body = envelope.body

        if isinstance(body, Mapping):
            error_info = body.get('error')
            if isinstance(error_info, Mapping):
                return {
                    'message': error_info.get('message'),
                    'type': error_info.get('type'),
                    'details': dict(error_info)
                }
            if isinstance(error_info, str):
                return {'message': error_info}
            return {
                'message': body.get('message', body.get('detail')),
                'type': body.get('type'),
                'details': dict(body)
            }

        if isinstance(body, (bytes, bytearray)):
            body = bytes(body).decode('utf-8', errors='replace')
        if isinstance(body, str) and body:
            return {'message': f"Unexpected error: {body[:500]}"}

        return {}
