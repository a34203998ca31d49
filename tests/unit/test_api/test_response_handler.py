"""
Unit tests for response parsing and status code handling.
"""

import io
import json

import pytest
from requests.structures import CaseInsensitiveDict

from actorgate.api.errors import ErrorKind, HttpStatusError, InvalidResponseBodyError
from actorgate.api.request_builder import RequestDescriptor
from actorgate.api.response_handler import (
    BodyKind, ResponseEnvelope, ResponseParser, StatusCodeHandler, parse_response_body
)
from tests.fixtures.http import make_response
from tests.fixtures.sample_data import SAMPLE_ERROR_BODIES


def _envelope(body, content_type='application/json', status_code=200, **request_kwargs):
    request = RequestDescriptor(
        method=request_kwargs.pop('method', 'GET'),
        url='https://api.actorgate.test/v2/acts/abc',
        **request_kwargs
    )
    headers = CaseInsensitiveDict({'Content-Type': content_type} if content_type else {})
    return ResponseEnvelope(status_code=status_code, headers=headers, body=body, request=request)


class TestBodyKind:
    """Test suite for content type dispatch"""

    @pytest.mark.parametrize("content_type, kind", [
        ('application/json', BodyKind.JSON),
        ('text/plain', BodyKind.TEXT),
        ('text/html', BodyKind.TEXT),
        ('application/xml', BodyKind.TEXT),
        ('application/rss+xml', BodyKind.TEXT),
        ('application/octet-stream', BodyKind.RAW),
        ('image/png', BodyKind.RAW),
        ('application/ld+json', BodyKind.RAW),
    ])
    def test_for_content_type(self, content_type, kind):
        assert BodyKind.for_content_type(content_type) is kind


class TestParseResponseBody:
    """Test suite for the parsing interceptor"""

    def test_json_body_is_parsed(self):
        result = parse_response_body(_envelope(b'{"data":{"id":"abc"}}'))
        assert result.body == {'data': {'id': 'abc'}}

    def test_text_body_is_decoded_with_charset(self):
        body = 'Příliš žluťoučký'.encode('iso-8859-2')
        result = parse_response_body(_envelope(body, 'text/plain; charset=iso-8859-2'))
        assert result.body == 'Příliš žluťoučký'

    def test_raw_body_is_left_as_bytes(self):
        body = b'\x89PNG\r\n'
        assert parse_response_body(_envelope(body, 'image/png')).body == body

    def test_missing_content_type_keeps_raw_bytes(self):
        assert parse_response_body(_envelope(b'{"a":1}', None)).body == b'{"a":1}'

    def test_unparsable_content_type_keeps_raw_bytes(self):
        assert parse_response_body(_envelope(b'{"a":1}', 'garbage')).body == b'{"a":1}'

    @pytest.mark.parametrize("content_type", ['application/json', 'text/plain', 'image/png', None])
    def test_empty_body_becomes_none(self, content_type):
        assert parse_response_body(_envelope(b'', content_type)).body is None

    def test_force_buffer_skips_parsing(self):
        result = parse_response_body(_envelope(b'{"a":1}', force_buffer=True))
        assert result.body == b'{"a":1}'

    def test_stream_response_skips_parsing(self):
        stream = io.BytesIO(b'{"a":1}')
        result = parse_response_body(_envelope(stream, response_type='stream'))
        assert result.body is stream

    def test_truncated_json_is_invalid_response_body(self):
        envelope = _envelope(b'{"data":{"id":"ab', status_code=200)

        with pytest.raises(InvalidResponseBodyError) as exc_info:
            parse_response_body(envelope)

        error = exc_info.value
        assert error.kind is ErrorKind.INVALID_RESPONSE_BODY
        assert error.response is envelope
        assert isinstance(error.cause, json.JSONDecodeError)
        assert error.http_status == 200
        assert error.message.startswith('Response body could not be parsed.')

    def test_invalid_utf8_is_invalid_response_body(self):
        with pytest.raises(InvalidResponseBodyError):
            parse_response_body(_envelope(b'\xff\xfe\xfa', 'text/plain; charset=utf-8'))

    def test_unknown_charset_is_invalid_response_body(self):
        with pytest.raises(InvalidResponseBodyError):
            parse_response_body(_envelope(b'abc', 'text/plain; charset=no-such-charset'))

    def test_original_envelope_is_not_mutated(self):
        envelope = _envelope(b'{"a":1}')
        parse_response_body(envelope)
        assert envelope.body == b'{"a":1}'


class TestResponseParser:
    """Test suite for ResponseParser"""

    def test_json_with_charset(self):
        body = json.dumps({'name': 'čaj'}).encode('utf-8')
        assert ResponseParser.maybe_parse_body(body, 'application/json; charset=utf-8') == {'name': 'čaj'}

    def test_decode_defaults_to_utf8(self):
        assert ResponseParser.decode('ü'.encode('utf-8'), None) == 'ü'


class TestResponseEnvelope:
    """Test suite for ResponseEnvelope"""

    def test_from_response_reads_content(self):
        request = RequestDescriptor(method='GET', url='https://api.actorgate.test/v2/acts')
        response = make_response(201, {'data': {}}, headers={'X-Request-Id': 'r1'})
        envelope = ResponseEnvelope.from_response(response, request)

        assert envelope.status_code == 201
        assert envelope.body == b'{"data": {}}'
        assert envelope.headers['x-request-id'] == 'r1'
        assert envelope.content_type == 'application/json'
        assert envelope.request is request
        assert envelope.elapsed_ms == pytest.approx(12.0)
        assert envelope.ok

    def test_from_response_keeps_stream(self):
        request = RequestDescriptor(method='GET', url='https://api.actorgate.test/v2/acts', response_type='stream')
        response = make_response(200, b'abc')
        response.raw = io.BytesIO(b'abc')

        assert ResponseEnvelope.from_response(response, request).body is response.raw


class TestStatusCodeHandler:
    """Test suite for StatusCodeHandler"""

    @pytest.mark.parametrize("status_code, ok", [(200, True), (204, True), (302, True), (400, False), (500, False)])
    def test_is_ok(self, status_code, ok):
        assert StatusCodeHandler.is_ok(status_code) is ok

    def test_build_error_from_platform_error(self):
        envelope = _envelope(SAMPLE_ERROR_BODIES['not_found'], status_code=404)
        error = StatusCodeHandler.build_error(envelope, attempt=2)

        assert isinstance(error, HttpStatusError)
        assert error.kind is ErrorKind.HTTP_STATUS
        assert error.status_code == 404
        assert error.message == 'Actor was not found'
        assert error.error_type == 'record-not-found'
        assert error.attempt == 2
        assert error.http_method == 'GET'
        assert error.path == '/v2/acts/abc'
        assert error.response is envelope

    def test_build_error_from_string_error(self):
        error = StatusCodeHandler.build_error(_envelope({'error': 'Bad things'}, status_code=400))
        assert error.message == 'Bad things'
        assert error.error_type is None

    def test_build_error_from_message_field(self):
        error = StatusCodeHandler.build_error(_envelope({'detail': 'Not allowed'}, status_code=403))
        assert error.message == 'Not allowed'

    def test_build_error_from_text_body(self):
        error = StatusCodeHandler.build_error(_envelope('Bad Gateway', 'text/html', status_code=502))
        assert error.message == 'Unexpected error: Bad Gateway'

    def test_build_error_without_body(self):
        error = StatusCodeHandler.build_error(_envelope(None, status_code=503))
        assert error.message == 'HTTP 503 error'

    def test_error_to_dict(self):
        envelope = _envelope(SAMPLE_ERROR_BODIES['rate_limit'], status_code=429, method='POST')
        result = StatusCodeHandler.build_error(envelope, attempt=3).to_dict()

        assert result == {
            'kind': 'http-status',
            'message': 'You have exceeded the rate limit',
            'http_status': 429,
            'attempt': 3,
            'error_type': 'rate-limit-exceeded',
            'http_method': 'POST',
            'path': '/v2/acts/abc',
            'response': {
                'status': 429,
                'headers': {'Content-Type': 'application/json'},
                'method': 'POST',
                'url': 'https://api.actorgate.test/v2/acts/abc'
            }
        }

    def test_error_to_dict_without_response(self):
        error = HttpStatusError('bad', http_status=400)
        assert 'response' not in error.to_dict()

    def test_invalid_body_error_to_dict_includes_response(self):
        envelope = _envelope(b'{"trunc', status_code=200)
        result = InvalidResponseBodyError(envelope, ValueError('truncated')).to_dict()

        assert result['kind'] == 'invalid-response-body'
        assert result['cause'] == 'ValueError: truncated'
        assert result['response']['status'] == 200
        assert result['response']['url'] == 'https://api.actorgate.test/v2/acts/abc'
