"""
Helpers building ``requests.Response`` objects as a session returns them.
"""

import io
import json
from datetime import timedelta
from typing import Any, Dict, Optional

import requests


TEST_BASE_URL = "https://api.actorgate.test/v2"


def make_response(
    status_code: int = 200,
    body: Any = None,
    content_type: Optional[str] = "application/json",
    headers: Optional[Dict[str, str]] = None
) -> requests.Response:
    """Build a requests.Response with the given body"""
    response = requests.Response()
    response.status_code = status_code
    if body is None:
        content = b''
    elif isinstance(body, bytes):
        content = body
    elif isinstance(body, str):
        content = body.encode('utf-8')
    else:
        content = json.dumps(body).encode('utf-8')
    response._content = content
    response._content_consumed = True
    response.raw = io.BytesIO(content)
    if content_type:
        response.headers['Content-Type'] = content_type
    response.headers.update(headers or {})
    response.elapsed = timedelta(milliseconds=12)
    response.url = TEST_BASE_URL
    return response


def data_response(data: Any, status_code: int = 200) -> requests.Response:
    """JSON response wrapping data in the platform's envelope"""
    return make_response(status_code, {"data": data})


def error_response(status_code: int, error_body: Dict[str, Any]) -> requests.Response:
    return make_response(status_code, error_body)
