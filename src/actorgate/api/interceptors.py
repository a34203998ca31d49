"""
Interceptor Pipeline for the ActorGate API Client

Ordered hooks applied to every attempt: request interceptors run before the
request is dispatched, response interceptors run on what comes back. Each
hook returns a new descriptor or envelope so the stages stay composable.
"""

import logging
from typing import Callable, Iterable, List, Optional

from .compression import MIN_GZIP_BYTES, gzip_interceptor
from .request_builder import RequestDescriptor, serialize_request
from .response_handler import ResponseEnvelope, parse_response_body


RequestInterceptor = Callable[[RequestDescriptor], RequestDescriptor]
ResponseInterceptor = Callable[[ResponseEnvelope], ResponseEnvelope]


class InterceptorPipeline:
    """Applies interceptors left to right; a raised error aborts the rest"""

    def __init__(
        self,
        request_interceptors: Optional[Iterable[RequestInterceptor]] = None,
        response_interceptors: Optional[Iterable[ResponseInterceptor]] = None
    ):
        self.request_interceptors: List[RequestInterceptor] = list(request_interceptors or [])
        self.response_interceptors: List[ResponseInterceptor] = list(response_interceptors or [])
        self.logger = logging.getLogger(__name__)

    def add_request_interceptor(self, interceptor: RequestInterceptor):
        self.request_interceptors.append(interceptor)

    def add_response_interceptor(self, interceptor: ResponseInterceptor):
        self.response_interceptors.append(interceptor)

    def run_request(self, descriptor: RequestDescriptor) -> RequestDescriptor:
        """Run request interceptors on a private copy of the descriptor"""
        state = descriptor.copy()
        for interceptor in self.request_interceptors:
            state = interceptor(state)
        return state

    def run_response(self, envelope: ResponseEnvelope) -> ResponseEnvelope:
        state = envelope
        for interceptor in self.response_interceptors:
            state = interceptor(state)
        return state

    @classmethod
    def default(cls, gzip_enabled: bool = True, min_gzip_bytes: int = MIN_GZIP_BYTES) -> 'InterceptorPipeline':
        """
        Standard pipeline of the client

        Serialization runs first so the compression decision sees the final
        body bytes and the headers serialization produced.
        """
        request_interceptors: List[RequestInterceptor] = [serialize_request]
        if gzip_enabled:
            request_interceptors.append(gzip_interceptor(min_gzip_bytes))
        return cls(request_interceptors, [parse_response_body])
