"""
ActorGate Client

Entry point of the library: builds the HTTP transport from a ClientConfig
and hands out resource clients sharing it.
"""

import logging
from typing import Any, Dict, Optional

from .api.client import HTTPClient
from .api.endpoints import (
    ActorCollectionEndpoints, ActorEndpoints, RequestQueueCollectionEndpoints,
    RequestQueueEndpoints, UserEndpoints
)
from .api.endpoints.user_endpoints import ME_USER_ID
from .core.config_manager import ClientConfig


class ActorGateClient:
    """
    Client for the ActorGate platform API.

    Usage:
        with ActorGateClient(ClientConfig(token='...')) as client:
            run = client.actor('john/web-scraper').start({'url': 'https://example.com'})
    """

    def __init__(self, config: Optional[ClientConfig] = None, **overrides: Any):
        """
        Args:
            config: Client configuration, defaults are used when omitted
            **overrides: Field values replacing those of config
        """
        config = config or ClientConfig()
        if overrides:
            config = ClientConfig(**{**config.model_dump(), **overrides})
        self.config = config
        self.logger = logging.getLogger(__name__)

        self.http_client = HTTPClient(
            base_url=config.base_url,
            token=config.token,
            timeout_secs=config.timeout_secs,
            retry_policy=config.to_retry_policy(),
            gzip_enabled=config.gzip_enabled,
            min_gzip_bytes=config.min_gzip_bytes,
            verify_ssl=config.verify_ssl,
            user_agent_suffix=config.user_agent_suffix,
            stringify_functions=config.stringify_functions
        )
        self.logger.debug(f"ActorGate client created for {config.base_url}")

    def actors(self) -> ActorCollectionEndpoints:
        """Client for the actor collection"""
        return ActorCollectionEndpoints(self.http_client)

    def actor(self, actor_id: str) -> ActorEndpoints:
        """Client for a single actor, by ID or "username/actor-name" """
        if not actor_id:
            raise ValueError("Actor ID is required")
        return ActorEndpoints(self.http_client, resource_id=actor_id)

    def request_queues(self) -> RequestQueueCollectionEndpoints:
        """Client for the request queue collection"""
        return RequestQueueCollectionEndpoints(self.http_client)

    def request_queue(self, queue_id: str, client_key: Optional[str] = None) -> RequestQueueEndpoints:
        """Client for a single request queue"""
        return RequestQueueEndpoints(
            self.http_client,
            resource_id=queue_id,
            client_key=client_key,
            max_page_limit=self.config.max_page_limit
        )

    def user(self, user_id: str = ME_USER_ID) -> UserEndpoints:
        """Client for a user, the token owner by default"""
        return UserEndpoints(self.http_client, resource_id=user_id)

    @property
    def stats(self) -> Dict[str, Any]:
        """Call statistics of this client"""
        return self.http_client.get_metrics()

    def close(self):
        self.http_client.close()

    def __enter__(self) -> 'ActorGateClient':
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()
