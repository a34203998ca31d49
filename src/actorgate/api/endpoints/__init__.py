"""
API Endpoints Package for the ActorGate Client

Contains resource clients for actors, request queues and users.
"""

from .base_endpoint import BaseEndpoint
from .actor_endpoints import ActorCollectionEndpoints, ActorEndpoints
from .request_queue_endpoints import RequestQueueCollectionEndpoints, RequestQueueEndpoints
from .user_endpoints import UserEndpoints

__all__ = [
    'BaseEndpoint',
    'ActorCollectionEndpoints',
    'ActorEndpoints',
    'RequestQueueCollectionEndpoints',
    'RequestQueueEndpoints',
    'UserEndpoints'
]
