"""
User Endpoints for the ActorGate API Client
"""

from typing import Any, Dict, Optional

from ..client import HTTPClient
from .base_endpoint import BaseEndpoint


ME_USER_ID = 'me'


class UserEndpoints(BaseEndpoint):
    """User API endpoints. The default ID 'me' refers to the owner of the token."""

    def __init__(self, client: HTTPClient, resource_id: str = ME_USER_ID):
        super().__init__(client, resource_id=resource_id or ME_USER_ID)

    def _get_base_path(self) -> str:
        return 'users'

    def get(self) -> Optional[Dict[str, Any]]:
        """Get public or, for 'me', private user data"""
        return self._get_resource()
