"""
Request Queue Endpoints for the ActorGate API Client

Handles request queue operations: queue CRUD, reading the queue head,
adding, updating and deleting requests, and cursor pagination over all
requests of a queue.

Queue calls use a higher attempt ceiling than the rest of the client.
"""

from typing import Any, Dict, Optional

from ..client import HTTPClient
from ..errors import HttpStatusError, RequestValidationError
from ..pagination import PageResult, PaginationIterator
from ..retry import RetryPolicy
from .base_endpoint import BaseEndpoint, catch_not_found_or_throw, parse_date_fields, pluck_data


DEFAULT_MAX_PAGE_LIMIT = 1000


class RequestQueueCollectionEndpoints(BaseEndpoint):
    """Request queue collection API endpoints."""

    def _get_base_path(self) -> str:
        return 'request-queues'

    def list(
        self,
        unnamed: Optional[bool] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        desc: Optional[bool] = None
    ) -> Dict[str, Any]:
        """
        List request queues

        Args:
            unnamed: Include unnamed queues
            limit: Maximum number of items to return
            offset: Number of items to skip
            desc: Sort by creation date in descending order
        """
        return self._list_resources(unnamed=unnamed, limit=limit, offset=offset, desc=desc)

    def get_or_create(self, name: Optional[str] = None) -> Dict[str, Any]:
        """Return the queue of the given name, creating it if needed; no name creates an unnamed queue"""
        return self._create_resource(None, name=name)


class RequestQueueEndpoints(BaseEndpoint):
    """
    Single request queue API endpoints.

    Args:
        client: Configured HTTPClient instance
        resource_id: Queue ID or "username/queue-name"
        client_key: Identifies the client accessing the queue, 1 to 32 characters
        max_page_limit: Default page size ceiling for paginate_requests
    """

    def __init__(
        self,
        client: HTTPClient,
        resource_id: str,
        client_key: Optional[str] = None,
        max_page_limit: int = DEFAULT_MAX_PAGE_LIMIT,
        retry_policy: Optional[RetryPolicy] = None
    ):
        if not resource_id:
            raise RequestValidationError("Request queue ID is required")
        if client_key is not None and not 1 <= len(client_key) <= 32:
            raise RequestValidationError("client_key must have between 1 and 32 characters")

        super().__init__(
            client,
            resource_id=resource_id,
            params={'clientKey': client_key},
            retry_policy=retry_policy or RetryPolicy.for_request_queues(client.retry_policy)
        )
        self.client_key = client_key
        self.max_page_limit = max_page_limit

    def _get_base_path(self) -> str:
        return 'request-queues'

    def get(self) -> Optional[Dict[str, Any]]:
        """Get the queue, None if it does not exist"""
        return self._get_resource()

    def update(self, new_fields: Dict[str, Any]) -> Dict[str, Any]:
        """Update the queue with the given fields"""
        self._validate_required_params({'new_fields': new_fields}, ['new_fields'])
        fields = {k: v for k, v in new_fields.items() if k != 'id'}
        return self._update_resource(fields)

    def delete(self) -> None:
        """Delete the queue"""
        self._delete_resource()

    def list_head(self, limit: Optional[int] = None) -> Dict[str, Any]:
        """
        Get requests from the beginning of the queue

        Returns:
            Dict with 'limit', 'queueModifiedAt', 'hadMultipleClients' and 'items'
        """
        return self._list_resources('head', limit=limit)

    def add_request(self, request: Dict[str, Any], forefront: bool = False) -> Dict[str, Any]:
        """
        Add a request to the queue

        The request's uniqueKey deduplicates it on the server.

        Returns:
            Dict with 'requestId', 'wasAlreadyPresent' and 'wasAlreadyHandled'
        """
        self._validate_required_params(request or {}, ['url', 'uniqueKey'])
        if request.get('id'):
            raise RequestValidationError('Request must not have an "id" field when adding it')
        return self._create_resource(request, 'requests', forefront=forefront)

    def get_request(self, request_id: str) -> Optional[Dict[str, Any]]:
        """Get a request by ID, None if it does not exist"""
        self._validate_required_params({'request_id': request_id}, ['request_id'])
        return self._get_resource(f'requests/{request_id}')

    def update_request(self, request: Dict[str, Any], forefront: bool = False) -> Dict[str, Any]:
        """Update a request, identified by its 'id' field"""
        self._validate_required_params(request or {}, ['id'])
        return self._update_resource(request, f"requests/{request['id']}", forefront=forefront)

    def delete_request(self, request_id: str) -> None:
        """Delete a request from the queue"""
        self._validate_required_params({'request_id': request_id}, ['request_id'])
        try:
            self._call('DELETE', f'requests/{request_id}')
        except HttpStatusError as e:
            catch_not_found_or_throw(e)

    def list_requests(
        self,
        limit: Optional[int] = None,
        exclusive_start_id: Optional[str] = None
    ) -> PageResult[Dict[str, Any]]:
        """Get one page of the queue's requests, continuing after exclusive_start_id"""
        body = self._call(
            'GET',
            'requests',
            params={'limit': limit, 'exclusiveStartId': exclusive_start_id}
        )
        return PageResult.from_dict(parse_date_fields(pluck_data(body)))

    def paginate_requests(
        self,
        limit: Optional[int] = None,
        max_page_limit: Optional[int] = None,
        exclusive_start_id: Optional[str] = None
    ) -> PaginationIterator[Dict[str, Any]]:
        """
        Iterate over all requests of the queue page by page

        Args:
            limit: Overall number of requests to return
            max_page_limit: Page size ceiling
            exclusive_start_id: Start after the request with this ID
        """
        return PaginationIterator(
            max_page_limit=max_page_limit or self.max_page_limit,
            get_page=self.list_requests,
            limit=limit,
            exclusive_start_id=exclusive_start_id
        )
