"""
Base Endpoint Class for the ActorGate API

Abstract base class providing common functionality for all resource clients
including path building, parameter handling, response unwrapping and
standardized error handling.
"""

import base64
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from dateutil import parser as date_parser

from ..client import HTTPClient
from ..errors import ClassifiedError, HttpStatusError, RequestValidationError
from ..retry import RetryPolicy


PARSE_DATE_FIELDS_MAX_DEPTH = 3  # obj.data.someArrayField.[x].field
PARSE_DATE_FIELDS_KEY_SUFFIX = 'At'
NOT_FOUND_STATUS_CODE = 404
NOT_FOUND_ERROR_TYPES = ('record-not-found', 'record-or-token-not-found')


def pluck_data(obj: Any) -> Any:
    """Return the 'data' property of a response object or raise if there is none"""
    if isinstance(obj, dict) and 'data' in obj:
        return obj['data']
    raise ValueError(f'Expected response object with a "data" property, but received: {obj!r}')


def catch_not_found_or_throw(error: Exception) -> None:
    """Swallow 404 errors for missing records, re-raise everything else"""
    is_not_found = (
        isinstance(error, HttpStatusError)
        and error.http_status == NOT_FOUND_STATUS_CODE
        and error.error_type in NOT_FOUND_ERROR_TYPES
    )
    if not is_not_found:
        raise error


def parse_date_fields(value: Any, depth: int = 0) -> Any:
    """Traverse a JSON structure and turn fields such as createdAt into datetimes"""
    if depth > PARSE_DATE_FIELDS_MAX_DEPTH:
        return value
    if isinstance(value, list):
        return [parse_date_fields(child, depth + 1) for child in value]
    if not isinstance(value, dict):
        return value

    output = {}
    for key, field_value in value.items():
        if key.endswith(PARSE_DATE_FIELDS_KEY_SUFFIX):
            output[key] = _parse_date(field_value)
        elif isinstance(field_value, (dict, list)):
            output[key] = parse_date_fields(field_value, depth + 1)
        else:
            output[key] = field_value
    return output


def _parse_date(value: Any) -> Any:
    if not value or not isinstance(value, str):
        return value
    try:
        return date_parser.isoparse(value)
    except (ValueError, OverflowError):
        return value


def stringify_webhooks_to_base64(webhooks: Optional[List[Dict[str, Any]]]) -> Optional[str]:
    """Encode webhook definitions for a query parameter"""
    if not webhooks:
        return None
    webhooks_json = json.dumps(webhooks, separators=(',', ':'))
    return base64.b64encode(webhooks_json.encode('utf-8')).decode('ascii')


class BaseEndpoint(ABC):
    """
    Abstract base class for platform resource clients.

    Provides common functionality including:
    - HTTP client integration
    - Standardized error handling
    - Request/response logging
    - Common query parameters
    - Not-found suppression for single resources
    """

    def __init__(
        self,
        client: HTTPClient,
        resource_id: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
        retry_policy: Optional[RetryPolicy] = None
    ):
        """
        Initialize endpoint with HTTP client

        Args:
            client: Configured HTTPClient instance
            resource_id: ID of a single resource, None for collections
            params: Query parameters sent with every request
            retry_policy: Overrides the client's retry policy
        """
        self.client = client
        self.resource_id = resource_id
        self.params = params or {}
        self.retry_policy = retry_policy
        self.logger = logging.getLogger(self.__class__.__name__)
        self.base_path = self._get_base_path()

    @abstractmethod
    def _get_base_path(self) -> str:
        """Return the base API path for this endpoint (e.g., 'acts')"""
        pass

    def _build_endpoint(self, path: str = '') -> str:
        """
        Build endpoint path for this resource

        Args:
            path: Additional path segments after the resource ID

        Returns:
            Path relative to the client's base URL
        """
        endpoint = self.base_path
        if self.resource_id:
            # "username/resource-name" IDs use a tilde in URLs
            endpoint = f"{endpoint}/{self.resource_id.replace('/', '~')}"
        if path:
            endpoint = endpoint.rstrip('/') + '/' + path.lstrip('/')
        return endpoint

    def _handle_common_parameters(self, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Merge default parameters and remove None values"""
        processed_params = dict(self.params)
        if params:
            processed_params.update(params)
        return {k: v for k, v in processed_params.items() if v is not None}

    def _validate_required_params(self, params: Dict[str, Any], required_fields: List[str]):
        """
        Validate that required parameters are present

        Raises:
            RequestValidationError: If any required fields are missing
        """
        missing_fields = [f for f in required_fields if params.get(f) is None]
        if missing_fields:
            raise RequestValidationError(f"Missing required parameters: {missing_fields}")

    def _handle_request_error(self, error: Exception, operation: str, **context):
        """Log the error with context and re-raise it"""
        if isinstance(error, ClassifiedError):
            self.logger.error(
                f"{error.kind.value} error during {operation}: {error.message}",
                extra={'operation': operation, **context}
            )
        else:
            self.logger.error(f"Unexpected error during {operation}: {error}", extra={'operation': operation, **context})
        raise error

    def _call(
        self,
        method: str,
        path: str = '',
        params: Optional[Dict[str, Any]] = None,
        data: Any = None,
        **kwargs
    ) -> Any:
        """Perform a call against this resource and return the parsed body"""
        if self.retry_policy is not None:
            kwargs.setdefault('retry_policy', self.retry_policy)
        envelope = self.client.call(
            method,
            self._build_endpoint(path),
            params=self._handle_common_parameters(params),
            data=data,
            **kwargs
        )
        return envelope.body

    # Common CRUD operations

    def _get_resource(self, path: str = '', **params) -> Optional[Dict[str, Any]]:
        """Generic GET of a single resource, None if it does not exist"""
        try:
            body = self._call('GET', path, params=params)
            return parse_date_fields(pluck_data(body))
        except HttpStatusError as e:
            catch_not_found_or_throw(e)
            self.logger.debug(f"Resource {self._build_endpoint(path)} not found")
            return None

    def _list_resources(self, path: str = '', **params) -> Dict[str, Any]:
        """Generic LIST operation for resources"""
        try:
            body = self._call('GET', path, params=params)
            return parse_date_fields(pluck_data(body))
        except ClassifiedError as e:
            self._handle_request_error(e, 'list_resources', path=path)

    def _create_resource(self, data: Any, path: str = '', **params) -> Dict[str, Any]:
        """Generic CREATE operation for resources"""
        try:
            body = self._call('POST', path, params=params, data=data)
            return parse_date_fields(pluck_data(body))
        except ClassifiedError as e:
            self._handle_request_error(e, 'create_resource', path=path)

    def _update_resource(self, data: Dict[str, Any], path: str = '', **params) -> Dict[str, Any]:
        """Generic UPDATE operation for resources"""
        try:
            body = self._call('PUT', path, params=params, data=data)
            return parse_date_fields(pluck_data(body))
        except ClassifiedError as e:
            self._handle_request_error(e, 'update_resource', path=path)

    def _delete_resource(self, path: str = '', **params) -> None:
        """Generic DELETE operation, missing resources are ignored"""
        try:
            self._call('DELETE', path, params=params)
        except HttpStatusError as e:
            catch_not_found_or_throw(e)
