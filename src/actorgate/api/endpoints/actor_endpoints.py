"""
Actor Endpoints for the ActorGate API Client

Handles actor operations: listing and creating actors, reading, updating
and deleting a single actor, and starting actor runs.
"""

from typing import Any, Dict, List, Optional

from .base_endpoint import BaseEndpoint, parse_date_fields, pluck_data, stringify_webhooks_to_base64


class ActorCollectionEndpoints(BaseEndpoint):
    """Actor collection API endpoints."""

    def _get_base_path(self) -> str:
        return 'acts'

    def list(
        self,
        my: Optional[bool] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        desc: Optional[bool] = None
    ) -> Dict[str, Any]:
        """
        List actors

        Args:
            my: Only return actors owned by the user
            limit: Maximum number of items to return
            offset: Number of items to skip
            desc: Sort by creation date in descending order

        Returns:
            Paginated list with 'items', 'total', 'offset', 'limit' and 'count'
        """
        return self._list_resources(my=my, limit=limit, offset=offset, desc=desc)

    def create(self, actor: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a new actor

        Args:
            actor: Actor definition (name, title, versions, ...)

        Returns:
            Created actor
        """
        self._validate_required_params({'actor': actor}, ['actor'])
        return self._create_resource(actor)


class ActorEndpoints(BaseEndpoint):
    """Single actor API endpoints."""

    def _get_base_path(self) -> str:
        return 'acts'

    def get(self) -> Optional[Dict[str, Any]]:
        """Get the actor, None if it does not exist"""
        return self._get_resource()

    def update(self, new_fields: Dict[str, Any]) -> Dict[str, Any]:
        """Update the actor with the given fields"""
        self._validate_required_params({'new_fields': new_fields}, ['new_fields'])
        return self._update_resource(new_fields)

    def delete(self) -> None:
        """Delete the actor"""
        self._delete_resource()

    def start(
        self,
        run_input: Any = None,
        content_type: Optional[str] = None,
        build: Optional[str] = None,
        memory_mbytes: Optional[int] = None,
        timeout_secs: Optional[int] = None,
        wait_for_finish: Optional[int] = None,
        webhooks: Optional[List[Dict[str, Any]]] = None
    ) -> Dict[str, Any]:
        """
        Start the actor and return the run object

        Input may contain Code values (e.g. page functions); they are sent
        as source text.

        Args:
            run_input: Input of the run, JSON-encoded unless content_type says otherwise
            content_type: Content type of run_input
            build: Tag or number of the build to run
            memory_mbytes: Memory limit of the run
            timeout_secs: Timeout of the run
            wait_for_finish: Seconds the server waits for the run to finish
            webhooks: Ad-hoc webhooks for this run

        Returns:
            Run object
        """
        headers = {'Content-Type': content_type} if content_type else None
        params = {
            'build': build,
            'memory': memory_mbytes,
            'timeout': timeout_secs,
            'waitForFinish': wait_for_finish,
            'webhooks': stringify_webhooks_to_base64(webhooks)
        }

        body = self._call(
            'POST',
            'runs',
            params=params,
            data=run_input,
            headers=headers,
            stringify_functions=True
        )
        self.logger.info(f"Started actor {self.resource_id}")
        return parse_date_fields(pluck_data(body))
