"""
Dispatcher module turning a built query into a single API call whose outcome
is delivered to success or failure callbacks
"""

import logging
from types import MethodType
from typing import Any, Callable, Dict, Mapping, Optional, Union

import requests

from .errors import MissingCallbackError
from .http_client import HTTPClient, redact_api_key
from .query_builder import QueryBuilder
from .response import RawAccessor, ResponseAccessor, ResponseEnvelope

logger = logging.getLogger(__name__)

Callback = Callable[[ResponseEnvelope], Any]


class APIRequest(QueryBuilder):
    """
    Query builder bound to one API method

    Callbacks given to call() are remembered, so next() and later call()
    invocations may omit them. A request instance is not safe to dispatch
    from several threads at once: overlapping next() calls race on the
    page counter.
    """

    def __init__(
        self,
        base_url: str,
        collection: Optional[str] = None,
        query: Optional[Dict[str, Any]] = None,
        api_key: Optional[str] = None,
        http_client: Optional[HTTPClient] = None,
        accessor: Optional[ResponseAccessor] = None
    ):
        super().__init__(base_url, collection=collection, query=query, api_key=api_key)
        self.http_client = http_client or HTTPClient()
        self.accessor = accessor or RawAccessor()
        self.success: Optional[Callback] = None
        self.failure: Optional[Callback] = None

    def add_operation(self, name: str, operation: Callable[..., Any]) -> None:
        """Bind an API specific operation, e.g. highlight, as a method of this request"""
        setattr(self, name, MethodType(operation, self))

    def _resolve_callbacks(self, success: Union[Callback, Mapping[str, Callback], None],
                           failure: Optional[Callback]) -> None:
        if isinstance(success, Mapping):
            failure = success.get('fail')
            success = success.get('callback')

        success = success if success is not None else self.success
        failure = failure if failure is not None else self.failure

        if success is None:
            raise MissingCallbackError("You must define a success callback before performing call")
        if failure is None:
            raise MissingCallbackError("You must define a failure callback before performing call")

        # Stored only after both checks pass
        self.success = success
        self.failure = failure

    def call(self, success: Union[Callback, Mapping[str, Callback], None] = None,
             failure: Optional[Callback] = None) -> None:
        """
        Make one request to the API and deliver the outcome to a callback

        Args:
            success: Callback receiving the success ResponseEnvelope, or a
                     mapping with 'callback' and 'fail' entries
            failure: Callback receiving the failure ResponseEnvelope

        Raises:
            MissingCallbackError: If no success or failure callback is available
            MissingProtocolError: If the endpoint has no http(s) scheme
        """
        self._resolve_callbacks(success, failure)

        endpoint = self.get_endpoint()
        logger.info(f"Calling {redact_api_key(endpoint)}")

        try:
            response = self.http_client.get(endpoint)
        except requests.exceptions.RequestException as e:
            logger.error(f"Request to {redact_api_key(endpoint)} failed: {e}")
            self.failure(ResponseEnvelope.failure(e))
            return

        try:
            json_data = response.json()
        except ValueError as e:
            logger.error(f"Response from {redact_api_key(endpoint)} is not valid JSON: {e}")
            self.failure(ResponseEnvelope.failure(e))
            return

        self.success(ResponseEnvelope.success(json_data, self.accessor))

    def next(self, success: Union[Callback, Mapping[str, Callback], None] = None,
             failure: Optional[Callback] = None) -> None:
        """Increment the page and make another call to the API"""
        page = self.query.get('page')
        if not isinstance(page, int) or isinstance(page, bool):
            page = 0
        self.query['page'] = page + 1
        self.call(success, failure)
