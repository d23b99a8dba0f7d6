"""
SunlightClient module exposing every registered API as a set of request factories
"""

import logging
from functools import partial
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from .config_loader import ClientConfig, ConfigLoader
from .dispatcher import APIRequest, Callback
from .errors import UnknownAPIError
from .http_client import HTTPClient
from .registry import API_REGISTRY, APIDefinition

logger = logging.getLogger(__name__)


class APIBinding:
    """
    Request factories for one API

    Every method declared in the API's definition becomes an attribute
    taking an optional argument and returning a fresh APIRequest, e.g.
    client.congress.bills() or client.party_time.event(42).
    """

    def __init__(self, client: "SunlightClient", definition: APIDefinition):
        self.client = client
        self.definition = definition

        for method_name in definition.methods:
            setattr(self, method_name, partial(self.request, method_name))

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def method_names(self) -> List[str]:
        return list(self.definition.methods)

    @property
    def base_url(self) -> str:
        return self.client.config.url_for(self.definition.name, self.definition.base_url)

    def _new_request(self, collection: Optional[str]) -> APIRequest:
        return APIRequest(
            base_url=self.base_url,
            collection=collection,
            query=self.definition.default_parameters,
            api_key=self.client.api_key,
            http_client=self.client.http_client,
            accessor=self.definition.accessor
        )

    def request(self, method_name: str, arg: Any = None) -> APIRequest:
        """
        Build a request for one of this API's methods

        Args:
            method_name: Declared method name
            arg: Optional argument passed to the method's argument handler;
                 ignored when the method declares none

        Raises:
            AttributeError: If the method is not declared for this API
        """
        if method_name not in self.definition.methods:
            raise AttributeError(f"API '{self.name}' has no method '{method_name}'")

        method = self.definition.methods[method_name]
        request = self._new_request(self.definition.collection_for(method_name))

        for operation_name, operation in method.post_processing.items():
            request.add_operation(operation_name, operation)

        if arg is not None and method.arg_handler is not None:
            method.arg_handler(request, arg)

        logger.debug(f"Built {self.name}.{method_name} request for collection '{request.collection}'")
        return request

    def status(self, success: Union[Callback, Mapping[str, Callback], None] = None,
               failure: Optional[Callback] = None) -> APIRequest:
        """Request the API's root URL to check that it is up"""
        request = self._new_request(None)
        request.call(success, failure)
        return request


class SunlightClient:
    """
    Entry point holding the API key, URL overrides and the shared HTTP client

    Example:
        client = SunlightClient("my-key")
        client.congress.bills().filter("congress", 113).order("introduced_on").call(on_success, on_failure)
    """

    def __init__(self, opts: Union[str, Mapping[str, Any], None] = None,
                 config: Optional[ClientConfig] = None,
                 http_client: Optional[HTTPClient] = None):
        """
        Args:
            opts: API key string or {'key': ..., 'url': ...} mapping
            config: Base configuration, e.g. loaded by ConfigLoader
            http_client: HTTP client to share between requests

        Raises:
            MissingApiKeyError: If no API key is available
            ConfigurationError: If opts has an unsupported type
        """
        self.config = config or ClientConfig()
        self.api_key: Optional[str] = None
        self.init(opts)

        self.http_client = http_client or HTTPClient(
            user_agent=self.config.user_agent,
            cache=self.config.cache
        )

        self.apis: Dict[str, APIBinding] = {}
        for api_name, definition in API_REGISTRY.items():
            binding = APIBinding(self, definition)
            self.apis[api_name] = binding
            setattr(self, api_name, binding)

    @classmethod
    def from_config_file(cls, config_path: Path,
                         opts: Union[str, Mapping[str, Any], None] = None) -> "SunlightClient":
        """Create a client from a TOML or YAML configuration file"""
        return cls(opts, config=ConfigLoader.load_config(config_path))

    def init(self, opts: Union[str, Mapping[str, Any], None] = None) -> None:
        """
        (Re)initialise the API key and base URL override

        A key supplied earlier is kept when opts does not carry one.

        Raises:
            MissingApiKeyError: If no key was ever provided
            ConfigurationError: If opts has an unsupported type
        """
        self.config = self.config.with_options(opts)
        self.api_key = self.config.resolve_api_key()
        self.config.api_key = self.api_key

        if self.config.base_url:
            logger.info(f"Using base URL override {self.config.base_url}")

    @property
    def api_names(self) -> List[str]:
        return list(self.apis)

    def api(self, name: str) -> APIBinding:
        """
        Look up an API binding by name

        Raises:
            UnknownAPIError: If no API is registered under the name
        """
        if name not in self.apis:
            raise UnknownAPIError(f"Unknown API '{name}'. Available APIs: {', '.join(self.api_names)}")
        return self.apis[name]

    def close(self) -> None:
        self.http_client.close_connection()

    def __enter__(self) -> "SunlightClient":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
