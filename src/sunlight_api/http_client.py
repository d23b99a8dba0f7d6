"""
HTTPClient module for issuing GET requests to the Sunlight APIs
"""

import logging
import re
from typing import Any, Dict, Optional
from urllib.parse import urlsplit

import requests
import requests_cache

from .config_loader import DEFAULT_USER_AGENT
from .errors import MissingProtocolError

logger = logging.getLogger(__name__)


def redact_api_key(endpoint: str) -> str:
    """Hide the apikey query parameter so endpoints can be logged"""
    return re.sub(r'(apikey=)[^&]*', r'\1***', endpoint)


class HTTPClient:
    """HTTP client owning a session shared by every request of a SunlightClient"""

    SUPPORTED_SCHEMES = ('https', 'http')

    def __init__(self, user_agent: str = DEFAULT_USER_AGENT, cache: Optional[Dict[str, Any]] = None):
        """
        Args:
            user_agent: User-Agent header sent with every request
            cache: Optional development cache settings with keys 'enabled',
                   'cache_name' and 'expiration_seconds'
        """
        self.headers: Dict[str, str] = {'User-Agent': user_agent, 'Accept': 'application/json'}
        self.cache = cache or {}
        self.session: Optional[requests.Session] = None

    def resolve_protocol(self, endpoint: str) -> str:
        """
        Determine the transport from the endpoint scheme

        Raises:
            MissingProtocolError: If the endpoint is neither https nor http
        """
        scheme = urlsplit(endpoint).scheme.lower()
        if scheme not in self.SUPPORTED_SCHEMES:
            raise MissingProtocolError(f"No protocol specified in endpoint: {redact_api_key(endpoint)}")
        return scheme

    def _create_session(self) -> requests.Session:
        if self.cache.get('enabled', False):
            cache_name = self.cache.get('cache_name', 'sunlight_api_cache')
            expire_after = self.cache.get('expiration_seconds', 3600)
            logger.info(f"Response caching enabled ({cache_name}, expires after {expire_after} seconds)")
            return requests_cache.CachedSession(cache_name, expire_after=expire_after)
        return requests.Session()

    def get(self, endpoint: str) -> requests.Response:
        """
        Issue exactly one GET request

        Args:
            endpoint: Fully rendered endpoint URL including the query string

        Returns:
            The response, after checking its HTTP status

        Raises:
            MissingProtocolError: If the endpoint has no supported scheme
            requests.exceptions.RequestException: For network or HTTP errors
        """
        protocol = self.resolve_protocol(endpoint)

        if self.session is None:
            self.session = self._create_session()

        logger.debug(f"GET ({protocol}) {redact_api_key(endpoint)}")
        response = self.session.get(endpoint, headers=self.headers)
        response.raise_for_status()
        return response

    def close_connection(self) -> None:
        """
        Close HTTP session and release resources
        """
        if self.session:
            self.session.close()
            self.session = None
