"""
Client library for the Sunlight Foundation REST APIs
Provides a fluent query builder, a registry of supported APIs and
callback based dispatch with normalised results/meta views
"""

from .client import SunlightClient, APIBinding
from .config_loader import ConfigLoader, ClientConfig
from .dispatcher import APIRequest
from .errors import (
    SunlightAPIError,
    ConfigurationError,
    MissingApiKeyError,
    UnknownAPIError,
    InvalidOperatorError,
    InvalidDirectionError,
    InvalidOrderArgumentError,
    MissingArgumentError,
    WildcardInPhraseError,
    InvalidProximityError,
    SearchRequiredError,
    MissingCallbackError,
    MissingProtocolError
)
from .http_client import HTTPClient
from .query_builder import QueryBuilder, OrderSpec, OPERATORS, validate_search
from .registry import API_REGISTRY, APIDefinition, MethodDefinition
from .response import ResponseEnvelope, RequestStatus

__version__ = "0.1.0"

__all__ = [
    'SunlightClient',
    'APIBinding',
    'ConfigLoader',
    'ClientConfig',
    'APIRequest',
    'SunlightAPIError',
    'ConfigurationError',
    'MissingApiKeyError',
    'UnknownAPIError',
    'InvalidOperatorError',
    'InvalidDirectionError',
    'InvalidOrderArgumentError',
    'MissingArgumentError',
    'WildcardInPhraseError',
    'InvalidProximityError',
    'SearchRequiredError',
    'MissingCallbackError',
    'MissingProtocolError',
    'HTTPClient',
    'QueryBuilder',
    'OrderSpec',
    'OPERATORS',
    'validate_search',
    'API_REGISTRY',
    'APIDefinition',
    'MethodDefinition',
    'ResponseEnvelope',
    'RequestStatus'
]
