"""
Exception hierarchy for the Sunlight API client
"""


class SunlightAPIError(Exception):
    """Base class for all errors raised by the client"""
    pass


class ConfigurationError(SunlightAPIError):
    """Raised when configuration is invalid or incomplete"""
    pass


class MissingApiKeyError(ConfigurationError):
    """Raised when the client is initialised without an API key"""
    pass


class UnknownAPIError(SunlightAPIError, KeyError):
    """Raised when an API name is not present in the registry"""
    pass


class InvalidOperatorError(SunlightAPIError, ValueError):
    """Raised when a filter operator is not one of the supported operators"""
    pass


class InvalidDirectionError(SunlightAPIError, ValueError):
    """Raised when an order direction is not asc or desc"""
    pass


class InvalidOrderArgumentError(SunlightAPIError, ValueError):
    """Raised when an order argument has an unsupported shape"""
    pass


class MissingArgumentError(SunlightAPIError, ValueError):
    """Raised when a builder operation is called without required arguments"""
    pass


class WildcardInPhraseError(SunlightAPIError, ValueError):
    """Raised when a quoted search phrase contains a * wildcard"""
    pass


class InvalidProximityError(SunlightAPIError, ValueError):
    """Raised when a ~ proximity marker is not followed by a number"""
    pass


class SearchRequiredError(SunlightAPIError):
    """Raised when a search-only operation is used before search()"""
    pass


class MissingCallbackError(SunlightAPIError):
    """Raised when call() has no success or failure callback to deliver to"""
    pass


class MissingProtocolError(SunlightAPIError):
    """Raised when an endpoint has neither an https nor an http scheme"""
    pass
