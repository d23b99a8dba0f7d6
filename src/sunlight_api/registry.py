"""
Registry of the supported Sunlight APIs and their methods

Each APIDefinition describes where an API lives, the query parameters sent
with every request and how its responses map onto results/meta. Each
MethodDefinition names the collection path (defaulting to the method name),
an optional handler for a positional argument and optional extra operations
bound onto the request.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from .dispatcher import APIRequest
from .errors import ConfigurationError, SearchRequiredError
from .response import CongressAccessor, PartyTimeAccessor, ResponseAccessor

# Attributes of APIBinding that a method of the same name would shadow
RESERVED_METHOD_NAMES = frozenset({
    'client', 'definition', 'name', 'method_names', 'base_url', 'request', 'status'
})


@dataclass(frozen=True)
class MethodDefinition:
    """A callable API method"""
    collection: Optional[str] = None
    arg_handler: Optional[Callable[[Any, Any], None]] = None
    post_processing: Dict[str, Callable[..., Any]] = field(default_factory=dict)

    def __post_init__(self):
        clashes = sorted(name for name in self.post_processing if hasattr(APIRequest, name))
        if clashes:
            raise ConfigurationError(f"Post-processing operations would replace request methods: {', '.join(clashes)}")


@dataclass(frozen=True)
class APIDefinition:
    """Static metadata for one API"""
    name: str
    base_url: str
    accessor: ResponseAccessor
    methods: Dict[str, MethodDefinition]
    default_parameters: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        reserved = sorted(
            name for name in self.methods
            if name in RESERVED_METHOD_NAMES or name.startswith('_')
        )
        if reserved:
            raise ConfigurationError(f"API '{self.name}' uses reserved method names: {', '.join(reserved)}")

    def collection_for(self, method_name: str) -> str:
        method = self.methods[method_name]
        return method.collection if method.collection is not None else method_name


def highlight(request, open_tag: Optional[str] = None, close_tag: Optional[str] = None):
    """
    Ask a search collection to highlight matches

    Args:
        request: The search request, which must already have a query
        open_tag: Optional tag inserted before each match
        close_tag: Optional tag inserted after each match

    Raises:
        SearchRequiredError: If search() has not been called on the request
    """
    if 'query' not in request.query:
        raise SearchRequiredError("search() must be called before highlight()")

    if open_tag is not None and close_tag is not None:
        request.filter("highlight.tags", f"{open_tag},{close_tag}")
    return request.filter("highlight", True)


def append_numeric_id(request, arg: Any) -> None:
    """Address a single record, e.g. event/42; non-integer arguments are ignored"""
    if isinstance(arg, int) and not isinstance(arg, bool):
        request.collection = f"{request.collection}/{arg}"


# DOCS: http://sunlightlabs.github.com/congress/
CONGRESS = APIDefinition(
    name='congress',
    base_url="https://congress.api.sunlightfoundation.com/",
    accessor=CongressAccessor(),
    methods={
        # Roll call votes in Congress, back to 2009
        'votes': MethodDefinition(),
        # Committee hearings in Congress
        'hearings': MethodDefinition(),
        # To-the-minute updates from the floor of the House and Senate
        'floor_updates': MethodDefinition(collection='floor_updates'),
        # Legislation in the House and Senate, back to 2009
        'bills': MethodDefinition(),
        # Full text search over legislation
        'bills_search': MethodDefinition(
            collection='bills/search',
            post_processing={'highlight': highlight}
        ),
        # Current legislators' names, IDs, biography, and social media
        'legislators': MethodDefinition(),
        # Representatives and senators for a latitude/longitude or zip
        'legislators_locate': MethodDefinition(collection='legislators/locate'),
        # Congressional districts for a latitude/longitude or zip
        'districts_locate': MethodDefinition(collection='districts/locate'),
        # Current committees, subcommittees, and their membership
        'committees': MethodDefinition(),
        # Bills scheduled for debate, as announced by party leadership
        'upcoming_bills': MethodDefinition(collection='upcoming_bills'),
    }
)

# DOCS: http://politicalpartytime.org/api/
PARTY_TIME = APIDefinition(
    name='party_time',
    base_url="http://politicalpartytime.org/api/v1/",
    accessor=PartyTimeAccessor(),
    default_parameters={'format': 'json'},
    methods={
        'event': MethodDefinition(arg_handler=append_numeric_id),
        'lawmaker': MethodDefinition(arg_handler=append_numeric_id),
        'host': MethodDefinition(arg_handler=append_numeric_id),
    }
)

API_REGISTRY: Dict[str, APIDefinition] = {
    api.name: api for api in (CONGRESS, PARTY_TIME)
}
