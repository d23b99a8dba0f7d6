"""
QueryBuilder module for composing filter, order, page and search parameters
into a request URL
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple
from urllib.parse import urlencode

from .errors import (
    InvalidDirectionError,
    InvalidOperatorError,
    InvalidOrderArgumentError,
    InvalidProximityError,
    MissingArgumentError,
    WildcardInPhraseError,
)

logger = logging.getLogger(__name__)

# Operators understood by the remote APIs, appended to a field as field__operator:
# gt, gte, lt, lte - comparisons
# not - the field is not this value
# all - the field is an array containing all of these values (separated by |)
# in - the field is one of these values (separated by |)
# nin - the field is not one of these values (separated by |)
# exists - the field is present and non-null (supply true or false)
OPERATORS = frozenset({"gt", "gte", "lt", "lte", "not", "all", "in", "nin", "exists"})
IDENTITY_OPERATOR = "="
DIRECTIONS = ("asc", "desc")
DEFAULT_DIRECTION = "desc"

# Parameters that accumulate values instead of overwriting them
LIST_FIELDS = frozenset({"fields", "order"})

API_KEY_PARAM = "apikey"
SEARCH_SUFFIX = "/search"

_explain_warning_logged = False


def check_operator(operator: str) -> None:
    """
    Validate a filter operator

    Raises:
        InvalidOperatorError: If the operator is not supported
    """
    if operator not in OPERATORS:
        raise InvalidOperatorError(
            f"Invalid operator '{operator}'. Supported operators: {', '.join(sorted(OPERATORS))}"
        )


def normalise_direction(direction: Any) -> str:
    """Return a lower case order direction, defaulting to desc"""
    if direction is None:
        return DEFAULT_DIRECTION
    if not isinstance(direction, str) or direction.lower() not in DIRECTIONS:
        raise InvalidDirectionError(f"Order direction must be asc or desc, got {direction!r}")
    return direction.lower()


@dataclass
class OrderSpec:
    """A field to order by and its direction"""
    field: str
    direction: str = DEFAULT_DIRECTION

    def __post_init__(self):
        if not isinstance(self.field, str) or not self.field:
            raise InvalidOrderArgumentError(f"Order field must be a non-empty string, got {self.field!r}")
        self.direction = normalise_direction(self.direction)

    @classmethod
    def from_argument(cls, arg: Any) -> "OrderSpec":
        """
        Build an OrderSpec from one of the accepted argument shapes

        Args:
            arg: An OrderSpec, a (field, direction) pair or a mapping with
                 'field' and optional 'direction' keys

        Raises:
            InvalidOrderArgumentError: If the argument has any other shape
        """
        if isinstance(arg, OrderSpec):
            return arg
        if isinstance(arg, Mapping):
            if 'field' not in arg:
                raise InvalidOrderArgumentError(f"Order mapping is missing 'field': {arg!r}")
            return cls(arg['field'], arg.get('direction'))
        if isinstance(arg, (list, tuple)) and len(arg) == 2:
            return cls(arg[0], arg[1])
        raise InvalidOrderArgumentError(f"Invalid order argument: {arg!r}")

    def serialise(self) -> str:
        return f"{self.field}__{self.direction}"


def validate_search(q: str) -> str:
    """
    Validate a full text search string containing optional quoted phrases

    Phrases may be followed by a proximity marker such as "some phrase"~4.
    Whitespace around the marker is normalised away before validation.

    Args:
        q: Search string

    Returns:
        The whitespace-normalised search string

    Raises:
        WildcardInPhraseError: If a * appears inside a quoted phrase
        InvalidProximityError: If a ~ is not followed by a number
    """
    q = re.sub(r'" *~', '"~', q)
    q = re.sub(r'~ *', '~', q)

    parts = q.split('"')
    if parts[0] == "":
        parts = parts[1:]

    in_phrase = False
    for part in parts:
        in_phrase = not in_phrase

        if in_phrase and "*" in part:
            raise WildcardInPhraseError(f"You may not use * inside of a phrase ({part})")
        if part.startswith("~") and not re.match(r'~[0-9]+', part):
            raise InvalidProximityError(f"A number must follow a ~ after a phrase ({part})")

    return q


def _render_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class QueryBuilder:
    """Accumulates query parameters and renders them into an endpoint URL"""

    def __init__(self, base_url: str, collection: Optional[str] = None,
                 query: Optional[Dict[str, Any]] = None, api_key: Optional[str] = None):
        self.base_url = base_url
        self.collection = collection
        self.api_key = api_key
        self.query: Dict[str, Any] = {}

        for key, value in (query or {}).items():
            self.query[key] = list(value) if isinstance(value, list) else value

    def filter(self, field: str, value: Any, operator: Optional[str] = None) -> "QueryBuilder":
        """
        Set, append or remove a query parameter

        Args:
            field: Parameter name
            value: Value to set; None removes the parameter
            operator: Optional operator, see OPERATORS. For the order field
                      only asc and desc are accepted

        Returns:
            The builder, for chaining

        Raises:
            InvalidOperatorError: If the operator is unsupported for the field
        """
        if isinstance(value, (datetime, date)):
            value = value.isoformat()

        if operator is not None and operator != IDENTITY_OPERATOR:
            if field != "order":
                check_operator(operator)
                field = f"{field}__{operator}"
            elif operator in DIRECTIONS:
                value = f"{value}__{operator}"
            else:
                raise InvalidOperatorError(f"({operator}) is not a valid operator for {field}")

        if value is None:
            self.query.pop(field, None)
        elif field in LIST_FIELDS:
            self.query.setdefault(field, []).append(value)
        else:
            self.query[field] = value

        return self

    def order(self, *args: Any) -> "QueryBuilder":
        """
        Order results, similar to SQL ORDER BY

        Accepts either order(field) / order(field, direction) or any number
        of OrderSpec, (field, direction) pairs or {'field', 'direction'}
        mappings.

        Raises:
            MissingArgumentError: If called without arguments
            InvalidDirectionError: If a direction is not asc or desc
            InvalidOrderArgumentError: If an argument has an unsupported shape
        """
        if not args:
            raise MissingArgumentError("order() requires at least one argument")

        if isinstance(args[0], str):
            if len(args) > 2:
                raise InvalidOrderArgumentError("order(field, direction) takes at most two arguments")
            specs = [OrderSpec(args[0], args[1] if len(args) == 2 else None)]
        else:
            specs = [OrderSpec.from_argument(arg) for arg in args]

        for spec in specs:
            self.filter("order", spec.serialise())
        return self

    def fields(self, *names: str) -> "QueryBuilder":
        """Select which fields to return"""
        if not names:
            raise MissingArgumentError("fields() requires at least one field name")

        for name in names:
            self.filter("fields", name)
        return self

    def page(self, num: int, qty: Optional[int] = None) -> "QueryBuilder":
        """
        Select a page of results, similar to SQL LIMIT

        Args:
            num: Page number to retrieve
            qty: Number of results per page
        """
        if qty is not None:
            self.filter("per_page", qty)
        return self.filter("page", num)

    def search(self, q: str) -> "QueryBuilder":
        """Search for a query string, validating phrase syntax on search collections"""
        if self.collection and self.collection.endswith(SEARCH_SUFFIX):
            q = validate_search(q)
        return self.filter("query", q)

    def explain(self) -> "QueryBuilder":
        """Ask the server to echo how it interpreted the query"""
        global _explain_warning_logged
        if not _explain_warning_logged:
            logger.warning(
                "explain mode is a convenience for debugging, not a supported API feature. "
                "Don't make automatic requests with explain mode turned on."
            )
            _explain_warning_logged = True
        return self.filter("explain", True)

    def query_items(self) -> List[Tuple[str, str]]:
        """Flatten the query state into ordered (key, value) pairs"""
        items = []
        for key, value in self.query.items():
            values: Sequence[Any] = value if isinstance(value, list) else [value]
            items.extend((key, _render_value(item)) for item in values)

        if self.api_key:
            items.append((API_KEY_PARAM, self.api_key))
        return items

    def get_endpoint(self) -> str:
        """
        Construct the endpoint URL

        Returns:
            {base_url}{collection}/?{query} for collection requests, or the
            bare base URL for status requests
        """
        if not self.collection:
            return self.base_url
        return f"{self.base_url}{self.collection}/?{urlencode(self.query_items())}"
