"""
ResponseEnvelope module normalising the different API response shapes
behind common results and meta views
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol

STATUS_SUCCESS = "success"
STATUS_ERROR = "error"


class ResponseAccessor(Protocol):
    """Protocol for deriving standard views from an API's JSON body"""

    def results(self, json_data: Any) -> Any:
        """Return the list of result records, or None if the body has none"""
        ...

    def meta(self, json_data: Any) -> Optional[Dict[str, Any]]:
        """Return paging/count metadata, or None if the body has none"""
        ...


class RawAccessor:
    """Fallback accessor exposing the body itself as the results"""

    def results(self, json_data: Any) -> Any:
        return json_data

    def meta(self, json_data: Any) -> Optional[Dict[str, Any]]:
        return None


class CongressAccessor:
    """Congress API: {"results": [...], "count": n, "page": {...}}"""

    def results(self, json_data: Any) -> Any:
        if isinstance(json_data, dict) and 'results' in json_data:
            return json_data['results']
        return None

    def meta(self, json_data: Any) -> Optional[Dict[str, Any]]:
        if isinstance(json_data, dict) and 'count' in json_data and 'page' in json_data:
            return {'count': json_data['count'], 'page': json_data['page']}
        return None


class PartyTimeAccessor:
    """Party Time API: {"meta": {...}, "objects": [...]} or a single record"""

    def results(self, json_data: Any) -> Any:
        if isinstance(json_data, dict) and 'objects' in json_data:
            return json_data['objects']
        return json_data

    def meta(self, json_data: Any) -> Optional[Dict[str, Any]]:
        if isinstance(json_data, dict) and 'meta' in json_data:
            return json_data['meta']
        return None

    def objects(self, json_data: Any) -> Any:
        if isinstance(json_data, dict):
            return json_data.get('objects')
        return None


@dataclass(frozen=True)
class RequestStatus:
    """Outcome of a dispatched request"""
    status: str
    error: Optional[BaseException] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'status': self.status}
        if self.error is not None:
            data['error'] = str(self.error)
        return data


@dataclass(frozen=True)
class ResponseEnvelope:
    """Parsed response body plus views derived by the API's accessor"""
    json_data: Any
    request: RequestStatus
    accessor: ResponseAccessor = field(default_factory=RawAccessor, repr=False, compare=False)

    @classmethod
    def success(cls, json_data: Any, accessor: Optional[ResponseAccessor] = None) -> "ResponseEnvelope":
        return cls(json_data, RequestStatus(STATUS_SUCCESS), accessor or RawAccessor())

    @classmethod
    def failure(cls, error: BaseException) -> "ResponseEnvelope":
        return cls([], RequestStatus(STATUS_ERROR, error))

    @property
    def ok(self) -> bool:
        return self.request.status == STATUS_SUCCESS

    @property
    def results(self) -> Any:
        if not self.ok:
            return None
        return self.accessor.results(self.json_data)

    @property
    def meta(self) -> Optional[Dict[str, Any]]:
        if not self.ok:
            return None
        return self.accessor.meta(self.json_data)

    @property
    def objects(self) -> Any:
        """Party Time style alias for the raw objects list, None for other APIs"""
        objects = getattr(self.accessor, 'objects', None)
        if not self.ok or objects is None:
            return None
        return objects(self.json_data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'json_data': self.json_data,
            'results': self.results,
            'meta': self.meta,
            'request': self.request.to_dict()
        }
