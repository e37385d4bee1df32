import copy
from typing import Any, Dict, NamedTuple, Optional


class ObjectKey(NamedTuple):
    """Identity of an object within a kind. ``namespace`` is None for cluster-scoped objects."""

    name: str
    namespace: Optional[str] = None

    def __str__(self) -> str:
        if self.namespace:
            return f"{self.namespace}/{self.name}"
        return self.name


class Resource:
    """A schema-less cluster resource document.

    Only the well-known fields (apiVersion, kind, metadata.name,
    metadata.namespace, metadata.resourceVersion) get accessors; the
    rest of the document is carried as-is.
    """

    _body: Dict[str, Any]

    def __init__(self, body: Dict[str, Any]) -> None:
        self._body = body

    def __repr__(self) -> str:
        return f"<Resource {self.api_version} {self.kind} {self.key}>"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Resource):
            return NotImplemented
        return self._body == other._body

    @property
    def metadata(self) -> Dict[str, Any]:
        return self._body.get("metadata") or {}

    @property
    def api_version(self) -> str:
        return self._body.get("apiVersion", "")

    @property
    def kind(self) -> str:
        return self._body.get("kind", "")

    @property
    def name(self) -> str:
        return self.metadata.get("name", "")

    @property
    def namespace(self) -> Optional[str]:
        return self.metadata.get("namespace") or None

    @property
    def resource_version(self) -> str:
        return self.metadata.get("resourceVersion") or ""

    @resource_version.setter
    def resource_version(self, value: str):
        if value:
            if not self._body.get("metadata"):
                self._body["metadata"] = {}
            self._body["metadata"]["resourceVersion"] = value
        elif self._body.get("metadata"):
            self._body["metadata"].pop("resourceVersion", None)

    @property
    def key(self) -> ObjectKey:
        return ObjectKey(self.name, self.namespace)

    def merge_resource_version(self, live: "Resource") -> "Resource":
        """Take the live object's resourceVersion; every other field stays as desired."""
        self.resource_version = live.resource_version
        return self

    def as_dict(self) -> Dict[str, Any]:
        """Return a copy of the document suitable for sending to the API server."""
        return copy.deepcopy(self._body)
