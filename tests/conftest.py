import copy
import pytest
from typing import Any, Dict, List, Optional, Tuple
from spoke.resources import ResourceLoader
from spoke.types.models import Args, Cluster, HubInfo, ObjectKey
from spoke.utils.errors import AlreadyExistsError, ConflictError, NotFoundError


class FakeCluster:
    """In-memory stand-in for ``ClusterClient``.

    Stores documents by (apiVersion, kind, name, namespace), stamps a new
    resourceVersion on every write and rejects updates carrying a stale
    one, like the API server does.
    """

    def __init__(self):
        self.objects: Dict[Tuple, Dict[str, Any]] = {}
        self.calls: List[Tuple[str, str, ObjectKey, Optional[Dict]]] = []
        self._failures: List[Tuple[str, Optional[str], Optional[str], Exception]] = []
        self._version = 0

    @staticmethod
    def _key(api_version: str, kind: str, key: ObjectKey) -> Tuple:
        return (api_version, kind, key.name, key.namespace or None)

    @staticmethod
    def _body_key(body: Dict[str, Any]) -> ObjectKey:
        metadata = body.get("metadata") or {}
        return ObjectKey(metadata.get("name", ""), metadata.get("namespace") or None)

    def _next_version(self) -> str:
        self._version += 1
        return str(self._version)

    def fail(self, verb: str, ex: Exception, kind: str = None, name: str = None):
        """Make matching ``verb`` calls raise ``ex``."""
        self._failures.append((verb, kind, name, ex))

    def clear_failures(self):
        self._failures.clear()

    def _maybe_fail(self, verb: str, kind: str, key: ObjectKey):
        for _verb, _kind, _name, ex in self._failures:
            if _verb != verb:
                continue
            if _kind is not None and _kind != kind:
                continue
            if _name is not None and _name != key.name:
                continue
            raise ex

    def put(self, body: Dict[str, Any], resource_version: str) -> Dict[str, Any]:
        """Seed an object as if it already lived in the cluster."""
        stored = copy.deepcopy(body)
        stored.setdefault("metadata", {})["resourceVersion"] = resource_version
        key = self._body_key(stored)
        self.objects[self._key(stored["apiVersion"], stored["kind"], key)] = stored
        return stored

    def verbs(self) -> List[str]:
        return [call[0] for call in self.calls]

    def bodies(self, verb: str) -> List[Dict[str, Any]]:
        return [call[3] for call in self.calls if call[0] == verb]

    async def get(self, api_version: str, kind: str, key: ObjectKey) -> Dict[str, Any]:
        self.calls.append(("get", kind, key, None))
        self._maybe_fail("get", kind, key)
        try:
            return copy.deepcopy(self.objects[self._key(api_version, kind, key)])
        except KeyError:
            raise NotFoundError(f"{kind} {key} not found", name=key.name, status=404)

    async def create(self, body: Dict[str, Any]) -> Dict[str, Any]:
        key = self._body_key(body)
        self.calls.append(("create", body["kind"], key, copy.deepcopy(body)))
        self._maybe_fail("create", body["kind"], key)
        _key = self._key(body["apiVersion"], body["kind"], key)
        if _key in self.objects:
            raise AlreadyExistsError(f"{key} already exists", name=key.name, status=409)
        return copy.deepcopy(self.put(body, self._next_version()))

    async def update(self, body: Dict[str, Any]) -> Dict[str, Any]:
        key = self._body_key(body)
        self.calls.append(("update", body["kind"], key, copy.deepcopy(body)))
        self._maybe_fail("update", body["kind"], key)
        _key = self._key(body["apiVersion"], body["kind"], key)
        current = self.objects.get(_key)
        if current is None:
            raise ConflictError(f"{key} was deleted", name=key.name, status=404)
        if body["metadata"].get("resourceVersion") != current["metadata"]["resourceVersion"]:
            raise ConflictError(f"{key} was modified", name=key.name, status=409)
        return copy.deepcopy(self.put(body, self._next_version()))


KLUSTERLET_TEMPLATE = """\
apiVersion: operator.open-cluster-management.io/v1
kind: Klusterlet
metadata:
  name: {{ cluster.name | tojson }}
spec:
  registrationImagePullSpec: quay.io/open-cluster-management/registration:v0.7.0
  workImagePullSpec: quay.io/open-cluster-management/work:v0.7.0
  clusterName: {{ cluster.name | tojson }}
  namespace: open-cluster-management-agent
  externalServerURLs:
  - url: {{ cluster.hub_info.api_server | tojson }}
  deployOption:
    mode: Default
"""

DOCUMENTS = {
    "namespace.yaml": "apiVersion: v1\nkind: Namespace\nmetadata:\n  name: agent\n",
    "config_map.yaml": (
        "apiVersion: v1\n"
        "kind: ConfigMap\n"
        "metadata:\n"
        "  name: settings\n"
        "  namespace: agent\n"
        "data:\n"
        "  mode: desired\n"
    ),
    "service_account.yaml": (
        "apiVersion: v1\n"
        "kind: ServiceAccount\n"
        "metadata:\n"
        "  name: klusterlet\n"
        "  namespace: agent\n"
    ),
    "malformed.yaml": "apiVersion: v1\nkind: [Namespace\n",
    "scalar.yaml": "just a string\n",
    "klusterlet.yaml.j2": KLUSTERLET_TEMPLATE,
    "undefined.yaml.j2": "metadata:\n  name: {{ cluster.nickname }}\n",
    "wrong_kind.yaml.j2": KLUSTERLET_TEMPLATE.replace("kind: Klusterlet", "kind: Deployment"),
    "bad_mode.yaml.j2": KLUSTERLET_TEMPLATE.replace("mode: Default", "mode: Sideways"),
    "extra_fields.yaml.j2": KLUSTERLET_TEMPLATE.replace(
        "  deployOption:\n",
        "  priorityClassName: system-cluster-critical\n"
        "  resourceRequirement:\n"
        "    type: Default\n"
        "  deployOption:\n",
    ).replace(
        "  - url: {{ cluster.hub_info.api_server | tojson }}\n",
        "  - url: {{ cluster.hub_info.api_server | tojson }}\n"
        "    trusted: true\n",
    ),
}


@pytest.fixture
def fake_cluster():
    return FakeCluster()


@pytest.fixture
def loader():
    return ResourceLoader(documents=DOCUMENTS)


@pytest.fixture
def cluster(fake_cluster):
    return Cluster(
        name="klusterlet-1",
        args=Args(client=fake_cluster),
        hub_info=HubInfo(
            kube_config={"apiVersion": "v1", "kind": "Config", "clusters": []},
            api_server="https://hub.example.com:6443",
        ),
    )
