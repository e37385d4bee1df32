from typing import Dict, List, Optional
from spoke.types.base import BaseModel
from spoke.types.models.resource import ObjectKey


class ObjectMeta(BaseModel):
    """Object metadata"""

    name: str
    namespace: Optional[str]
    resource_version: Optional[str]
    labels: Optional[Dict[str, str]]
    annotations: Optional[Dict[str, str]]


class ServerURL(BaseModel):
    """Hub API server URL advertised to the spoke agents"""

    url: str
    ca_bundle: Optional[str]


class HubApiServerHostAlias(BaseModel):
    ip: str
    hostname: str


class NodePlacement(BaseModel):
    node_selector: Optional[Dict[str, str]]
    tolerations: Optional[List[Dict]]


class DeployOption(BaseModel):
    mode: Optional[str]


class KlusterletSpec(BaseModel):
    """Klusterlet CRD spec"""

    registration_image_pull_spec: Optional[str]
    work_image_pull_spec: Optional[str]
    image_pull_spec: Optional[str]
    cluster_name: Optional[str]
    namespace: Optional[str]
    external_server_urls: Optional[List[ServerURL]]
    hub_api_server_host_alias: Optional[HubApiServerHostAlias]
    node_placement: Optional[NodePlacement]
    deploy_option: Optional[DeployOption]
    registration_configuration: Optional[Dict]
    work_configuration: Optional[Dict]


class Klusterlet(BaseModel):
    """Klusterlet custom resource"""

    GROUP_NAME = "operator.open-cluster-management.io"
    GROUP_VERSION = "v1"
    API_VERSION = f"{GROUP_NAME}/{GROUP_VERSION}"
    KIND = "Klusterlet"
    PLURAL_NAME = "klusterlets"

    api_version: str
    kind: str
    metadata: ObjectMeta
    spec: KlusterletSpec

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def key(self) -> ObjectKey:
        return ObjectKey(self.metadata.name, self.metadata.namespace or None)

    @property
    def resource_version(self) -> str:
        return self.metadata.resource_version or ""

    def merge_resource_version(self, live: "Klusterlet") -> "Klusterlet":
        """Take the live object's resourceVersion; the desired spec is left untouched."""
        self.metadata.resource_version = live.metadata.resource_version
        return self
