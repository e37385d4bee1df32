from typing import Any, Dict, Optional
from spoke.types.base import BaseModel


class Args(BaseModel):
    """Connection arguments for the spoke cluster.

    ``kube_config`` is the client configuration of the spoke cluster,
    ``scheme`` is an opaque registry of the kinds the caller works with and
    ``client`` is the cluster client the registration runs against.
    """

    kube_config: Optional[Any]
    scheme: Optional[Any]
    client: Optional[Any]

    def __init__(self, kube_config: Any = None, scheme: Any = None, client: Any = None):
        super().__init__(kube_config=kube_config, scheme=scheme, client=client)


class HubInfo(BaseModel):
    """How the spoke agents reach the hub."""

    kube_config: Dict[str, Any]
    api_server: str

    def __init__(self, kube_config: Dict[str, Any] = None, api_server: str = ""):
        super().__init__(kube_config=kube_config or {}, api_server=api_server)


class Cluster(BaseModel):
    """Template render context for a spoke cluster."""

    name: str
    args: Args
    hub_info: HubInfo

    def __init__(self, name: str, args: Args = None, hub_info: HubInfo = None):
        super().__init__(name=name, args=args or Args(), hub_info=hub_info or HubInfo())
