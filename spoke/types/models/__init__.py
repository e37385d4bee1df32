from .resource import ObjectKey, Resource
from .cluster import Args, Cluster, HubInfo
from .klusterlet import (
    ObjectMeta,
    ServerURL,
    HubApiServerHostAlias,
    NodePlacement,
    DeployOption,
    KlusterletSpec,
    Klusterlet,
)

__all__ = [
    "ObjectKey",
    "Resource",
    "Args",
    "Cluster",
    "HubInfo",
    "ObjectMeta",
    "ServerURL",
    "HubApiServerHostAlias",
    "NodePlacement",
    "DeployOption",
    "KlusterletSpec",
    "Klusterlet",
]
