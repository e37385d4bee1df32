from .klusterlet import (
    ObjectMetaSchema,
    ServerURLSchema,
    HubApiServerHostAliasSchema,
    NodePlacementSchema,
    DeployOptionSchema,
    KlusterletSpecSchema,
    KlusterletSchema,
)

__all__ = [
    "ObjectMetaSchema",
    "ServerURLSchema",
    "HubApiServerHostAliasSchema",
    "NodePlacementSchema",
    "DeployOptionSchema",
    "KlusterletSpecSchema",
    "KlusterletSchema",
]
