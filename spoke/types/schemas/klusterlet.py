from marshmallow import fields, validate
from spoke.types.base import BaseSchema
from spoke.types.models.klusterlet import (
    ObjectMeta,
    ServerURL,
    HubApiServerHostAlias,
    NodePlacement,
    DeployOption,
    KlusterletSpec,
    Klusterlet,
)

DEPLOY_MODES = ("Default", "Hosted", "Singleton", "SingletonHosted")


class ObjectMetaSchema(BaseSchema):
    __model__ = ObjectMeta

    name = fields.Str(data_key="name", required=True, validate=validate.Length(min=1))
    namespace = fields.Str(data_key="namespace", allow_none=True, load_default=None)
    resource_version = fields.Str(
        data_key="resourceVersion", allow_none=True, load_default=None
    )
    labels = fields.Dict(
        keys=fields.Str(),
        values=fields.Str(),
        data_key="labels",
        allow_none=True,
        load_default=None,
    )
    annotations = fields.Dict(
        keys=fields.Str(),
        values=fields.Str(),
        data_key="annotations",
        allow_none=True,
        load_default=None,
    )


class ServerURLSchema(BaseSchema):
    __model__ = ServerURL

    url = fields.Url(data_key="url", required=True, require_tld=False)
    ca_bundle = fields.Str(data_key="caBundle", allow_none=True, load_default=None)


class HubApiServerHostAliasSchema(BaseSchema):
    __model__ = HubApiServerHostAlias

    ip = fields.Str(data_key="ip", required=True)
    hostname = fields.Str(data_key="hostname", required=True)


class NodePlacementSchema(BaseSchema):
    __model__ = NodePlacement

    node_selector = fields.Dict(
        keys=fields.Str(),
        values=fields.Str(),
        data_key="nodeSelector",
        allow_none=True,
        load_default=None,
    )
    tolerations = fields.List(
        fields.Dict(),
        data_key="tolerations",
        allow_none=True,
        load_default=None,
    )


class DeployOptionSchema(BaseSchema):
    __model__ = DeployOption

    mode = fields.Str(
        data_key="mode",
        allow_none=True,
        load_default=None,
        validate=validate.OneOf(DEPLOY_MODES),
    )


class KlusterletSpecSchema(BaseSchema):
    __model__ = KlusterletSpec

    registration_image_pull_spec = fields.Str(
        data_key="registrationImagePullSpec", allow_none=True, load_default=None
    )
    work_image_pull_spec = fields.Str(
        data_key="workImagePullSpec", allow_none=True, load_default=None
    )
    image_pull_spec = fields.Str(
        data_key="imagePullSpec", allow_none=True, load_default=None
    )
    cluster_name = fields.Str(data_key="clusterName", allow_none=True, load_default=None)
    namespace = fields.Str(data_key="namespace", allow_none=True, load_default=None)
    external_server_urls = fields.List(
        fields.Nested(ServerURLSchema()),
        data_key="externalServerURLs",
        allow_none=True,
        load_default=None,
    )
    hub_api_server_host_alias = fields.Nested(
        HubApiServerHostAliasSchema(),
        data_key="hubApiServerHostAlias",
        allow_none=True,
        load_default=None,
    )
    node_placement = fields.Nested(
        NodePlacementSchema(),
        data_key="nodePlacement",
        allow_none=True,
        load_default=None,
    )
    deploy_option = fields.Nested(
        DeployOptionSchema(),
        data_key="deployOption",
        allow_none=True,
        load_default=None,
    )
    registration_configuration = fields.Dict(
        data_key="registrationConfiguration", allow_none=True, load_default=None
    )
    work_configuration = fields.Dict(
        data_key="workConfiguration", allow_none=True, load_default=None
    )


class KlusterletSchema(BaseSchema):
    __model__ = Klusterlet

    api_version = fields.Str(
        data_key="apiVersion",
        required=True,
        validate=validate.Equal(Klusterlet.API_VERSION),
    )
    kind = fields.Str(
        data_key="kind", required=True, validate=validate.Equal(Klusterlet.KIND)
    )
    metadata = fields.Nested(ObjectMetaSchema(), data_key="metadata", required=True)
    spec = fields.Nested(
        KlusterletSpecSchema(),
        data_key="spec",
        load_default=lambda: KlusterletSpecSchema().load({}),
    )
    # Server owned, never sent back
    status = fields.Dict(data_key="status", allow_none=True, load_default=None, load_only=True)
