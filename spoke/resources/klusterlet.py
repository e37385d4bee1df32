import logging
from logging import Logger
from marshmallow import ValidationError
from spoke.kube import ClusterClient
from spoke.resources.loader import ResourceLoader
from spoke.types.models.cluster import Cluster
from spoke.types.models.klusterlet import Klusterlet
from spoke.types.schemas.klusterlet import KlusterletSchema
from spoke.utils.errors import FetchError, NotFoundError, RenderError


class KlusterletReconciler:
    """Create-or-update for the templated Klusterlet custom resource.

    Unlike ``Reconciler``, the desired and live objects are kept as two
    separate typed values; the live one only lends its resourceVersion.
    """

    KIND = Klusterlet.KIND

    client: ClusterClient
    loader: ResourceLoader
    logger: Logger

    def __init__(
        self, client: ClusterClient, loader: ResourceLoader, logger: Logger = None
    ):
        self.client = client
        self.loader = loader
        self.logger = logger or logging.getLogger(__name__)

    def prepare_klusterlet(self, template_name: str, cluster: Cluster) -> Klusterlet:
        """Render the template for ``cluster`` into a validated Klusterlet."""
        text = self.loader.render(template_name, cluster)
        data = self.loader.parse_document(template_name, text, RenderError)
        try:
            return KlusterletSchema().load(data)
        except ValidationError as ex:
            raise RenderError(
                f"Rendered `{template_name}` is not a valid {self.KIND}: {ex.messages}",
                name=template_name,
            ) from ex

    def prepare_body(self, klusterlet: Klusterlet) -> dict:
        return KlusterletSchema().dump(klusterlet)

    async def fetch(self, klusterlet: Klusterlet) -> Klusterlet:
        """Fetch the live Klusterlet at the desired one's identity into a new value."""
        live = await self.client.get(Klusterlet.API_VERSION, self.KIND, klusterlet.key)
        try:
            return KlusterletSchema().load(live)
        except ValidationError as ex:
            raise FetchError(
                f"Live {self.KIND} `{klusterlet.key}` is unreadable: {ex.messages}",
                name=klusterlet.name,
            ) from ex

    async def reconcile(self, template_name: str, cluster: Cluster) -> Klusterlet:
        """Render, then create or update the Klusterlet. Returns the desired object as sent."""
        klusterlet = self.prepare_klusterlet(template_name, cluster)
        try:
            latest = await self.fetch(klusterlet)
        except NotFoundError:
            self.logger.info(f"Creating {self.KIND} `{klusterlet.key}`")
            await self.client.create(self.prepare_body(klusterlet))
            return klusterlet
        klusterlet.merge_resource_version(latest)
        self.logger.info(
            f"Updating {self.KIND} `{klusterlet.key}` at resourceVersion {klusterlet.resource_version}"
        )
        await self.client.update(self.prepare_body(klusterlet))
        return klusterlet
