import logging
from logging import Logger
from spoke.kube import ClusterClient
from spoke.types.models.resource import Resource
from spoke.utils.errors import NotFoundError


class Reconciler:
    """Create-or-update for schema-less resources."""

    client: ClusterClient
    logger: Logger

    def __init__(self, client: ClusterClient, logger: Logger = None):
        self.client = client
        self.logger = logger or logging.getLogger(__name__)

    async def fetch(self, resource: Resource) -> Resource:
        """Fetch the live state at the resource's identity into a fresh value."""
        live = await self.client.get(resource.api_version, resource.kind, resource.key)
        return Resource(live)

    async def reconcile(self, resource: Resource) -> Resource:
        """Create ``resource`` if absent, otherwise update it in place.

        Exactly one fetch, then at most one create or update. Any fetch
        error other than absence is raised as-is and nothing is written.
        """
        try:
            live = await self.fetch(resource)
        except NotFoundError:
            self.logger.info(f"Creating {resource.kind} `{resource.key}`")
            return Resource(await self.client.create(resource.as_dict()))
        resource.merge_resource_version(live)
        self.logger.info(
            f"Updating {resource.kind} `{resource.key}` at resourceVersion {resource.resource_version}"
        )
        return Resource(await self.client.update(resource.as_dict()))
