"""Kubernetes cluster client used by the reconcilers."""
import aiohttp
import yaml
from typing import Any, Dict, Mapping, Optional, Type, Union
from kubernetes_asyncio import config
from kubernetes_asyncio.client import ApiException
from kubernetes_asyncio.client.api_client import ApiClient
from kubernetes_asyncio.dynamic import DynamicClient
from kubernetes_asyncio.dynamic.exceptions import (
    ResourceNotFoundError,
    ResourceNotUniqueError,
)
from spoke.types.models.resource import ObjectKey
from spoke.utils.errors import (
    SpokeError,
    ConfigError,
    NotFoundError,
    FetchError,
    CreateError,
    AlreadyExistsError,
    UpdateError,
    ConflictError,
    already_exists_error,
    not_found_error,
    conflict_error,
    describe_api_exception,
)

JSON = Dict[str, Any]
Kubeconfig = Union[str, bytes, Mapping[str, Any]]


def _describe(body: Mapping[str, Any]) -> str:
    metadata = body.get("metadata") or {}
    key = ObjectKey(metadata.get("name", ""), metadata.get("namespace") or None)
    return f"{body.get('kind', '')} {key}"


def _to_dict(instance: Any) -> JSON:
    if instance is None:
        return {}
    if hasattr(instance, "to_dict"):
        return instance.to_dict()
    return dict(instance)


class ClusterClient:
    """Get, create and update arbitrary objects in one cluster.

    The connection (``ApiClient``) is shared by every call made through a
    client; nothing here mutates it after construction. API failures are
    translated to ``spoke.utils.errors`` exceptions. Cancellation is never
    caught, so a caller's deadline surfaces unchanged.
    """

    api_client: ApiClient
    _dynamic_client: Optional[DynamicClient] = None

    def __init__(self, api_client: ApiClient, dynamic_client: DynamicClient = None):
        self.api_client = api_client
        self._dynamic_client = dynamic_client

    @classmethod
    async def from_kubeconfig(
        cls, kubeconfig: Kubeconfig, context: str = None
    ) -> "ClusterClient":
        """Build a client from a serialized kubeconfig document."""
        if isinstance(kubeconfig, (str, bytes)):
            try:
                kubeconfig = yaml.safe_load(kubeconfig)
            except yaml.YAMLError as ex:
                raise ConfigError(f"Malformed kubeconfig: {ex}") from ex
        if not isinstance(kubeconfig, Mapping):
            raise ConfigError("Kubeconfig must be a mapping")
        try:
            api_client = await config.new_client_from_config_dict(
                config_dict=dict(kubeconfig), context=context
            )
        except config.ConfigException as ex:
            raise ConfigError(f"Invalid kubeconfig: {ex}") from ex
        return cls(api_client)

    @classmethod
    async def from_environment(cls, context: str = None) -> "ClusterClient":
        """Load in-cluster config first (for production), then local kubeconfig (for dev)."""
        try:
            config.load_incluster_config()
            return cls(ApiClient())
        except config.ConfigException:
            pass
        try:
            await config.load_kube_config(context=context)
        except (config.ConfigException, OSError) as ex:
            raise ConfigError(f"Failed to load Kubernetes configuration: {ex}") from ex
        return cls(ApiClient())

    @property
    def configuration(self):
        return self.api_client.configuration

    async def dynamic_client(self) -> DynamicClient:
        if self._dynamic_client is None:
            self._dynamic_client = await DynamicClient(self.api_client)
        return self._dynamic_client

    async def _api(
        self, api_version: str, kind: str, error: Type[SpokeError], name: str
    ):
        """Discover the API serving ``kind``. Any failure is raised as ``error``."""
        try:
            client = await self.dynamic_client()
            return await client.resources.get(api_version=api_version, kind=kind)
        except ResourceNotFoundError as ex:
            raise error(f"{kind} is not served by {api_version}", name=name) from ex
        except ResourceNotUniqueError as ex:
            raise error(f"{kind} is ambiguous in {api_version}: {ex}", name=name) from ex
        except ApiException as ex:
            raise error(
                f"Discovery failed for {name}: {describe_api_exception(ex)}",
                name=name,
                status=ex.status,
            ) from ex
        except aiohttp.ClientError as ex:
            raise error(f"Discovery failed for {name}: {ex}", name=name) from ex

    async def get(self, api_version: str, kind: str, key: ObjectKey) -> JSON:
        """Fetch the live state of an object.

        Raises:
            NotFoundError: The object does not exist.
            FetchError: Anything else went wrong, including discovery of ``kind``.
        """
        name = f"{kind} {key}"
        api = await self._api(api_version, kind, FetchError, name)
        try:
            instance = await self._dynamic_client.get(
                api, name=key.name, namespace=key.namespace
            )
        except ApiException as ex:
            if not_found_error(ex):
                raise NotFoundError(
                    f"{name} not found", name=name, status=ex.status
                ) from ex
            raise FetchError(
                f"Failed to get {name}: {describe_api_exception(ex)}",
                name=name,
                status=ex.status,
            ) from ex
        except aiohttp.ClientError as ex:
            raise FetchError(f"Failed to get {name}: {ex}", name=name) from ex
        return _to_dict(instance)

    async def create(self, body: JSON) -> JSON:
        """Create an object.

        Raises:
            AlreadyExistsError: The object appeared since it was fetched.
            CreateError: Anything else went wrong.
        """
        name = _describe(body)
        api = await self._api(body["apiVersion"], body["kind"], CreateError, name)
        try:
            instance = await self._dynamic_client.create(
                api, body=body, namespace=body["metadata"].get("namespace")
            )
        except ApiException as ex:
            error = AlreadyExistsError if already_exists_error(ex) else CreateError
            raise error(
                f"Failed to create {name}: {describe_api_exception(ex)}",
                name=name,
                status=ex.status,
            ) from ex
        except aiohttp.ClientError as ex:
            raise CreateError(f"Failed to create {name}: {ex}", name=name) from ex
        return _to_dict(instance)

    async def update(self, body: JSON) -> JSON:
        """Replace an object. ``body`` must carry the live resourceVersion.

        Raises:
            ConflictError: The object changed or was deleted since it was fetched.
            UpdateError: Anything else went wrong.
        """
        name = _describe(body)
        metadata = body["metadata"]
        api = await self._api(body["apiVersion"], body["kind"], UpdateError, name)
        try:
            instance = await self._dynamic_client.replace(
                api,
                body=body,
                name=metadata["name"],
                namespace=metadata.get("namespace"),
            )
        except ApiException as ex:
            if conflict_error(ex) or not_found_error(ex):
                error = ConflictError
            else:
                error = UpdateError
            raise error(
                f"Failed to update {name}: {describe_api_exception(ex)}",
                name=name,
                status=ex.status,
            ) from ex
        except aiohttp.ClientError as ex:
            raise UpdateError(f"Failed to update {name}: {ex}", name=name) from ex
        return _to_dict(instance)

    async def close(self):
        """Shutdown the client"""
        await self.api_client.close()
