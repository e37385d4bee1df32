import asyncio
import kopf
import logging
import yaml
from logging import Logger
from typing import Sequence
import spoke.handlers.probes as probes
from spoke.kube import ClusterClient
from spoke.resources import (
    BatchApply,
    KlusterletReconciler,
    Reconciler,
    ResourceLoader,
)
from spoke.types.models.cluster import Args, Cluster, HubInfo
from spoke.types.settings import (
    REGISTRATION_RETRIES,
    REGISTRATION_RETRY_DELAY_SECONDS,
    Settings,
)
from spoke.utils.errors import ConfigError, SpokeError, convert_error
from spoke.utils.helpers import load_yaml_file, utc_now

#: Bundled documents applied in this order before the Klusterlet
STATIC_RESOURCES: Sequence[str] = (
    "namespace_agent.yaml",
    "namespace.yaml",
    "cluster_role.yaml",
    "cluster_role_binding.yaml",
    "klusterlets.crd.yaml",
    "service_account.yaml",
)

#: Secret carrying the kubeconfig the spoke agents bootstrap against the hub with
BOOTSTRAP_HUB_KUBECONFIG = "bootstrap_hub_kubeconfig.yaml.j2"


def prepare_cluster(conf: Settings, client: ClusterClient) -> Cluster:
    """Build the template render context for the spoke cluster."""
    hub_kubeconfig = {}
    if conf.hub_kubeconfig:
        try:
            hub_kubeconfig = load_yaml_file(conf.hub_kubeconfig)
        except (OSError, ValueError, yaml.YAMLError) as ex:
            raise ConfigError(
                f"Failed to read hub kubeconfig `{conf.hub_kubeconfig}`: {ex}",
                name=conf.hub_kubeconfig,
            ) from ex
    return Cluster(
        name=conf.cluster_name,
        args=Args(kube_config=client.configuration, client=client),
        hub_info=HubInfo(kube_config=hub_kubeconfig, api_server=conf.hub_api_server),
    )


async def connect(conf: Settings) -> ClusterClient:
    """Connect to the spoke cluster from the configured kubeconfig, or the environment."""
    if conf.spoke_kubeconfig:
        try:
            with open(conf.spoke_kubeconfig) as f:
                kubeconfig = f.read()
        except OSError as ex:
            raise ConfigError(
                f"Failed to read kubeconfig `{conf.spoke_kubeconfig}`: {ex}",
                name=conf.spoke_kubeconfig,
            ) from ex
        return await ClusterClient.from_kubeconfig(kubeconfig, conf.spoke_context)
    return await ClusterClient.from_environment(conf.spoke_context)


async def register(
    client: ClusterClient,
    cluster: Cluster,
    conf: Settings,
    loader: ResourceLoader = None,
    logger: Logger = None,
) -> None:
    """Apply everything the spoke needs to join the hub.

    Errors propagate to the caller, which owns retries and deadlines.
    A failed run may leave earlier resources applied; running again
    converges because every step is create-or-update.
    """
    logger = logger or logging.getLogger(__name__)
    loader = loader or ResourceLoader(logger=logger)
    reconciler = Reconciler(client, logger=logger)

    await BatchApply(loader, reconciler, logger=logger).apply_all(STATIC_RESOURCES)
    await reconciler.reconcile(loader.load_template(BOOTSTRAP_HUB_KUBECONFIG, cluster))
    await KlusterletReconciler(client, loader, logger=logger).reconcile(
        conf.klusterlet_template, cluster
    )
    logger.info(f"Cluster `{cluster.name}` registered")


@kopf.on.startup(retries=REGISTRATION_RETRIES, backoff=REGISTRATION_RETRY_DELAY_SECONDS)
async def setup(
    settings: kopf.OperatorSettings, memo: kopf.Memo, logger: logging.Logger, **kwargs
):
    # Nothing is watched; the agent only registers and answers probes.
    settings.scanning.disabled = True
    settings.posting.level = logging.WARNING

    memo.conf = Settings()
    try:
        if memo.get("client") is None:
            memo.client = await connect(memo.conf)
            logger.info("Spoke cluster client initialized")
        cluster = prepare_cluster(memo.conf, memo.client)
        await asyncio.wait_for(
            register(memo.client, cluster, memo.conf, logger=logger),
            timeout=memo.conf.registration_timeout_seconds,
        )
    except (SpokeError, asyncio.TimeoutError) as ex:
        logger.error(f"Registration of `{memo.conf.cluster_name}` failed: {ex}")
        convert_error(ex, delay=memo.conf.registration_retry_delay_seconds)
    memo.registered_at = utc_now().isoformat()


@kopf.on.cleanup()
async def cleanup(memo: kopf.Memo, logger: logging.Logger, **kwargs):
    """Cleanup handler for agent shutdown."""
    logger.info("Shutting down agent...")

    if memo.get("client") is not None:
        await memo.client.close()
        logger.info("Spoke cluster client closed")

    logger.info("Agent shutdown complete")


__all__ = [
    "probes",
    "STATIC_RESOURCES",
    "BOOTSTRAP_HUB_KUBECONFIG",
    "prepare_cluster",
    "connect",
    "register",
]
