import os
from typing import Any

_TRUE, _FALSE = {"True", "true", "yes", "1"}, {"False", "false", "no", "0"}


def _getenv(name: str, *default: Any) -> Any:
    try:
        v = os.environ[name]
        if v in _TRUE:
            return True
        elif v in _FALSE:
            return False
        else:
            return v
    except KeyError:
        pass
    if default:
        return default[0]
    raise KeyError(name)


# ------------------------------------------------
# ---- Defaults and environment variables ----
# ------------------------------------------------

#: Path of the kubeconfig for the spoke cluster. In-cluster config is used when unset.
SPOKE_KUBECONFIG = _getenv("SPOKE_KUBECONFIG", None)

#: Context to select from the spoke kubeconfig
SPOKE_CONTEXT = _getenv("SPOKE_CONTEXT", None)

#: Name the spoke cluster registers with on the hub
CLUSTER_NAME = _getenv("CLUSTER_NAME", "cluster1")

#: Path of the kubeconfig the spoke agents use to bootstrap against the hub
HUB_KUBECONFIG = _getenv("HUB_KUBECONFIG", None)

#: Hub API server address advertised to the spoke agents
HUB_API_SERVER = _getenv("HUB_API_SERVER", "")

#: Bundled template the Klusterlet is rendered from
KLUSTERLET_TEMPLATE = _getenv("KLUSTERLET_TEMPLATE", "klusterlet.yaml.j2")

#: Deadline in seconds for one full registration run
REGISTRATION_TIMEOUT_SECONDS = float(_getenv("REGISTRATION_TIMEOUT_SECONDS", 120.0))

#: Seconds to wait before retrying a failed registration run
REGISTRATION_RETRY_DELAY_SECONDS = float(
    _getenv("REGISTRATION_RETRY_DELAY_SECONDS", 30.0)
)

#: Number of registration runs attempted before giving up
REGISTRATION_RETRIES = int(_getenv("REGISTRATION_RETRIES", 10))


class Settings:
    """Agent settings"""

    spoke_kubeconfig: str = SPOKE_KUBECONFIG
    spoke_context: str = SPOKE_CONTEXT
    cluster_name: str = CLUSTER_NAME
    hub_kubeconfig: str = HUB_KUBECONFIG
    hub_api_server: str = HUB_API_SERVER
    klusterlet_template: str = KLUSTERLET_TEMPLATE
    registration_timeout_seconds: float = REGISTRATION_TIMEOUT_SECONDS
    registration_retry_delay_seconds: float = REGISTRATION_RETRY_DELAY_SECONDS
    registration_retries: int = REGISTRATION_RETRIES

    def __init__(
        self,
        *args,
        spoke_kubeconfig: str = None,
        spoke_context: str = None,
        cluster_name: str = None,
        hub_kubeconfig: str = None,
        hub_api_server: str = None,
        klusterlet_template: str = None,
        registration_timeout_seconds: float = None,
        registration_retry_delay_seconds: float = None,
        registration_retries: int = None,
        **kwargs,
    ):
        if spoke_kubeconfig is not None:
            self.spoke_kubeconfig = spoke_kubeconfig

        if spoke_context is not None:
            self.spoke_context = spoke_context

        if cluster_name is not None:
            self.cluster_name = cluster_name

        if hub_kubeconfig is not None:
            self.hub_kubeconfig = hub_kubeconfig

        if hub_api_server is not None:
            self.hub_api_server = hub_api_server

        if klusterlet_template is not None:
            self.klusterlet_template = klusterlet_template

        if registration_timeout_seconds is not None:
            self.registration_timeout_seconds = registration_timeout_seconds

        if registration_retry_delay_seconds is not None:
            self.registration_retry_delay_seconds = registration_retry_delay_seconds

        if registration_retries is not None:
            self.registration_retries = registration_retries
