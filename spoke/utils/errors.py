import json
import kopf
import yaml
import jinja2
from typing import Optional
from kubernetes_asyncio.client import ApiException

_ALREADY_EXISTS = "alreadyexists"
_NOT_FOUND = "notfound"
_CONFLICT = "conflict"

# 4xx statuses that are worth retrying
_RETRYABLE_CLIENT_STATUSES = (408, 409, 429)


class SpokeError(Exception):
    """Base error for spoke registration.

    Args:
        message: Human readable description.
        name: Name of the resource (document, template or object) involved.
        status: HTTP status reported by the API server, if any.
    """

    def __init__(self, message: str, name: str = None, status: int = None):
        super().__init__(message)
        self.name = name
        self.status = status


class ConfigError(SpokeError):
    """Kubeconfig could not be turned into a cluster connection."""


class ReadError(SpokeError):
    """Document source is missing or unreadable."""


class ParseError(SpokeError):
    """Document is not a well formed resource."""


class RenderError(ParseError):
    """Template could not be rendered or parsed into a typed resource."""


class NotFoundError(SpokeError):
    """Object does not exist in the cluster."""


class FetchError(SpokeError):
    """Object could not be read for a reason other than absence."""


class CreateError(SpokeError):
    """Object could not be created."""


class AlreadyExistsError(CreateError):
    """Object was created by someone else between fetch and create."""


class UpdateError(SpokeError):
    """Object could not be updated."""


class ConflictError(UpdateError):
    """Update lost an optimistic concurrency race, or the object vanished."""


def _reason(ex: ApiException) -> str:
    try:
        err = json.loads(ex.body)
    except (TypeError, ValueError):
        return ""
    if not isinstance(err, dict):
        return ""
    return str(err.get("reason", "")).lower()


def already_exists_error(ex: ApiException) -> bool:
    if not isinstance(ex, ApiException):
        return False
    return ex.status == 409 and _reason(ex) == _ALREADY_EXISTS


def not_found_error(ex: ApiException) -> bool:
    if not isinstance(ex, ApiException):
        return False
    return ex.status == 404 or _reason(ex) == _NOT_FOUND


def conflict_error(ex: ApiException) -> bool:
    if not isinstance(ex, ApiException):
        return False
    return ex.status == 409 or _reason(ex) == _CONFLICT


def describe_api_exception(ex: ApiException) -> str:
    """Build a single line description of a kubernetes ApiException."""
    error_msg = f"Kubernetes API error ({ex.status}): {ex.reason}"
    try:
        if ex.body:
            body = json.loads(ex.body)
            if "message" in body:
                error_msg = f"{error_msg} - {body['message']}"
    except (TypeError, ValueError, AttributeError):
        pass
    return error_msg


def is_permanent(ex: Exception) -> bool:
    """Decide whether retrying ``ex`` can ever succeed.

    Configuration-time problems (bad kubeconfig, missing or malformed
    documents) are permanent. API failures are permanent for 4xx statuses
    other than timeouts, conflicts and throttling. Lost create or update
    races are temporary whatever their status; a rerun fetches again.
    Everything else, connection failures included, is temporary.
    """
    if isinstance(ex, (ConflictError, AlreadyExistsError)):
        return False
    if isinstance(
        ex, (ConfigError, ReadError, ParseError, yaml.YAMLError, jinja2.TemplateError)
    ):
        return True
    status: Optional[int] = getattr(ex, "status", None)
    if isinstance(status, int):
        return 400 <= status < 500 and status not in _RETRYABLE_CLIENT_STATUSES
    return False


def convert_error(ex: Exception, permanent: bool = None, delay: float = 30):
    """
    Convert a registration failure to a Kopf-friendly exception.

    Args:
        ex: The exception to convert
        permanent: If True, raises PermanentError (won't retry). If False, raises TemporaryError (will retry).
                   If None, automatically determines it with ``is_permanent``.
        delay: Seconds Kopf waits before retrying a temporary error.

    Raises:
        kopf.TemporaryError or kopf.PermanentError with serializable error details
    """
    if isinstance(ex, ApiException):
        error_msg = describe_api_exception(ex)
    else:
        error_msg = f"{type(ex).__name__}: {ex}"

    if permanent is None:
        permanent = is_permanent(ex)

    if permanent:
        raise kopf.PermanentError(error_msg) from ex
    else:
        raise kopf.TemporaryError(error_msg, delay=delay) from ex
