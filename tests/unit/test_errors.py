"""Unit tests for error helpers."""

import asyncio
import json
import kopf
import pytest
from kubernetes_asyncio.client import ApiException
from spoke.utils.errors import (
    AlreadyExistsError,
    ConfigError,
    ConflictError,
    FetchError,
    ParseError,
    ReadError,
    RenderError,
    already_exists_error,
    convert_error,
    describe_api_exception,
    not_found_error,
)


def api_exception(status, reason, message=None):
    ex = ApiException(status=status, reason=reason)
    ex.body = json.dumps({"reason": reason, "message": message or reason})
    return ex


class TestApiExceptionHelpers:
    def test_not_found(self):
        assert not_found_error(api_exception(404, "NotFound"))
        assert not not_found_error(api_exception(403, "Forbidden"))
        assert not not_found_error(ValueError("404"))

    def test_already_exists(self):
        assert already_exists_error(api_exception(409, "AlreadyExists"))
        assert not already_exists_error(api_exception(409, "Conflict"))

    def test_body_without_json(self):
        ex = ApiException(status=404, reason="Not Found")
        ex.body = "<html>"
        assert not_found_error(ex)

    def test_describe_includes_message(self):
        ex = api_exception(403, "Forbidden", "namespaces is forbidden")
        assert describe_api_exception(ex) == (
            "Kubernetes API error (403): Forbidden - namespaces is forbidden"
        )


class TestConvertError:
    @pytest.mark.parametrize(
        "ex",
        [
            ReadError("missing", name="a.yaml"),
            ParseError("bad", name="a.yaml"),
            RenderError("bad", name="a.yaml.j2"),
            ConfigError("bad kubeconfig"),
            FetchError("forbidden", status=403),
        ],
    )
    def test_permanent(self, ex):
        with pytest.raises(kopf.PermanentError):
            convert_error(ex)

    @pytest.mark.parametrize(
        "ex",
        [
            FetchError("unavailable", status=503),
            FetchError("connection refused"),
            ConflictError("stale", status=409),
            ConflictError("deleted", status=404),
            AlreadyExistsError("raced", status=409),
            FetchError("throttled", status=429),
            asyncio.TimeoutError(),
        ],
    )
    def test_temporary(self, ex):
        with pytest.raises(kopf.TemporaryError):
            convert_error(ex)

    def test_explicit_override(self):
        with pytest.raises(kopf.TemporaryError):
            convert_error(ReadError("missing"), permanent=False)

    def test_delay(self):
        with pytest.raises(kopf.TemporaryError) as exc:
            convert_error(FetchError("unavailable", status=503), delay=5)
        assert exc.value.delay == 5
