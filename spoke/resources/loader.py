import base64
import logging
import yaml
import jinja2
from logging import Logger
from typing import Any, Dict, Mapping
from spoke.types.models.resource import Resource
from spoke.utils.errors import ParseError, ReadError, RenderError

MANIFESTS_PACKAGE = "spoke"
MANIFESTS_PATH = "manifests"


def to_yaml(value: Any) -> str:
    return yaml.safe_dump(value, default_flow_style=False, sort_keys=False)


def b64encode(value: Any) -> str:
    if isinstance(value, str):
        value = value.encode()
    return base64.b64encode(value).decode()


class ResourceLoader:
    """Reads bundled resource documents and renders templated ones.

    Static documents and templates share one Jinja2 loader, so a single
    name → content table backs both. By default that table is the
    ``spoke/manifests`` directory; tests pass ``documents`` instead.
    """

    env: jinja2.Environment
    logger: Logger

    def __init__(self, documents: Mapping[str, str] = None, logger: Logger = None):
        if documents is not None:
            source = jinja2.DictLoader(dict(documents))
        else:
            source = jinja2.PackageLoader(MANIFESTS_PACKAGE, MANIFESTS_PATH)
        self.env = jinja2.Environment(
            loader=source,
            undefined=jinja2.StrictUndefined,
            keep_trailing_newline=True,
            autoescape=False,
        )
        self.env.filters["to_yaml"] = to_yaml
        self.env.filters["b64encode"] = b64encode
        self.logger = logger or logging.getLogger(__name__)

    def read(self, name: str) -> str:
        """Return the raw text of a bundled document."""
        try:
            source, _, _ = self.env.loader.get_source(self.env, name)
        except jinja2.TemplateNotFound as ex:
            raise ReadError(f"Document `{name}` not found", name=name) from ex
        except (OSError, UnicodeDecodeError) as ex:
            raise ReadError(f"Failed to read document `{name}`: {ex}", name=name) from ex
        return source

    def parse(self, name: str, text: str) -> Resource:
        """Parse a document into a schema-less resource. No validation beyond syntax."""
        return Resource(self.parse_document(name, text, ParseError))

    def parse_document(
        self, name: str, text: str, error=ParseError
    ) -> Dict[str, Any]:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as ex:
            raise error(f"Failed to parse document `{name}`: {ex}", name=name) from ex
        if not isinstance(data, dict):
            raise error(
                f"Document `{name}` is not a mapping, got {type(data).__name__}",
                name=name,
            )
        return data

    def load(self, name: str) -> Resource:
        """Read and parse a bundled document."""
        resource = self.parse(name, self.read(name))
        self.logger.debug(f"Loaded `{name}` as {resource!r}")
        return resource

    def render(self, name: str, data: Any) -> str:
        """Render a bundled template with ``data`` bound to ``cluster``."""
        try:
            template = self.env.get_template(name)
        except jinja2.TemplateNotFound as ex:
            raise ReadError(f"Template `{name}` not found", name=name) from ex
        except jinja2.TemplateSyntaxError as ex:
            raise RenderError(
                f"Template `{name}` is malformed: {ex}", name=name
            ) from ex
        try:
            return template.render(cluster=data)
        except (jinja2.TemplateError, yaml.YAMLError, TypeError, ValueError) as ex:
            raise RenderError(f"Failed to render `{name}`: {ex}", name=name) from ex

    def load_template(self, name: str, data: Any) -> Resource:
        """Render a templated document and parse it into a schema-less resource."""
        return Resource(self.parse_document(name, self.render(name, data), RenderError))
