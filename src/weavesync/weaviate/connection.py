"""
Connection options shared by every Weaviate task.

Options:
    url: Weaviate endpoint, with or without scheme
        (``localhost:8080``, ``https://cluster-id.weaviate.network``).
        Defaults to https when no scheme is given.
    apiKey: Optional API key for hosted clusters; requests are anonymous
        without it.
    headers: Optional headers sent with every request, e.g. keys for
        upstream model providers.
"""

from typing import Dict, Optional, Tuple

from pydantic import field_validator

from weavesync.core.config.settings import settings
from weavesync.core.exceptions.custom_exceptions import ConfigurationError
from weavesync.runtime.context import RunContext
from weavesync.tasks.base import Task
from weavesync.weaviate.client import ConnectionConfig, WeaviateClient

SUPPORTED_SCHEMES = ("http", "https")


def split_url(url: str) -> Tuple[str, str]:
    """
    Split a rendered URL into scheme and host.

    Raises:
        ConfigurationError: If the URL has no host, contains whitespace
            or uses an unsupported scheme
    """
    url = url.strip()
    separator = url.find("://")
    if separator == -1:
        scheme, host = settings.DEFAULT_SCHEME, url
    else:
        scheme, host = url[:separator].lower(), url[separator + 3 :]
    host = host.rstrip("/")

    if scheme not in SUPPORTED_SCHEMES:
        raise ConfigurationError(
            f"Unsupported URL scheme '{scheme}' in {url!r}",
            error_code="CONFIG_INVALID_URL",
            details={"url": url},
        )
    if not host or any(ch.isspace() for ch in host):
        raise ConfigurationError(
            f"Invalid Weaviate URL: {url!r}",
            error_code="CONFIG_INVALID_URL",
            details={"url": url},
        )
    return scheme, host


class WeaviateConnection(Task):
    """Base class of the Weaviate tasks: connection options and client builder"""

    url: str
    api_key: Optional[str] = None
    headers: Optional[Dict[str, str]] = None

    @field_validator("url")
    @classmethod
    def validate_url_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("url must not be blank")
        return v

    def connect(self, run_context: RunContext) -> WeaviateClient:
        """Render the connection options and build a client"""
        scheme, host = split_url(run_context.render(self.url))
        api_key = run_context.render(self.api_key) if self.api_key else None
        headers = {
            str(k): str(v) for k, v in run_context.render(self.headers or {}).items()
        }

        self.logger.debug(
            "Connecting to Weaviate",
            scheme=scheme,
            host=host,
            authenticated=api_key is not None,
        )
        return WeaviateClient(
            ConnectionConfig(scheme=scheme, host=host, api_key=api_key, headers=headers)
        )
