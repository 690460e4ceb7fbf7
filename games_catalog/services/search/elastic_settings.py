"""Derivation of the Elasticsearch base address from configuration."""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from urllib.parse import urlparse

from games_catalog.config import settings
from games_catalog.errors import ConfigurationError

logger = logging.getLogger(__name__)


def _is_absolute_http_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


@dataclass(frozen=True)
class ElasticSettings:
    """Connection settings for the search backend.

    ``url`` wins when present. Otherwise ``cloud_id`` is decoded using the
    Elastic Cloud format ``name:base64("host$es_id$kibana_id")``, falling
    back to the raw value when it is already an absolute URL.
    """

    url: str | None = None
    cloud_id: str | None = None
    api_key: str | None = None
    timeout_seconds: float = 10.0

    def base_url(self) -> str:
        if self.url and self.url.strip():
            candidate = self.url.strip()
            if _is_absolute_http_url(candidate):
                return candidate.rstrip("/")
            raise ConfigurationError("ELASTIC_URL is not a valid absolute URL", url=candidate)

        if not self.cloud_id or not self.cloud_id.strip():
            raise ConfigurationError("ELASTIC_URL or ELASTIC_CLOUD_ID must be configured")

        cloud_id = self.cloud_id.strip()
        derived = self._decode_cloud_id(cloud_id)
        if derived:
            return derived
        if _is_absolute_http_url(cloud_id):
            return cloud_id.rstrip("/")
        raise ConfigurationError("Unable to derive the search backend URL from ELASTIC_CLOUD_ID")

    @staticmethod
    def _decode_cloud_id(cloud_id: str) -> str | None:
        _, sep, payload = cloud_id.partition(":")
        if not sep or not payload:
            return None
        try:
            decoded = base64.b64decode(payload, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            logger.debug("ELASTIC_CLOUD_ID payload is not base64; trying it as a URL")
            return None

        segments = decoded.split("$")
        if len(segments) < 2 or not segments[0].strip() or not segments[1].strip():
            return None
        host, es_id = segments[0].strip(), segments[1].strip()
        if host.startswith(("http://", "https://")):
            scheme, _, host = host.partition("://")
        else:
            scheme = "https"
        return f"{scheme}://{es_id}.{host}"


def load_elastic_settings() -> ElasticSettings:
    return ElasticSettings(
        url=settings.ELASTIC_URL,
        cloud_id=settings.ELASTIC_CLOUD_ID,
        api_key=settings.ELASTIC_API_KEY,
        timeout_seconds=settings.ELASTIC_TIMEOUT_SECONDS,
    )
