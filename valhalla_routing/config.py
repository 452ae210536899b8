"""
Purpose: Immutable client settings, validated once at construction.
What it does:
- base_url: absolute http(s) URL, normalized so the path always ends in "/"
  (urljoin(base_url, "route") then works for "http://host" and "http://host/valhalla" alike)
- timeout: seconds, > 0 (default 15)
- api_key_header_name / api_key_header_value: both or neither
- sensitive_logging: log request/response bodies (never header values)

Rule: No environment access here (see settings.py). Invalid values fail construction,
not first use.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

from .errors import ConfigurationError

DEFAULT_TIMEOUT_SECONDS = 15.0


def normalize_base_url(base_url: str) -> str:
    """
    Validate and canonicalize the service base URL.

    "http://localhost:8002"            -> "http://localhost:8002/"
    "https://example.com/valhalla"     -> "https://example.com/valhalla/"
    "https://example.com/valhalla/?x=1" -> "https://example.com/valhalla/"
    """
    if not isinstance(base_url, str) or not base_url.strip():
        raise ConfigurationError("Base URL cannot be empty.")

    parts = urlsplit(base_url.strip())
    if parts.scheme.lower() not in ("http", "https") or not parts.netloc:
        raise ConfigurationError(f"Base URL '{base_url}' is not a valid absolute http(s) URL.")

    path = parts.path or "/"
    if not path.endswith("/"):
        path += "/"
    return urlunsplit((parts.scheme.lower(), parts.netloc, path, "", ""))


@dataclass(frozen=True, repr=False)
class ClientConfig:
    base_url: str
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    api_key_header_name: Optional[str] = None
    api_key_header_value: Optional[str] = None
    sensitive_logging: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_url", normalize_base_url(self.base_url))

        if isinstance(self.timeout, bool) or not isinstance(self.timeout, (int, float)):
            raise ConfigurationError(f"Timeout must be a number of seconds, got {self.timeout!r}.")
        if math.isnan(self.timeout) or math.isinf(self.timeout) or self.timeout <= 0:
            raise ConfigurationError("Timeout must be greater than zero.")
        object.__setattr__(self, "timeout", float(self.timeout))

        name, value = self.api_key_header_name, self.api_key_header_value
        if (name is None) != (value is None):
            raise ConfigurationError(
                "api_key_header_name and api_key_header_value must be provided together."
            )
        if name is not None and (not isinstance(name, str) or not isinstance(value, str)):
            raise ConfigurationError("API key header name and value must be strings.")
        if name is not None and (not name.strip() or not value.strip()):
            raise ConfigurationError("API key header name and value cannot be empty.")

    @property
    def has_api_key(self) -> bool:
        return self.api_key_header_name is not None

    @property
    def is_insecure(self) -> bool:
        """True when an API key would travel over plain HTTP."""
        return self.has_api_key and self.base_url.startswith("http://")

    def __repr__(self) -> str:
        #keep the key value out of reprs (and therefore out of logs/tracebacks)
        masked = "***" if self.api_key_header_value else None
        return (
            f"ClientConfig(base_url={self.base_url!r}, timeout={self.timeout!r}, "
            f"api_key_header_name={self.api_key_header_name!r}, "
            f"api_key_header_value={masked!r}, "
            f"sensitive_logging={self.sensitive_logging!r})"
        )
