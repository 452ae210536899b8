#Purpose: Build a ClientConfig from the environment (.env supported).
#The client core never reads the environment itself; applications call load_config().
#Example in .env:
#VALHALLA_BASE_URL=http://localhost:8002
#VALHALLA_TIMEOUT=15
#VALHALLA_API_KEY_HEADER=X-Api-Key
#VALHALLA_API_KEY=secret
#VALHALLA_SENSITIVE_LOGGING=false

from __future__ import annotations

import os
from typing import Mapping, Optional

from dotenv import load_dotenv

from .config import DEFAULT_TIMEOUT_SECONDS, ClientConfig
from .errors import ConfigurationError

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean (true/false), got {raw!r}.")


def load_config(
    env: Optional[Mapping[str, str]] = None,
    dotenv_path: Optional[str] = None,
) -> ClientConfig:
    """
    Read VALHALLA_* settings and return a validated ClientConfig.

    When `env` is None the process environment is used, after loading `.env`
    (existing variables are not overridden).
    """
    if env is None:
        load_dotenv(dotenv_path)
        env = os.environ

    base_url = env.get("VALHALLA_BASE_URL")
    if not base_url:
        raise ConfigurationError("Valhalla base URL not set. Please set VALHALLA_BASE_URL (e.g. in the .env file).")

    raw_timeout = env.get("VALHALLA_TIMEOUT")
    timeout = DEFAULT_TIMEOUT_SECONDS
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ConfigurationError(f"VALHALLA_TIMEOUT must be a number of seconds, got {raw_timeout!r}.") from None

    return ClientConfig(
        base_url=base_url,
        timeout=timeout,
        api_key_header_name=env.get("VALHALLA_API_KEY_HEADER") or None,
        api_key_header_value=env.get("VALHALLA_API_KEY") or None,
        sensitive_logging=_parse_bool(
            "VALHALLA_SENSITIVE_LOGGING", env.get("VALHALLA_SENSITIVE_LOGGING", "")
        ),
    )
