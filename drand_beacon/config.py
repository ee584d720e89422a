"""
Client configuration.

Typed configuration for the fetching client and its HTTP transport:
- Endpoint (base URL of a drand chain)
- HTTP timeout / retry / backoff knobs
- Recency tolerance for "latest" beacons

It provides:
- A dataclass with validation
- Loading from environment variables (prefix configurable)
- Loading from a JSON or YAML* file (*if PyYAML is available)

The verification engine takes no configuration; everything here is about
how beacons are fetched.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from .constants import (
    DEFAULT_BACKOFF_BASE_S,
    DEFAULT_BASE_URL,
    DEFAULT_HTTP_RETRIES,
    DEFAULT_HTTP_TIMEOUT_S,
    DEFAULT_LATEST_TOLERANCE_ROUNDS,
    ENV_PREFIX,
)


@dataclass
class ClientConfig:
    """
    base_url: chain endpoint, e.g. https://api.drand.sh or
              https://api.drand.sh/<chain-hash> for non-default chains
    timeout_s: per-request timeout
    retries: extra attempts on timeouts / connection errors (HTTP errors are not retried)
    backoff_base_s: first retry delay; doubles per attempt
    latest_tolerance_rounds: how many rounds a "latest" beacon may lag the clock
    user_agent: optional User-Agent header
    """

    base_url: str = DEFAULT_BASE_URL
    timeout_s: float = DEFAULT_HTTP_TIMEOUT_S
    retries: int = DEFAULT_HTTP_RETRIES
    backoff_base_s: float = DEFAULT_BACKOFF_BASE_S
    latest_tolerance_rounds: int = DEFAULT_LATEST_TOLERANCE_ROUNDS
    user_agent: Optional[str] = None

    def validate(self) -> None:
        u = urlparse(self.base_url)
        if u.scheme not in {"http", "https"} or not u.netloc:
            raise ValueError(f"base_url must be an http(s) URL: {self.base_url!r}")
        if self.timeout_s <= 0:
            raise ValueError("timeout_s must be > 0")
        if self.retries < 0:
            raise ValueError("retries must be >= 0")
        if self.backoff_base_s < 0:
            raise ValueError("backoff_base_s must be >= 0")
        if self.latest_tolerance_rounds < 0:
            raise ValueError("latest_tolerance_rounds must be >= 0")

    @property
    def normalized_base_url(self) -> str:
        return self.base_url.rstrip("/")

    # -------------------------
    # Serialization helpers
    # -------------------------

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True)

    # -------------------------
    # Loaders
    # -------------------------

    @staticmethod
    def from_env(prefix: str = ENV_PREFIX) -> "ClientConfig":
        """
        Load configuration from environment variables. All variables are optional.

        Supported keys (examples):
          - DRAND_BASE_URL=https://api.drand.sh
          - DRAND_TIMEOUT_S=5
          - DRAND_RETRIES=2
          - DRAND_BACKOFF_BASE_S=0.25
          - DRAND_LATEST_TOLERANCE_ROUNDS=1
          - DRAND_USER_AGENT=my-app/1.0
        """

        def _get(name: str, cast: Any, default: Any) -> Any:
            key = prefix + name
            raw = os.getenv(key)
            if raw is None:
                return default
            try:
                return cast(raw)
            except Exception as e:
                raise ValueError(f"Invalid value for {key}: {raw!r}") from e

        cfg = ClientConfig(
            base_url=_get("BASE_URL", str, DEFAULT_BASE_URL),
            timeout_s=_get("TIMEOUT_S", float, DEFAULT_HTTP_TIMEOUT_S),
            retries=_get("RETRIES", int, DEFAULT_HTTP_RETRIES),
            backoff_base_s=_get("BACKOFF_BASE_S", float, DEFAULT_BACKOFF_BASE_S),
            latest_tolerance_rounds=_get("LATEST_TOLERANCE_ROUNDS", int, DEFAULT_LATEST_TOLERANCE_ROUNDS),
            user_agent=_get("USER_AGENT", str, None),
        )
        cfg.validate()
        return cfg

    @staticmethod
    def from_file(path: str) -> "ClientConfig":
        """
        Load configuration from a JSON or YAML file. Keys mirror the dataclass
        fields. Example (YAML):

            base_url: https://api.drand.sh
            timeout_s: 5
            retries: 3
            latest_tolerance_rounds: 1
        """
        data = _parse_json_or_yaml(_read_text(path), path)
        if not isinstance(data, dict):
            raise ValueError(f"{path!r} must contain a mapping at the top level")
        unknown = set(data) - set(ClientConfig.__dataclass_fields__)
        if unknown:
            raise ValueError(f"unknown config keys in {path!r}: {', '.join(sorted(unknown))}")
        cfg = ClientConfig(**data)
        cfg.validate()
        return cfg


# -------------------------
# Utilities
# -------------------------


def _read_text(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _parse_json_or_yaml(text: str, path_hint: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    try:
        import yaml  # type: ignore
    except ImportError as e:
        raise ValueError(f"{path_hint!r} is not valid JSON and PyYAML is not installed") from e
    try:
        return yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse {path_hint!r} as JSON or YAML: {e}") from e


DEFAULT: ClientConfig = ClientConfig()

__all__ = ["ClientConfig", "DEFAULT"]
