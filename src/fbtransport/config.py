"""Transport configuration for fbtransport."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from typing import Any

from fbtransport._paths import split_path
from fbtransport.exceptions import TransportConfigError

_ENV_CONFIG_MAP = {
    "FBTRANSPORT_HOST": "host",
    "FBTRANSPORT_PREFIX": "prefix",
    "FBTRANSPORT_CREDENTIALS": "credentials",
    "FBTRANSPORT_APP_NAME": "app_name",
}

# Characters the database rejects in path segments.
_INVALID_PREFIX_CHARS = frozenset(".$#[]")


@dataclasses.dataclass(frozen=True)
class TransportConfig:
    """Transport configuration.

    Parameters
    ----------
    host : str or None
        Realtime Database URL (e.g. ``"https://my-db.firebaseio.com"``).
        Required before a transport can be built.
    prefix : str
        Path under which every record lives. ``"/"`` means the root.
    credentials : str or None
        Path to a service account JSON file. When ``None`` the Google
        application default credentials are used.
    app_name : str or None
        Name of the firebase-admin app owned by the transport. A unique
        name is generated when ``None``.
    """

    host: str | None = None
    prefix: str = "/"
    credentials: str | None = None
    app_name: str | None = None

    @property
    def prefix_parts(self) -> list[str]:
        return split_path(self.prefix)

    @classmethod
    def from_env(cls, **overrides: Any) -> TransportConfig:
        """Create configuration from ``FBTRANSPORT_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = os.environ.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        config_kwargs.update(overrides)
        return cls(**config_kwargs)

    def merged(self, options: Mapping[str, Any]) -> TransportConfig:
        """Return a copy with every non-``None`` option applied on top."""
        known = {f.name for f in dataclasses.fields(self)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise TransportConfigError(f"Unknown transport options: {', '.join(unknown)}")
        changes = {key: value for key, value in options.items() if value is not None}
        return dataclasses.replace(self, **changes)


def resolve_config(config: TransportConfig | None, options: Mapping[str, Any]) -> TransportConfig:
    """Merge caller options over *config* (or the environment) and validate."""
    base = config if config is not None else TransportConfig.from_env()
    resolved = base.merged(options)
    if not resolved.host:
        raise TransportConfigError("host is required (pass host=... or set FBTRANSPORT_HOST)")
    invalid = sorted(set(resolved.prefix) & _INVALID_PREFIX_CHARS)
    if invalid:
        raise TransportConfigError(f"prefix {resolved.prefix!r} contains forbidden characters: {' '.join(invalid)}")
    return resolved
