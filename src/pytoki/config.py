"""Store configuration for pytoki."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

from pytoki._constants import DEFAULT_DATA_DIR, MEDIA_DIR_NAME
from pytoki.exceptions import TokiConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class TokiConfig:
    """Store configuration.

    Parameters
    ----------
    data_dir : Path
        Directory holding the JSON tables and the media directory.
    media_dir_name : str
        Name of the blob directory inside *data_dir*.
    max_media_cache_entries : int
        Upper bound on decoded media payloads kept in memory.
        ``0`` means unbounded.
    strict_references : bool
        Raise :class:`~pytoki.exceptions.TokiNotFoundError` when an
        update/delete names an unknown id instead of silently ignoring it.
        Meant for debug builds and tests.
    auto_activate_new_trip : bool
        Make a freshly created Trip the active one when no Trip is active.
    seed_on_open : bool
        Run the demo-data seeder when the store is opened via
        :meth:`TripDataStore.open`.
    remote_fetch_timeout : float
        Total timeout in seconds for remote media downloads.
    """

    data_dir: Path = DEFAULT_DATA_DIR
    media_dir_name: str = MEDIA_DIR_NAME
    max_media_cache_entries: int = 0
    strict_references: bool = False
    auto_activate_new_trip: bool = True
    seed_on_open: bool = False
    remote_fetch_timeout: float = 30.0

    def __post_init__(self) -> None:
        if not isinstance(self.data_dir, Path):
            object.__setattr__(self, "data_dir", Path(self.data_dir).expanduser())
        if self.max_media_cache_entries < 0:
            raise TokiConfigError("max_media_cache_entries must be >= 0")
        if self.remote_fetch_timeout <= 0:
            raise TokiConfigError("remote_fetch_timeout must be positive")
        if not self.media_dir_name or "/" in self.media_dir_name:
            raise TokiConfigError(f"invalid media_dir_name: {self.media_dir_name!r}")

    @property
    def media_dir(self) -> Path:
        return self.data_dir / self.media_dir_name

    @classmethod
    def from_env(cls, **overrides: Any) -> TokiConfig:
        """Create configuration from environment variables.

        Reads optional ``TOKI_*`` variables. Explicit keyword arguments
        override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        TokiConfig
            Populated configuration.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        data_dir_env = env.get("TOKI_DATA_DIR")
        if data_dir_env:
            config_kwargs["data_dir"] = Path(data_dir_env).expanduser()

        media_dir_env = env.get("TOKI_MEDIA_DIR_NAME")
        if media_dir_env:
            config_kwargs["media_dir_name"] = media_dir_env

        cache_env = env.get("TOKI_MAX_MEDIA_CACHE_ENTRIES")
        if cache_env is not None and "max_media_cache_entries" not in overrides:
            try:
                config_kwargs["max_media_cache_entries"] = int(cache_env)
            except ValueError as exc:
                raise TokiConfigError(f"TOKI_MAX_MEDIA_CACHE_ENTRIES is not an integer: {cache_env!r}") from exc

        timeout_env = env.get("TOKI_REMOTE_FETCH_TIMEOUT")
        if timeout_env is not None and "remote_fetch_timeout" not in overrides:
            try:
                config_kwargs["remote_fetch_timeout"] = float(timeout_env)
            except ValueError as exc:
                raise TokiConfigError(f"TOKI_REMOTE_FETCH_TIMEOUT is not a number: {timeout_env!r}") from exc

        if "strict_references" not in overrides:
            config_kwargs["strict_references"] = _env_bool(env.get("TOKI_STRICT_REFERENCES"), False)

        if "auto_activate_new_trip" not in overrides:
            config_kwargs["auto_activate_new_trip"] = _env_bool(env.get("TOKI_AUTO_ACTIVATE_NEW_TRIP"), True)

        if "seed_on_open" not in overrides:
            config_kwargs["seed_on_open"] = _env_bool(env.get("TOKI_SEED_ON_OPEN"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
