"""Runtime configuration for the scanner, analyser and validator."""

from __future__ import annotations

from dataclasses import dataclass, replace
import os
from typing import Any, Mapping

__all__ = ["InspectorConfig", "DEFAULT_CONFIG"]

_ENV_PREFIX = "PDFINSPECTX_"
_TRUTHY = {"1", "true", "yes", "on"}


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    value = environ.get(_ENV_PREFIX + name)
    if value is None or not value.strip():
        return default
    try:
        return int(value.strip())
    except ValueError as exc:
        raise ValueError(f"{_ENV_PREFIX}{name} must be an integer, got {value!r}") from exc


def _env_flag(environ: Mapping[str, str], name: str, default: bool) -> bool:
    value = environ.get(_ENV_PREFIX + name)
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


@dataclass(slots=True, frozen=True)
class InspectorConfig:
    """Tunable limits and switches for a single inspection run.

    Attributes:
        window_step: Bytes added to the search window on every grow step.
        header_probe: Leading bytes decoded when looking for ``%PDF-x.y``.
        offset_tolerance: Allowed drift between an xref offset and the
            offset at which the object was actually found.
        max_bytes: Upper bound on input size, ``0`` disables the check.
        max_objects: Upper bound on scanned objects, ``0`` disables it.
        max_depth: Upper bound on DFS depth during graph walks.
        hex_startxref: Accept a hexadecimal ``startxref`` when the decimal
            reading points past the end of the file.
        check_stream_length: Compare ``/Length`` with the captured payload.
    """

    window_step: int = 1000
    header_probe: int = 1024
    offset_tolerance: int = 1000
    max_bytes: int = 0
    max_objects: int = 0
    max_depth: int = 10_000
    hex_startxref: bool = True
    check_stream_length: bool = True

    def __post_init__(self) -> None:
        if self.window_step <= 0:
            raise ValueError("window_step must be positive")
        if self.header_probe <= 0:
            raise ValueError("header_probe must be positive")
        if self.max_depth <= 0:
            raise ValueError("max_depth must be positive")
        if self.max_bytes < 0 or self.max_objects < 0 or self.offset_tolerance < 0:
            raise ValueError("limits must not be negative")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "InspectorConfig":
        env = os.environ if environ is None else environ
        base = cls()
        return cls(
            window_step=_env_int(env, "WINDOW_STEP", base.window_step),
            header_probe=_env_int(env, "HEADER_PROBE", base.header_probe),
            offset_tolerance=_env_int(env, "OFFSET_TOLERANCE", base.offset_tolerance),
            max_bytes=_env_int(env, "MAX_BYTES", base.max_bytes),
            max_objects=_env_int(env, "MAX_OBJECTS", base.max_objects),
            max_depth=_env_int(env, "MAX_DEPTH", base.max_depth),
            hex_startxref=_env_flag(env, "HEX_STARTXREF", base.hex_startxref),
            check_stream_length=_env_flag(env, "CHECK_STREAM_LENGTH", base.check_stream_length),
        )

    def with_overrides(self, **overrides: Any) -> "InspectorConfig":
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


DEFAULT_CONFIG = InspectorConfig()
