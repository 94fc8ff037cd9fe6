"""Namespace for pluggable inspection tools."""

from __future__ import annotations

from .common.pipeline import registry


def load_builtin_plugins() -> None:
    from . import inspector  # noqa: F401  # registers inspect, validate, export and crosscheck


__all__ = ["registry", "load_builtin_plugins"]
