"""
Runtime defaults for CLI/scene-assembly processing.

Values can be overridden via environment variables to avoid hardcoded tuning
in multiple entrypoints. The segmentation core never reads these; callers pass
their thresholds explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass
import os


ENV_MIN_VERTICES = "MESHPARTSPLIT_MIN_VERTICES"
ENV_EMPTY_COMPONENT_POLICY = "MESHPARTSPLIT_EMPTY_COMPONENT_POLICY"
ENV_EXPORT_FORMAT = "MESHPARTSPLIT_EXPORT_FORMAT"

EMPTY_COMPONENT_POLICIES = ("keep_original", "raise")
EXPORT_FORMATS = ("ply", "obj", "stl", "glb")


@dataclass(frozen=True)
class RuntimeDefaults:
    min_vertices: int
    empty_component_policy: str
    export_format: str


def _read_int_env(
    env_name: str,
    default: int,
    *,
    min_value: int | None = None,
    max_value: int | None = None,
) -> int:
    raw = os.environ.get(env_name)
    if raw is None:
        return default
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return default

    if min_value is not None and value < min_value:
        return default
    if max_value is not None and value > max_value:
        return default
    return value


def _read_choice_env(env_name: str, default: str, choices: tuple[str, ...]) -> str:
    raw = os.environ.get(env_name)
    if raw is None:
        return default
    value = str(raw).strip().lower()
    if value not in choices:
        return default
    return value


def load_runtime_defaults() -> RuntimeDefaults:
    return RuntimeDefaults(
        min_vertices=_read_int_env(ENV_MIN_VERTICES, 10, min_value=1, max_value=1_000_000),
        empty_component_policy=_read_choice_env(
            ENV_EMPTY_COMPONENT_POLICY, "keep_original", EMPTY_COMPONENT_POLICIES
        ),
        export_format=_read_choice_env(ENV_EXPORT_FORMAT, "ply", EXPORT_FORMATS),
    )


DEFAULTS = load_runtime_defaults()
