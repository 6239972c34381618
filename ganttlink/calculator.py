"""Dependency-type bound formulas in pixel space.

Each type relates one edge of the predecessor to one edge of the successor:

    FS: succ.start >= pred.end   + lag
    SS: succ.start >= pred.start + lag
    FF: succ.end   >= pred.end   + lag
    SF: succ.end   >= pred.start + lag

Unknown types behave as FS.
"""

from __future__ import annotations

from .schema import DEFAULT_DEPENDENCY_TYPE, DEPENDENCY_TYPES, Bar


def normalize_dependency_type(dependency_type: str | None) -> str:
    if dependency_type in DEPENDENCY_TYPES:
        return dependency_type
    return DEFAULT_DEPENDENCY_TYPE


def constrains_successor_end(dependency_type: str | None) -> bool:
    return normalize_dependency_type(dependency_type) in ("FF", "SF")


def min_successor_x(
    dependency_type: str | None,
    pred: Bar,
    succ: Bar,
    lag_px: float,
    pred_new_x: float | None = None,
) -> float:
    """Smallest legal successor ``x``; ``pred_new_x`` overrides the predecessor's current ``x``."""
    pred_x = pred.x if pred_new_x is None else pred_new_x
    kind = normalize_dependency_type(dependency_type)
    if kind == "SS":
        return pred_x + lag_px
    if kind == "FF":
        return pred_x + pred.width - succ.width + lag_px
    if kind == "SF":
        return pred_x - succ.width + lag_px
    return pred_x + pred.width + lag_px


def fixed_successor_x(
    dependency_type: str | None,
    pred: Bar,
    succ: Bar,
    lag_px: float,
    pred_new_x: float | None = None,
) -> float:
    # A fixed link holds the successor exactly on its minimum bound.
    return min_successor_x(dependency_type, pred, succ, lag_px, pred_new_x)


def max_predecessor_x(
    dependency_type: str | None,
    pred: Bar,
    succ: Bar,
    lag_px: float,
    succ_x: float,
) -> float:
    """Largest predecessor ``x`` that keeps a successor sitting at ``succ_x`` compliant."""
    kind = normalize_dependency_type(dependency_type)
    if kind == "SS":
        return succ_x - lag_px
    if kind == "FF":
        return succ_x - pred.width + succ.width - lag_px
    if kind == "SF":
        return succ_x + succ.width - lag_px
    return succ_x - pred.width - lag_px


def push_amount(
    dependency_type: str | None,
    pred: Bar,
    succ: Bar,
    lag_px: float,
    pred_new_x: float,
) -> float:
    required = min_successor_x(dependency_type, pred, succ, lag_px, pred_new_x)
    if succ.x < required:
        return required - succ.x
    return 0.0
