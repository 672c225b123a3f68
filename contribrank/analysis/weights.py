"""Edge evaluators built from per-type weights."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any

import yaml

from ..attribution.connections import EdgeEvaluator, EdgeWeight
from ..core.address import EdgeAddress, parse_address
from ..core.graph import Edge
from ..errors import ConfigurationError

DEFAULT_EDGE_WEIGHT = EdgeWeight(to_weight=1.0, fro_weight=1.0)


def edge_evaluator_from_types(
    type_weights: dict[EdgeAddress, EdgeWeight],
    default: EdgeWeight = DEFAULT_EDGE_WEIGHT,
) -> EdgeEvaluator:
    """Weight each edge by the entry whose key is its longest address prefix.

    Edges matching no entry get ``default``.
    """
    # Most specific prefix first
    ordered = sorted(type_weights.items(), key=lambda kv: -len(kv[0].parts))

    def evaluate(edge: Edge) -> EdgeWeight:
        for prefix, weight in ordered:
            if edge.address.has_prefix(prefix):
                return weight
        return default

    return evaluate


def _weight_value(raw: Any, where: str) -> float:
    if isinstance(raw, str):
        try:
            raw = float(raw)
        except ValueError:
            raise ConfigurationError(f"{where} must be a number, got {raw!r}") from None
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ConfigurationError(f"{where} must be a number, got {raw!r}")
    if not math.isfinite(raw) or raw < 0:
        raise ConfigurationError(f"{where} must be finite and nonnegative, got {raw}")
    return float(raw)


def type_weights_from_dict(data: dict[str, Any]) -> dict[EdgeAddress, EdgeWeight]:
    """Parse ``{"github/AUTHORS": {"to_weight": 1, "fro_weight": 0.5}}``.

    A missing direction defaults to 1.0.
    """
    type_weights: dict[EdgeAddress, EdgeWeight] = {}
    for key, entry in data.items():
        if entry is None:
            entry = {}
        if not isinstance(entry, dict):
            raise ConfigurationError(f"Weight entry for {key!r} must be a mapping")
        unknown = sorted(set(entry) - {"to_weight", "fro_weight"})
        if unknown:
            raise ConfigurationError(
                f"Unknown field(s) for {key!r}: {', '.join(unknown)}"
            )
        type_weights[parse_address(EdgeAddress, str(key))] = EdgeWeight(
            to_weight=_weight_value(entry.get("to_weight", 1.0), f"{key}.to_weight"),
            fro_weight=_weight_value(
                entry.get("fro_weight", 1.0), f"{key}.fro_weight"
            ),
        )
    return type_weights


def load_type_weights(path: str | Path) -> dict[EdgeAddress, EdgeWeight]:
    """Load per-type edge weights from a YAML file."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Weights file {path} must contain a mapping")
    return type_weights_from_dict(data)
