"""Options controlling a ranking run."""

from __future__ import annotations

import math
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

from .core.address import NodeAddress, parse_address
from .errors import ConfigurationError


@dataclass(frozen=True)
class PagerankOptions:
    """Tunable constants for ``pagerank``.

    The defaults have no derivation beyond working well on contribution
    graphs; none of them are load-bearing.
    """

    self_loop_weight: float = 1e-3
    convergence_threshold: float = 1e-7
    max_iterations: int = 255
    # Scores are normalized so nodes matching the prefix sum to total_score
    total_score: float = 1000.0
    total_score_node_prefix: NodeAddress = NodeAddress.empty
    verbose: bool = False
    yield_after_ms: float = 30.0

    def validate(self) -> "PagerankOptions":
        """Raise ConfigurationError for any out-of-range value."""
        _require_number(self.self_loop_weight, "self_loop_weight", minimum=0.0)
        _require_number(
            self.convergence_threshold, "convergence_threshold", minimum=0.0
        )
        _require_number(self.yield_after_ms, "yield_after_ms", minimum=0.0)
        _require_number(self.total_score, "total_score")
        if self.total_score <= 0:
            raise ConfigurationError(
                f"total_score must be positive, got {self.total_score}"
            )
        if isinstance(self.max_iterations, bool) or not isinstance(
            self.max_iterations, int
        ):
            raise ConfigurationError(
                f"max_iterations must be an integer, got {self.max_iterations!r}"
            )
        if self.max_iterations < 0:
            raise ConfigurationError(
                f"max_iterations must be nonnegative, got {self.max_iterations}"
            )
        if not isinstance(self.total_score_node_prefix, NodeAddress):
            raise ConfigurationError(
                "total_score_node_prefix must be a NodeAddress, "
                f"got {self.total_score_node_prefix!r}"
            )
        if not isinstance(self.verbose, bool):
            raise ConfigurationError(f"verbose must be a boolean, got {self.verbose!r}")
        return self

    def with_overrides(self, **changes: Any) -> "PagerankOptions":
        """Return a copy with ``changes`` applied; ``None`` values are ignored."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


DEFAULT_PAGERANK_OPTIONS = PagerankOptions()

_FLOAT_OPTIONS = (
    "self_loop_weight",
    "convergence_threshold",
    "total_score",
    "yield_after_ms",
)


def _require_number(value: Any, name: str, minimum: float | None = None) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ConfigurationError(f"{name} must be finite, got {value}")
    if minimum is not None and value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")


def options_from_dict(data: dict[str, Any]) -> PagerankOptions:
    """Build validated options from a plain mapping.

    ``total_score_node_prefix`` is given in its ``/``-joined readable form.
    """
    known = {f.name for f in fields(PagerankOptions)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigurationError(f"Unknown option(s): {', '.join(unknown)}")

    values = dict(data)
    # PyYAML reads exponent literals without a dot (1e-7) as strings
    for name in _FLOAT_OPTIONS:
        if isinstance(values.get(name), str):
            try:
                values[name] = float(values[name])
            except ValueError:
                raise ConfigurationError(
                    f"{name} must be a number, got {values[name]!r}"
                ) from None

    prefix = values.get("total_score_node_prefix")
    if prefix is not None:
        if not isinstance(prefix, str):
            raise ConfigurationError(
                f"total_score_node_prefix must be a string, got {prefix!r}"
            )
        values["total_score_node_prefix"] = parse_address(NodeAddress, prefix)

    return PagerankOptions(**values).validate()


def load_options(path: str | Path) -> PagerankOptions:
    """Load options from a YAML file."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Options file {path} must contain a mapping")
    return options_from_dict(data)
