"""Rescaling of node distributions into scores."""

from __future__ import annotations

import math

from ..attribution.connections import NodeDistribution
from ..core.address import NodeAddress
from ..errors import ConfigurationError, NormalizationError

NodeScore = dict[NodeAddress, float]


def score_by_constant_total(
    pi: NodeDistribution,
    total_score: float,
    prefix: NodeAddress = NodeAddress.empty,
) -> NodeScore:
    """Scale ``pi`` so nodes matching ``prefix`` sum to ``total_score``.

    Every node is scored; the prefix only selects the normalization
    denominator.
    """
    if not math.isfinite(total_score) or total_score <= 0:
        raise ConfigurationError(f"total_score must be positive, got {total_score}")

    mass = sum(p for node, p in pi.items() if node.has_prefix(prefix))
    if mass == 0:
        raise NormalizationError(
            f"Cannot normalize: nodes matching prefix {str(prefix)!r} carry no mass"
        )

    factor = total_score / mass
    return {node: p * factor for node, p in pi.items()}


def score_by_maximum_probability(pi: NodeDistribution, max_score: float) -> NodeScore:
    """Scale ``pi`` so the highest-scoring node receives ``max_score``."""
    if not math.isfinite(max_score) or max_score <= 0:
        raise ConfigurationError(f"max_score must be positive, got {max_score}")

    max_probability = max(pi.values(), default=0.0)
    if max_probability == 0:
        raise NormalizationError("Cannot normalize: maximum probability is zero")

    factor = max_score / max_probability
    return {node: p * factor for node, p in pi.items()}
