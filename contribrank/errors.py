"""Error taxonomy for ranking runs."""


class ContribRankError(Exception):
    """Base class for all ranking failures."""


class ConfigurationError(ContribRankError, ValueError):
    """Invalid options or edge weights, detected before any iteration."""


class NormalizationError(ContribRankError):
    """Scores cannot be normalized because the selected mass is zero."""


class StructuralInvariantViolation(ContribRankError, AssertionError):
    """An internally built structure is malformed.

    Raised for non-stochastic chain rows, index/length mismatches and edges
    whose endpoints are missing from the graph. Through ``pagerank`` this
    indicates a bug; callers driving the chain builders directly also get it
    for connections that leave a node with no outgoing weight.
    """


class RankingCancelled(ContribRankError):
    """The cancellation token was set while the solver was suspended."""


class ConvergenceWarning(RuntimeWarning):
    """The iteration cap was reached before the convergence threshold."""
