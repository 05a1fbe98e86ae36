class ProbabilityStrategyError(Exception):
    """Base class for failures raised by the probability prediction strategy."""


class PartialGroupError(ProbabilityStrategyError, ValueError):
    """Leaf count is not a multiple of the confidence-interval group size."""


class InsufficientGroupsError(ProbabilityStrategyError, ArithmeticError):
    """Every resampling group contains at least one empty leaf."""
