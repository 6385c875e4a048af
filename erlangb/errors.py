"""Exception hierarchy for the Erlang B solvers."""


class ErlangError(Exception):
    """Base class for every failure raised by the calculator."""


class InvalidArgumentError(ErlangError, ValueError):
    """Raised when an input lies outside the model's domain."""


class InvalidSelectionError(ErlangError, ValueError):
    """Raised when the number of known parameters is not exactly two."""


class SearchExhaustedError(ErlangError):
    """Inputs were well formed but no solution exists within the search limits."""


class NotFoundError(SearchExhaustedError):
    """A channel scan reached its upper bound without meeting the target."""


class UnsolvableError(SearchExhaustedError):
    """Bracket expansion could not enclose the root."""


class InconsistentResultError(ErlangError):
    """The derived occupancy is not strictly below the channel count."""
