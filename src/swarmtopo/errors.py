"""
Error taxonomy for swarmtopo.

Worker implementations may raise anything; those errors are propagated
unchanged (with notes naming the worker and topology attached). The
classes below are the only errors that originate inside the package.
"""


class SwarmError(Exception):
    """Base class for errors raised by swarmtopo itself."""


class InvalidArgument(SwarmError, ValueError):
    """Raised before any worker is invoked when topology inputs are unusable."""


class WorkerFailure(SwarmError):
    """Raised when an adapted callable does not behave like a worker."""
