"""Errors raised for malformed scheduling input."""


class SchedulingError(ValueError):
    """Base class for input the engine refuses to score."""


class InvalidConstraint(SchedulingError):
    """A scheduling constraint or generator parameter is out of range."""


class InvalidInterval(SchedulingError):
    """A time interval does not satisfy start < end."""
