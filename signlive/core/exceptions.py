"""
Error types raised by the detection pipeline.
"""


class SignLiveError(Exception):
    """Base class for all pipeline errors."""


class InitializationError(SignLiveError):
    """The landmark detector could not be constructed."""
