"""Errors raised for invalid caller input.

Every failure in the scheduler is an input-validation concern, so the
whole hierarchy derives from ValueError.
"""


class InvalidArgumentError(ValueError):
    """Base class for rejected scheduler input."""


class InvalidQualityError(InvalidArgumentError):
    """A quality rating outside the 0-5 scale."""


class UnknownResponseLabelError(InvalidArgumentError):
    """A response label that is not one of the fixed study buttons."""


class InvalidTimestampError(InvalidArgumentError):
    """A missing or unparseable review timestamp."""


class ProgressFileError(InvalidArgumentError):
    """A progress document that cannot be decoded."""


class DeckFileError(InvalidArgumentError):
    """A deck file that cannot be read as a list of cards."""


class IntervalOverflowError(InvalidArgumentError):
    """A review interval too large to land on a representable date."""
