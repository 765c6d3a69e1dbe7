"""Errors raised by the farm services."""


class FarmError(ValueError):
    """Base class for recoverable farm errors surfaced to the learner."""


class NoSeedsAvailable(FarmError):
    """No word is eligible for planting."""


class BatchDataUnavailable(FarmError):
    """None of a plot's word ids resolve to words in the current database."""


class NothingToReview(FarmError):
    """Every word on the plot is already answered perfectly."""


class PlotNotFound(FarmError):
    """The requested plot does not exist."""


class PlotAlreadyPlanted(FarmError):
    """Planting was requested on a plot that already holds a batch."""


class PlotNotPlanted(FarmError):
    """Review was requested on an empty plot."""


class SessionAlreadyOpen(FarmError):
    """A second assessment was started while one is still open."""


class NoActiveSession(FarmError):
    """A session operation was called with no open session."""


class InvalidSessionPhase(FarmError):
    """A session operation was called in the wrong phase."""


class FarmNotStarted(FarmError):
    """The farm was used before its word list and progress were loaded."""
