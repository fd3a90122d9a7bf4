"""Error taxonomy for the velocity analysis core."""

from __future__ import annotations


class PdvAnalysisError(Exception):
    """Base class for analysis errors."""


class InputShapeError(PdvAnalysisError, ValueError):
    """Signals/time axis are mismatched in length, too short, or not increasing."""


class MissingConstantError(PdvAnalysisError, KeyError):
    """A required physical constant is absent and no default may be applied."""


class InvalidParameterEdit(PdvAnalysisError, ValueError):
    """A parameter edit was rejected; the previous configuration is kept.

    Attributes
    ----------
    param:
        Name of the edited parameter.
    value:
        The rejected raw value.
    """

    def __init__(self, param: str, value: object, reason: str) -> None:
        super().__init__(f"Rejected edit {param}={value!r}: {reason}")
        self.param = param
        self.value = value
        self.reason = reason


class DegenerateTransform(PdvAnalysisError, ValueError):
    """The STFT window is longer than the available samples."""
