"""
Exceptions raised by molsolvent.
"""
from typing import Optional


class MolsolventError(Exception):
    """Base class for every error raised by the package."""


class FrameParseError(MolsolventError, ValueError):
    """
    A trajectory frame could not be parsed.

    The reader attaches the absolute index of the offending frame once it is
    known, so the message always reads ``frame <k>: <reason>``.
    """

    def __init__(self, message: str, frame: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.frame = frame

    def __str__(self) -> str:
        if self.frame is None:
            return self.message
        return f"frame {self.frame}: {self.message}"


class TrajectoryEOFError(FrameParseError):
    """The stream ended in the middle of a frame."""


class ConfigurationError(MolsolventError, ValueError):
    """Invalid or inconsistent calculation parameters."""
