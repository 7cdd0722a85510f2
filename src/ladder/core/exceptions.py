"""Exceptions raised by the rating and bracket engines."""

from __future__ import annotations


class LadderError(Exception):
    """Base exception for all ladder errors."""


class InvalidInputError(LadderError, ValueError):
    """Raised when input is rejected at the boundary, before any mutation."""


class TournamentNotCompleteError(InvalidInputError):
    """Raised when a final ranking is requested before the terminal match."""


class BracketStateError(LadderError, RuntimeError):
    """Raised when propagation would overwrite an already-filled slot.

    The advancement pass stops at the first violation; ``match_id`` names the
    match whose outcome could not be placed.
    """

    def __init__(self, message: str, match_id: str | None = None) -> None:
        super().__init__(message)
        self.match_id = match_id
