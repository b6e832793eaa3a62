"""
Domain errors raised by services and guards.

Each error carries the HTTP status it maps to; main.py installs a single
exception handler that turns any TourneyError into a JSON response.
"""


class TourneyError(Exception):
    """Base class for all domain errors"""

    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(TourneyError):
    """Malformed or missing input"""

    status_code = 422


class NotFoundError(TourneyError):
    status_code = 404


class AuthenticationError(TourneyError):
    """No verified principal attached to the request"""

    status_code = 401


class AuthorizationError(TourneyError):
    """Principal lacks organizer/admin rights for the resource"""

    status_code = 403


class ConflictError(TourneyError):
    status_code = 409


class InvalidStateTransition(TourneyError):
    """Match status change not permitted from its current status"""

    status_code = 409


class InvalidWinner(TourneyError):
    """Winner is not one of the match's two participants"""

    status_code = 422


class StructuralInconsistency(TourneyError):
    """
    Bracket snapshot does not match the slot being advanced.

    Fatal to the single operation. The detail is logged but never returned
    to the client.
    """

    status_code = 500
