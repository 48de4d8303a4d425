"""
Error taxonomy shared by every layer.

Each external call site maps collaborator failures into one of these kinds;
main.py turns them into HTTP responses.
"""
from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    PERSISTENCE = "persistence"
    AUTH_REQUIRED = "auth_required"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"


class TakeawayError(Exception):
    kind: ErrorKind = ErrorKind.PERSISTENCE

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TakeawayError):
    """Input rejected before any store call."""
    kind = ErrorKind.VALIDATION


class PersistenceError(TakeawayError):
    """The order store rejected a read or write. The message is shown as-is."""
    kind = ErrorKind.PERSISTENCE


class OrderNotFound(PersistenceError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, order_id: int):
        super().__init__(f"Commande {order_id} introuvable")
        self.order_id = order_id


class AuthRequired(TakeawayError):
    """No signed-in user; the client is sent to the auth page."""
    kind = ErrorKind.AUTH_REQUIRED

    def __init__(self, message: str = "Utilisateur non connecté", redirect: str = "/auth"):
        super().__init__(message)
        self.redirect = redirect


class SubmissionInProgress(TakeawayError):
    """A checkout for the same user is still outstanding."""
    kind = ErrorKind.CONFLICT

    def __init__(self):
        super().__init__("Une commande est déjà en cours d'envoi.")
