"""
Booking service exceptions

Every error the API can return to a client derives from BookingError and
carries its HTTP status code and a human-readable message. main.py renders
them as the standard {success, message, errors?} envelope.
"""

from typing import Optional


class BookingError(Exception):
    """Base class for all domain errors"""

    status_code = 500
    default_message = "Erreur interne du serveur"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# ============================================================================
# CLIENT ERRORS (4xx)
# ============================================================================


class BookingValidationError(BookingError):
    """Request payload broke one or more field rules"""

    status_code = 400
    default_message = "Données invalides"

    def __init__(self, errors: list[str], message: Optional[str] = None):
        super().__init__(message)
        self.errors = errors


class BadRequestError(BookingError):
    status_code = 400
    default_message = "Requête invalide"


class PastDateError(BookingError):
    status_code = 400
    default_message = "La date et heure de réservation ne peuvent pas être dans le passé"


class InvalidStatusError(BookingError):
    status_code = 400
    default_message = "Statut invalide"


class NotFoundError(BookingError):
    status_code = 404
    default_message = "Réservation non trouvée"


class MissingCredentialError(BookingError):
    status_code = 401
    default_message = "Token d'accès requis"


class InvalidCredentialsError(BookingError):
    """Unknown username or wrong password at login"""

    status_code = 401
    default_message = "Identifiants incorrects"


class InvalidCredentialError(BookingError):
    """Bearer token with a bad signature, bad format or past its expiry"""

    status_code = 403
    default_message = "Token invalide"


class AdminExistsError(BookingError):
    status_code = 403
    default_message = "Un administrateur existe déjà"


# ============================================================================
# SERVER ERRORS (5xx)
# ============================================================================


class PersistenceError(BookingError):
    status_code = 500
    default_message = "Erreur lors de l'enregistrement de la réservation"


class NotificationError(BookingError):
    """Email dispatch failed. Logged only, never returned to the caller."""

    status_code = 500
    default_message = "Erreur lors de l'envoi de l'email"
