"""Exception taxonomy shared by services and routes.

Every subclass carries the HTTP status it maps to; ``main.py`` renders them
into the ``{"error": ..., "success": false}`` envelope.
"""


class NotificationError(Exception):
    """Base exception for the notification service."""

    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class AuthenticationError(NotificationError):
    """No resolvable caller identity where one is required."""

    status_code = 401


class ValidationError(NotificationError):
    """Malformed or missing input."""

    status_code = 400


class PersistenceError(NotificationError):
    """The durable store rejected a read or write."""

    status_code = 503


class DeliveryError(NotificationError):
    """A single endpoint delivery failed.

    Only raised inside the adapter layer; the dispatcher turns it into a
    counted failure.
    """

    status_code = 502

    def __init__(self, message: str, expired: bool = False, status: int | None = None):
        super().__init__(message, {"expired": expired, "status": status})
        self.expired = expired
        self.status = status
