"""Error taxonomy shared by the API blueprints.

Every error carries an HTTP status and a short reason string; ``create_app``
registers a single handler that renders them as ``{"error": reason}``.
"""


class PortfolioError(Exception):
    status_code = 500
    default_reason = "Something went wrong"

    def __init__(self, reason: str | None = None):
        self.reason = reason or self.default_reason
        super().__init__(self.reason)

    def to_dict(self) -> dict:
        return {"error": self.reason}


class ValidationError(PortfolioError):
    """Bad input shape, length or type."""

    status_code = 400
    default_reason = "Invalid input"

    def __init__(self, field: str | None = None, reason: str | None = None):
        self.field = field
        super().__init__(reason)

    def to_dict(self) -> dict:
        payload = super().to_dict()
        if self.field:
            payload["field"] = self.field
        return payload


class AuthError(PortfolioError):
    status_code = 401
    default_reason = "Unauthorized"


class Forbidden(PortfolioError):
    status_code = 403
    default_reason = "Forbidden"


class NotFound(PortfolioError):
    status_code = 404
    default_reason = "Not found"


class StorageError(PortfolioError):
    """Row-store failure. The reason shown to callers never includes driver detail."""

    status_code = 500
    default_reason = "Database error"


class ConfigurationError(PortfolioError):
    status_code = 500
    default_reason = "Server is not configured for this action"


class MailDeliveryError(PortfolioError):
    """An admin-initiated email could not be sent."""

    status_code = 500
    default_reason = "Failed to send email"
