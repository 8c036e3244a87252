"""Domain error taxonomy.

Services raise these; ``havenstay.main`` turns them into JSON responses of the
form ``{"error": code, "message": text}`` (plus ``fields`` for input errors).
"""

from pydantic import ValidationError


class DomainError(Exception):
    """Base class for errors that map onto a client-facing response."""

    status_code: int = 400
    code: str = "error"
    default_message: str = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


class Unauthorized(DomainError):
    status_code = 401
    code = "unauthorized"
    default_message = "Unauthorized"


class Forbidden(DomainError):
    status_code = 403
    code = "forbidden"
    default_message = "Forbidden"


class NotFound(DomainError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class InvalidInput(DomainError):
    """Schema or validation failure, carrying per-field detail."""

    code = "invalid_input"
    default_message = "Invalid input"

    def __init__(self, message: str | None = None, fields: list[dict[str, str]] | None = None) -> None:
        super().__init__(message)
        self.fields = fields or []

    @classmethod
    def for_field(cls, field: str, message: str) -> "InvalidInput":
        return cls(message, fields=[{"field": field, "message": message}])

    @classmethod
    def from_errors(cls, errors: list[dict]) -> "InvalidInput":
        """Build from pydantic/FastAPI error dicts (``loc``, ``msg``)."""
        fields = []
        for err in errors:
            # Drop the transport prefix ("body", "query", ...) from the location.
            loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
            fields.append({"field": ".".join(loc) or "__root__", "message": err.get("msg", "Invalid value")})
        return cls("Validation failed", fields=fields)

    @classmethod
    def from_validation_error(cls, exc: ValidationError) -> "InvalidInput":
        return cls.from_errors(exc.errors())

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["fields"] = self.fields
        return data


class DateConflict(DomainError):
    code = "date_conflict"
    default_message = "Property is not available for the selected dates"


class InvalidDateRange(DomainError):
    code = "invalid_date_range"
    default_message = "Check-out date must be after check-in date"


class InvalidTransition(DomainError):
    code = "invalid_transition"
    default_message = "Invalid booking status transition"


class InvalidState(DomainError):
    code = "invalid_state"
    default_message = "Operation not allowed in the current state"


class Conflict(DomainError):
    code = "conflict"
    default_message = "Resource already exists"
