"""Shared pydantic base classes for the camelCase JSON surface."""

from typing import ClassVar

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python, ORM-readable."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PatchModel(ApiModel):
    """Partial update payload enumerating exactly the mutable fields.

    Unknown fields are rejected, and only fields listed in ``nullable_fields``
    may be explicitly cleared with ``null``.
    """

    model_config = ConfigDict(extra="forbid")

    nullable_fields: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def _reject_null_for_required(self) -> "PatchModel":
        for field in self.model_fields_set:
            if getattr(self, field) is None and field not in self.nullable_fields:
                raise ValueError(f"{to_camel(field)} cannot be null")
        return self

    def changes(self) -> dict:
        """Fields the client actually sent, keyed by attribute name."""
        return self.model_dump(exclude_unset=True)


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str
