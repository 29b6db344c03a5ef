"""Shared pydantic plumbing for request payloads.

Payloads arrive as plain mappings and are parsed inside the services, so
malformed input always surfaces as ``ValidationFailedError``.
"""

from collections.abc import Mapping
from typing import Any, ClassVar, Self, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from taskhive.core.exceptions import ValidationFailedError

P = TypeVar("P", bound=BaseModel)


class PayloadModel(BaseModel):
    """Base for request payloads. Accepts snake_case and camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
    )


class UpdatePayload(PayloadModel):
    """Base for partial updates.

    Only fields present in the payload are applied. An explicit ``null`` is
    accepted only for fields listed in ``nullable_fields``.
    """

    nullable_fields: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def reject_null_for_required_columns(self) -> Self:
        for name in self.model_fields_set:
            if getattr(self, name) is None and name not in self.nullable_fields:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        """Fields present in the payload, keyed by attribute name."""
        return self.model_dump(exclude_unset=True, mode="python")


class DeleteResult(BaseModel):
    """Acknowledgement of a deleted entity."""

    id: UUID
    deleted: bool = True


def parse_payload(model: type[P], payload: Mapping[str, Any] | None) -> P:
    """Validate a raw payload against a schema.

    Raises:
        ValidationFailedError: If the payload does not satisfy the schema
    """
    try:
        return model.model_validate(dict(payload or {}))
    except ValidationError as e:
        errors = [
            {
                "field": ".".join(str(part) for part in err["loc"]),
                "message": err["msg"],
            }
            for err in e.errors()
        ]
        raise ValidationFailedError(_summarize(e), errors=errors) from e


def _summarize(exc: ValidationError) -> str:
    details = exc.errors()
    missing = [".".join(str(p) for p in err["loc"]) for err in details if err["type"] == "missing"]
    if missing and len(missing) == len(details):
        return f"Missing required fields: {', '.join(missing)}"

    first = details[0]
    field = ".".join(str(p) for p in first["loc"])
    if not field:
        return first["msg"].removeprefix("Value error, ")
    return f"Invalid {field}"
