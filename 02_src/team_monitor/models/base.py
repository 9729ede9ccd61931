"""Base model for records decoded from on-disk camelCase JSON."""

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import RecordParseError

R = TypeVar("R", bound="RecordModel")


class RecordModel(BaseModel):
    """Record with camelCase aliases; unknown keys are kept and written back."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @classmethod
    def from_dict(cls: type[R], data: Any) -> R:
        """Validate decoded JSON, raising RecordParseError on bad content."""
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise RecordParseError(describe_validation_error(e)) from e

    def to_dict(self) -> dict[str, Any]:
        """Wire form: camelCase keys, unset optional fields left out."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def describe_validation_error(error: ValidationError) -> str:
    """First validation problem as ``location: message``."""
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    return f"{location}: {first['msg']}" if location else first["msg"]
