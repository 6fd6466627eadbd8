"""
Base models for all Pydantic models in the client.
"""
from decimal import Decimal
from typing import Annotated, Any, Dict

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel


# Amounts are Decimal in memory and plain JSON numbers on the wire
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class ApiModel(BaseModel):
    """Base model speaking the backend's camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
        extra="ignore"
    )

    def to_payload(self) -> Dict[str, Any]:
        """Serialize to a JSON-ready body without empty optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class RequestModel(ApiModel):
    """Base model for request bodies; unknown fields are a programming error."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid"
    )


class PartialUpdateModel(RequestModel):
    """Base model for PUT bodies; only fields the caller set are sent."""

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True, mode="json")
