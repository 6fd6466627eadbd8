"""
Helpers that turn pydantic validation failures into client exceptions.
"""

from typing import Any, List, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .exceptions import InvalidInputError, ResponseFormatError

ModelT = TypeVar("ModelT", bound=BaseModel)


def error_messages(error: PydanticValidationError) -> List[str]:
    """Flatten pydantic errors into "field: message" strings."""
    messages = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        messages.append(f"{location}: {item['msg']}" if location else item["msg"])
    return messages


def build_request(model: Type[ModelT], **fields: Any) -> ModelT:
    """Build a request model from caller input."""
    try:
        return model(**fields)
    except PydanticValidationError as e:
        raise InvalidInputError(
            message=f"Invalid {model.__name__}",
            details=error_messages(e)
        ) from e


def parse_response(model: Type[ModelT], data: Any, path: str) -> ModelT:
    """Validate a response body against the expected model."""
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ResponseFormatError(
            message=f"Unexpected response from {path}",
            body=data,
            details=error_messages(e)
        ) from e


def parse_response_list(model: Type[ModelT], data: Any, path: str) -> List[ModelT]:
    """Validate a list response; an empty body counts as an empty list."""
    if data is None:
        return []
    if not isinstance(data, list):
        raise ResponseFormatError(
            message=f"Unexpected response from {path}",
            body=data,
            details=["Expected a JSON array"]
        )
    return [parse_response(model, item, path) for item in data]
