"""Model validation utilities."""

from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from file_manager.core.models.errors import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def sanitize_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, str]]:
    """Sanitize Pydantic validation errors for callers.

    Removes internal fields like:
    - url
    - ctx
    - input
    - internal exception details
    """
    sanitized: list[dict[str, str]] = []

    for err in errors:
        field = ".".join(str(x) for x in err.get("loc", [])) or "value"
        raw_msg = err.get("msg", "Invalid value")

        # Remove noisy prefixes
        msg = raw_msg.replace("Value error,", "").strip()

        msg_lower = msg.lower()
        if "field required" in msg_lower:
            msg = "This field is required"
        elif "valid integer" in msg_lower or "valid number" in msg_lower:
            msg = "Invalid value type"

        sanitized.append(
            {
                "field": field,
                "message": msg,
            }
        )

    return sanitized


def validate_model(model: type[ModelT], data: dict[str, Any]) -> ModelT:
    """Validate data against a Pydantic model.

    Args:
        model: Pydantic model class
        data: Input data to validate

    Returns:
        The validated model instance

    Raises:
        ValidationError: With sanitized field errors in ``details``
    """
    try:
        return model(**data)
    except PydanticValidationError as exc:
        raise ValidationError(
            message=f"Invalid {model.__name__} configuration",
            details={"errors": sanitize_validation_errors(exc.errors())},
        ) from exc
