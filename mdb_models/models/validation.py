"""
Document validation against a model's JSON Schema.
"""

from dataclasses import dataclass, field
from typing import Any

from jsonschema import Draft7Validator


@dataclass
class ValidationResult:
    """Outcome of validating one document; ``errors`` is empty when valid."""

    value: Any
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _error_message(error) -> str:
    path = ".".join(str(part) for part in error.absolute_path)
    return f"{path}: {error.message}" if path else error.message


def validate(document: Any, schema: dict[str, Any] | None) -> ValidationResult:
    """
    Validate a document against a JSON Schema.

    A missing schema accepts every document.

    Raises:
        jsonschema.SchemaError: If the schema itself is invalid
    """
    if not schema:
        return ValidationResult(value=document)

    Draft7Validator.check_schema(schema)
    validator = Draft7Validator(schema)
    errors = sorted(
        validator.iter_errors(document), key=lambda e: [str(p) for p in e.absolute_path]
    )
    return ValidationResult(value=document, errors=[_error_message(e) for e in errors])
