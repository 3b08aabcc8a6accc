# Schema module - JSON-Schema subset validation
# No free-form model output drives execution without passing through here

from .validator import (
    ValidationResult, SchemaViolation, validate, check_schema,
    schema_problems, json_type_name, freeze, thaw,
    SUPPORTED_KEYWORDS, SUPPORTED_TYPES,
)
from .output_schemas import build_schema_catalogue, create_default_schemas

__all__ = [
    "ValidationResult",
    "SchemaViolation",
    "validate",
    "check_schema",
    "schema_problems",
    "json_type_name",
    "freeze",
    "thaw",
    "SUPPORTED_KEYWORDS",
    "SUPPORTED_TYPES",
    "build_schema_catalogue",
    "create_default_schemas",
]
