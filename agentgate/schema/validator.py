"""
Schema Validator
----------------
Recursive structural checker for a finite JSON-Schema subset.

Ensures no free-form model output drives execution. The validator is
non-fail-fast: one pass collects every violation so callers can report
all problems at once.

Supported keywords: type, properties, items, required, enum,
additionalProperties (plus the `description` annotation).
Supported types: object, array, string, number, boolean.

Anything else is reported as an error at the offending node; an
unsupported keyword never passes silently.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, List, Mapping, Sequence, Tuple

from agentgate.core.errors import SchemaDefinitionError

ROOT_PATH = "$"

SUPPORTED_TYPES = frozenset({"object", "array", "string", "number", "boolean"})

SUPPORTED_KEYWORDS = frozenset({
    "type", "properties", "items", "required", "enum",
    "additionalProperties", "description",
})


@dataclass(frozen=True)
class SchemaViolation:
    """A single validation error located by its path."""
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of one validator invocation. Never mutated."""
    valid: bool
    errors: Tuple[SchemaViolation, ...] = ()

    @property
    def messages(self) -> List[str]:
        return [str(e) for e in self.errors]

    def to_dict(self) -> dict:
        return {"valid": self.valid, "errors": self.messages}


def json_type_name(value: Any) -> str:
    """Name a Python value by its JSON type."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, (list, tuple)):
        return "array"
    return type(value).__name__


def _is_array(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class _Walker:
    """Accumulates violations over one recursive descent."""

    def __init__(self) -> None:
        self.errors: List[SchemaViolation] = []

    def error(self, path: str, message: str) -> None:
        self.errors.append(SchemaViolation(path, message))

    def visit(self, value: Any, schema: Mapping[str, Any], path: str) -> None:
        if not isinstance(schema, Mapping):
            self.error(path, f"invalid schema node: expected object, got {json_type_name(schema)}")
            return

        unknown = sorted(k for k in schema if k not in SUPPORTED_KEYWORDS)
        for keyword in unknown:
            self.error(path, f"unsupported schema keyword '{keyword}'")

        schema_type = schema.get("type")
        if schema_type == "object":
            self._visit_object(value, schema, path)
        elif schema_type == "array":
            self._visit_array(value, schema, path)
        elif schema_type == "string":
            if not isinstance(value, str):
                self.error(path, f"expected string, got {json_type_name(value)}")
            elif "enum" in schema and value not in schema["enum"]:
                self.error(path, f"must be one of [{', '.join(str(v) for v in schema['enum'])}]")
        elif schema_type == "number":
            if not _is_number(value):
                self.error(path, f"expected number, got {json_type_name(value)}")
        elif schema_type == "boolean":
            if not isinstance(value, bool):
                self.error(path, f"expected boolean, got {json_type_name(value)}")
        else:
            self.error(path, f"unsupported schema type '{schema_type}'")

    def _visit_object(self, value: Any, schema: Mapping[str, Any], path: str) -> None:
        if not isinstance(value, Mapping):
            self.error(path, f"expected object, got {json_type_name(value)}")
            return

        properties = schema.get("properties") or {}

        for key in schema.get("required") or ():
            if key not in value:
                self.error(f"{path}.{key}", "required field missing")

        for key, prop_schema in properties.items():
            if key in value:
                self.visit(value[key], prop_schema, f"{path}.{key}")

        if schema.get("additionalProperties") is False:
            for key in value:
                if key not in properties:
                    self.error(f"{path}.{key}", "unexpected property")

    def _visit_array(self, value: Any, schema: Mapping[str, Any], path: str) -> None:
        if not _is_array(value):
            self.error(path, f"expected array, got {json_type_name(value)}")
            return

        items = schema.get("items")
        if items is not None:
            for i, item in enumerate(value):
                self.visit(item, items, f"{path}[{i}]")


def validate(value: Any, schema: Mapping[str, Any], path: str = ROOT_PATH) -> ValidationResult:
    """
    Validate a value against a schema.

    Args:
        value: Structured data (typically a model's proposed output)
        schema: Schema tree from static configuration
        path: Root path used in error locations

    Returns:
        ValidationResult with every violation found, in discovery order
    """
    walker = _Walker()
    walker.visit(value, schema, path)
    return ValidationResult(valid=not walker.errors, errors=tuple(walker.errors))


def schema_problems(schema: Any, path: str = ROOT_PATH) -> List[str]:
    """List every structural problem in a schema tree itself."""
    problems: List[str] = []

    if not isinstance(schema, Mapping):
        return [f"{path}: schema node must be an object, got {json_type_name(schema)}"]

    for keyword in sorted(k for k in schema if k not in SUPPORTED_KEYWORDS):
        problems.append(f"{path}: unsupported schema keyword '{keyword}'")

    schema_type = schema.get("type")
    if schema_type not in SUPPORTED_TYPES:
        problems.append(f"{path}: unsupported schema type '{schema_type}'")

    properties = schema.get("properties")
    if properties is not None:
        if not isinstance(properties, Mapping):
            problems.append(f"{path}: 'properties' must be an object")
        else:
            for key, sub in properties.items():
                problems.extend(schema_problems(sub, f"{path}.{key}"))

    items = schema.get("items")
    if items is not None:
        problems.extend(schema_problems(items, f"{path}[]"))

    required = schema.get("required")
    if required is not None and not (
        _is_array(required) and all(isinstance(r, str) for r in required)
    ):
        problems.append(f"{path}: 'required' must be a list of strings")

    enum = schema.get("enum")
    if enum is not None and not _is_array(enum):
        problems.append(f"{path}: 'enum' must be a list")

    additional = schema.get("additionalProperties")
    if additional is not None and not isinstance(additional, bool):
        problems.append(f"{path}: 'additionalProperties' must be a boolean")

    return problems


def check_schema(schema: Any, name: str = "schema") -> None:
    """
    Reject a schema tree outside the supported subset.

    Raises:
        SchemaDefinitionError: listing every problem found
    """
    problems = schema_problems(schema)
    if problems:
        raise SchemaDefinitionError(
            f"Invalid {name}: {'; '.join(problems)}",
            details={"schema": name, "problems": problems},
        )


def freeze(node: Any) -> Any:
    """Deep-copy a JSON-like tree into read-only mappings and tuples."""
    if isinstance(node, Mapping):
        return MappingProxyType({k: freeze(v) for k, v in node.items()})
    if isinstance(node, (list, tuple)):
        return tuple(freeze(v) for v in node)
    return node


def thaw(node: Any) -> Any:
    """Inverse of freeze: plain dicts and lists, safe to hand out."""
    if isinstance(node, Mapping):
        return {k: thaw(v) for k, v in node.items()}
    if isinstance(node, (list, tuple)):
        return [thaw(v) for v in node]
    return node
