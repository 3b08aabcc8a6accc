"""
Output Schemas
--------------
Named schemas that agents' structured output must satisfy.
"""

from types import MappingProxyType
from typing import Any, Mapping

from .validator import check_schema, freeze


def build_schema_catalogue(schemas: Mapping[str, Any]) -> Mapping[str, Mapping[str, Any]]:
    """Check and freeze a name -> schema table."""
    frozen = {}
    for name, schema in schemas.items():
        check_schema(schema, name=f"output schema {name}")
        frozen[name] = freeze(schema)
    return MappingProxyType(frozen)


def create_default_schemas() -> Mapping[str, Mapping[str, Any]]:
    """Built-in output schemas for the task and workflow agents."""
    return build_schema_catalogue({
        "WorkflowDefinition": {
            "type": "object",
            "properties": {
                "workflow": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string"},
                        "trigger": {"type": "string"},
                        "steps": {
                            "type": "array",
                            "items": {
                                "type": "object",
                                "properties": {
                                    "type": {"type": "string", "enum": ["update", "notify", "condition"]},
                                    "entity": {"type": "string"},
                                    "update": {"type": "object"},
                                },
                                "required": ["type"],
                            },
                        },
                    },
                    "required": ["name", "trigger", "steps"],
                },
            },
            "required": ["workflow"],
            "additionalProperties": False,
        },
        "TaskUpdate": {
            "type": "object",
            "properties": {
                "taskId": {"type": "string"},
                "updates": {
                    "type": "object",
                    "properties": {
                        "status": {"type": "string", "enum": ["open", "in-progress", "urgent", "done"]},
                        "priority": {"type": "string", "enum": ["low", "medium", "high", "critical"]},
                    },
                },
            },
            "required": ["taskId", "updates"],
            "additionalProperties": False,
        },
        "TaskList": {
            "type": "object",
            "properties": {
                "tasks": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "id": {"type": "string"},
                            "title": {"type": "string"},
                            "status": {"type": "string"},
                            "priority": {"type": "string"},
                        },
                        "required": ["id", "title", "status"],
                    },
                },
            },
            "required": ["tasks"],
            "additionalProperties": False,
        },
    })
