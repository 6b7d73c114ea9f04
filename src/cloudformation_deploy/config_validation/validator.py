"""Configuration validation for deploy, update and preview update."""

import copy
import logging
from typing import Any, Dict, List

import jsonschema
from jsonschema import Draft7Validator

from ..constants import CAPABILITIES, ON_DEPLOY_FAILURE, PRIOR_INSTANCE

logger = logging.getLogger(__name__)

_STRING_MAP = {
    "type": "object",
    "additionalProperties": {"type": "string"},
}

_INTERVAL = {"type": "number", "minimum": 1}

_NON_EMPTY_STRING = {"type": "string", "minLength": 1}

SHARED_CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "capabilities": {
            "type": "array",
            "items": {"enum": list(CAPABILITIES.values())},
        },
        "parameters": _STRING_MAP,
        "tags": _STRING_MAP,
        "client_options": {"type": "object"},
    },
    "required": ["capabilities", "parameters", "tags"],
}


def _extend(title: str, properties: Dict[str, Any], required: List[str]) -> Dict[str, Any]:
    schema = copy.deepcopy(SHARED_CONFIG_SCHEMA)
    schema["title"] = title
    schema["properties"].update(properties)
    schema["required"] = schema["required"] + required
    return schema


DEPLOY_CONFIG_SCHEMA = _extend(
    "DeployConfig",
    {
        "base_name": _NON_EMPTY_STRING,
        "version": _NON_EMPTY_STRING,
        "deploy_id": {
            "anyOf": [_NON_EMPTY_STRING, {"type": "number"}],
        },
        "on_deploy_failure": {"enum": list(ON_DEPLOY_FAILURE.values())},
        "on_event_fn": {"isFunction": True},
        "post_creation_fn": {"isFunction": True},
        "prior_instance": {"enum": list(PRIOR_INSTANCE.values())},
        "progress_check_interval_in_seconds": _INTERVAL,
        "create_stack_timeout_in_minutes": {"type": "number", "minimum": 0},
    },
    [
        "base_name",
        "version",
        "deploy_id",
        "on_deploy_failure",
        "on_event_fn",
        "post_creation_fn",
        "prior_instance",
        "progress_check_interval_in_seconds",
        "create_stack_timeout_in_minutes",
    ],
)

UPDATE_CONFIG_SCHEMA = _extend(
    "UpdateConfig",
    {
        "stack_name": _NON_EMPTY_STRING,
        "version": _NON_EMPTY_STRING,
        "on_event_fn": {"isFunction": True},
        "progress_check_interval_in_seconds": _INTERVAL,
    },
    ["stack_name", "on_event_fn", "progress_check_interval_in_seconds"],
)

PREVIEW_UPDATE_CONFIG_SCHEMA = _extend(
    "PreviewUpdateConfig",
    {
        "change_set_name": _NON_EMPTY_STRING,
        "stack_name": _NON_EMPTY_STRING,
        "version": _NON_EMPTY_STRING,
        "delete_change_set": {"type": "boolean"},
        "progress_check_interval_in_seconds": _INTERVAL,
    },
    [
        "change_set_name",
        "stack_name",
        "delete_change_set",
        "progress_check_interval_in_seconds",
    ],
)


def is_function(validator, value, instance, schema):
    """jsonschema keyword checking that an instance is (or is not) callable."""
    if not isinstance(value, bool):
        return
    if value and not callable(instance):
        yield jsonschema.ValidationError("Required to be a function.")
    elif not value and callable(instance):
        yield jsonschema.ValidationError("Required to not be a function.")


ConfigValidator = jsonschema.validators.extend(
    Draft7Validator, {"isFunction": is_function}
)


def _format_error(error: jsonschema.ValidationError) -> str:
    path = ".".join(str(part) for part in error.absolute_path)
    if path:
        return f"{path}: {error.message}"
    return error.message


def validate(config: Dict[str, Any], schema: Dict[str, Any]) -> List[str]:
    """Validate a configuration against a schema.

    Returns:
        Every violation found, empty if the configuration is valid
    """
    validator = ConfigValidator(schema)
    errors = sorted(
        validator.iter_errors(config), key=lambda e: [str(part) for part in e.absolute_path]
    )
    messages = [_format_error(error) for error in errors]
    if messages:
        logger.debug(f"Configuration failed {schema.get('title')}: {messages}")
    return messages


def validate_deploy_config(config: Dict[str, Any]) -> List[str]:
    return validate(config, DEPLOY_CONFIG_SCHEMA)


def validate_update_config(config: Dict[str, Any]) -> List[str]:
    return validate(config, UPDATE_CONFIG_SCHEMA)


def validate_preview_update_config(config: Dict[str, Any]) -> List[str]:
    return validate(config, PREVIEW_UPDATE_CONFIG_SCHEMA)
