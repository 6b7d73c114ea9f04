"""
Helpers for building CloudFormation requests from configuration.
"""

import functools
import json
import re
from typing import Any, Callable, Dict, List, Optional, Union

from .constants import TAG_STACK_BASE_NAME, TAG_STACK_NAME, TAG_VERSION

_INVALID_STACK_NAME_CHARS = re.compile(r"[^\-a-zA-Z0-9]")
_TEMPLATE_URL = re.compile(r"^https?://.+")


def determine_stack_name(config: Dict[str, Any]) -> str:
    """Obtain the stack name from configuration.

    Update and preview configurations name the stack explicitly. Deploy
    configurations build it from the base name and deploy id, with invalid
    characters replaced by dashes.
    """
    if config.get("stack_name"):
        return str(config["stack_name"])

    stack_name = f"{config.get('base_name', '')}-{config.get('deploy_id', '')}"
    return _INVALID_STACK_NAME_CHARS.sub("-", stack_name)


def base_name_matches_stack_name(base_name: str, stack_name: str) -> bool:
    """Does the base name match the base name portion of this stack name?"""
    return stack_name.startswith(base_name + "-")


def get_parameters(config: Dict[str, Any]) -> List[Dict[str, str]]:
    """Get parameter definitions in the form the CloudFormation API expects."""
    return [
        {"ParameterKey": key, "ParameterValue": value}
        for key, value in (config.get("parameters") or {}).items()
    ]


def get_tags(config: Dict[str, Any]) -> List[Dict[str, str]]:
    """Get tag definitions, user tags first, then the managed tags."""
    tags = [
        {"Key": key, "Value": value}
        for key, value in (config.get("tags") or {}).items()
    ]

    tags.append({"Key": TAG_STACK_NAME, "Value": determine_stack_name(config)})

    if config.get("base_name"):
        tags.append({"Key": TAG_STACK_BASE_NAME, "Value": config["base_name"]})

    if config.get("version"):
        tags.append({"Key": TAG_VERSION, "Value": config["version"]})

    return tags


def add_template_property_to_parameters(
    params: Dict[str, Any], template: Union[str, Dict[str, Any]]
) -> Dict[str, Any]:
    """Add TemplateURL or TemplateBody to request parameters.

    Args:
        params: Request parameters, modified in place
        template: A template document, template text, or an http(s) URL

    Returns:
        The same parameters dict
    """
    if isinstance(template, str):
        if _TEMPLATE_URL.match(template):
            params["TemplateURL"] = template
        else:
            params["TemplateBody"] = template
    else:
        params["TemplateBody"] = json.dumps(template)
    return params


def once(fn: Callable[..., Any]) -> Callable[..., Optional[Any]]:
    """Wrap a callable so that only the first invocation reaches it."""
    fired = False
    result = None

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Optional[Any]:
        nonlocal fired, result
        if fired:
            return result
        fired = True
        result = fn(*args, **kwargs)
        return result

    return wrapper
