"""
Configuration defaults and loading for stack operations.

Each workflow takes a plain dict configuration. Defaults are filled into a
copy before validation, so the caller's dict is never modified.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .constants import CAPABILITIES, DEFAULT_REGION, ON_DEPLOY_FAILURE, PRIOR_INSTANCE


def _no_op(*args: Any, **kwargs: Any) -> None:
    pass


def _shared_defaults() -> Dict[str, Any]:
    return {
        "capabilities": list(CAPABILITIES.values()),
        "tags": {},
        "parameters": {},
        "progress_check_interval_in_seconds": 10,
    }


def _fill(config: Dict[str, Any], defaults: Dict[str, Any]) -> Dict[str, Any]:
    filled = dict(config)
    for key, value in defaults.items():
        if filled.get(key) is None:
            filled[key] = value
    return filled


def fill_deploy_config_defaults(config: Dict[str, Any]) -> Dict[str, Any]:
    """Fill out a deploy configuration with default values."""
    defaults = _shared_defaults()
    defaults.update(
        {
            "create_stack_timeout_in_minutes": 10,
            "on_event_fn": _no_op,
            "post_creation_fn": _no_op,
            "prior_instance": PRIOR_INSTANCE["DELETE"],
            "on_deploy_failure": ON_DEPLOY_FAILURE["DELETE"],
        }
    )
    return _fill(config, defaults)


def fill_update_config_defaults(config: Dict[str, Any]) -> Dict[str, Any]:
    """Fill out an update configuration with default values."""
    defaults = _shared_defaults()
    defaults["on_event_fn"] = _no_op
    return _fill(config, defaults)


def fill_preview_update_config_defaults(config: Dict[str, Any]) -> Dict[str, Any]:
    """Fill out a preview update configuration with default values."""
    defaults = _shared_defaults()
    defaults["delete_change_set"] = True
    return _fill(config, defaults)


def load_config_file(path: Union[str, Path]) -> Dict[str, Any]:
    """Load a YAML or JSON configuration file."""
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(
            f"Configuration file must contain a mapping: {config_path}"
        )
    return data


@dataclass
class ClientOptions:
    """Options for the boto3 session and CloudFormation client."""

    region_name: Optional[str] = None
    profile_name: Optional[str] = None
    client_kwargs: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ClientOptions":
        """Create options from a config's client_options value."""
        data = dict(data or {})
        region = (
            data.pop("region_name", None)
            or os.environ.get("AWS_REGION")
            or os.environ.get("AWS_DEFAULT_REGION")
            or DEFAULT_REGION
        )
        profile = data.pop("profile_name", None)
        return cls(region_name=region, profile_name=profile, client_kwargs=data)

    def session_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for boto3.Session."""
        session_args: Dict[str, Any] = {"region_name": self.region_name}
        if self.profile_name:
            session_args["profile_name"] = self.profile_name
        return session_args


def get_client_options(config: Dict[str, Any]) -> ClientOptions:
    """Resolve client options for a workflow configuration."""
    return ClientOptions.from_dict(config.get("client_options"))
