"""
Configuration validation utilities.
"""

from .validator import (
    validate,
    validate_deploy_config,
    validate_preview_update_config,
    validate_update_config,
)

__all__ = [
    "validate",
    "validate_deploy_config",
    "validate_preview_update_config",
    "validate_update_config",
]
