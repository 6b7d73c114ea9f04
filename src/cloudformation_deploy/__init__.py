"""
CloudFormation Deploy - supervised create, update and preview of CloudFormation stacks.

Each call builds its own workflow and CloudFormation client, so workflows
for different accounts or regions can run side by side in one event loop
using the *_async functions.
"""

__version__ = "1.0.0"

import asyncio
from typing import Any, Dict

from .constants import CAPABILITIES, ON_DEPLOY_FAILURE, PRIOR_INSTANCE
from .deployment import (
    Deploy,
    DeployResult,
    PreviewUpdate,
    PreviewUpdateResult,
    Update,
    UpdateResult,
)


async def deploy_async(config: Dict[str, Any], template: Any) -> DeployResult:
    """Deploy a template as a new stack and remove its prior instances."""
    return await Deploy(config, template).deploy()


async def update_async(config: Dict[str, Any], template: Any) -> UpdateResult:
    """Update an existing stack with a template."""
    return await Update(config, template).update()


async def preview_update_async(
    config: Dict[str, Any], template: Any
) -> PreviewUpdateResult:
    """Preview an update to an existing stack via a change set."""
    return await PreviewUpdate(config, template).preview_update()


def deploy(config: Dict[str, Any], template: Any) -> DeployResult:
    """Run deploy_async to completion."""
    return asyncio.run(deploy_async(config, template))


def update(config: Dict[str, Any], template: Any) -> UpdateResult:
    """Run update_async to completion."""
    return asyncio.run(update_async(config, template))


def preview_update(config: Dict[str, Any], template: Any) -> PreviewUpdateResult:
    """Run preview_update_async to completion."""
    return asyncio.run(preview_update_async(config, template))


__all__ = [
    "CAPABILITIES",
    "ON_DEPLOY_FAILURE",
    "PRIOR_INSTANCE",
    "Deploy",
    "DeployResult",
    "PreviewUpdate",
    "PreviewUpdateResult",
    "Update",
    "UpdateResult",
    "deploy",
    "deploy_async",
    "preview_update",
    "preview_update_async",
    "update",
    "update_async",
]
