"""
Discovery of prior instances of a deployed stack.
"""

import logging
from typing import Any, Dict, List

from ..constants import PRIOR_STACK_STATUS_FILTER, TAG_STACK_BASE_NAME
from ..utilities import base_name_matches_stack_name
from .client import CloudFormationClient

logger = logging.getLogger(__name__)


def has_base_name_tag(stack_description: Dict[str, Any], base_name: str) -> bool:
    """Does the stack carry the exact base name tag?"""
    return any(
        tag.get("Key") == TAG_STACK_BASE_NAME and tag.get("Value") == base_name
        for tag in stack_description.get("Tags", [])
    )


def describe_prior_stacks(
    client: CloudFormationClient, base_name: str, created_stack_id: str
) -> List[Dict[str, Any]]:
    """Describe every other live stack deployed under the same base name.

    Listing every stack in the account is unavoidable. The name prefix
    narrows the candidates; the base name tag confirms each one, since an
    unrelated base name such as "foo-bar" also matches the prefix "foo-".

    Args:
        client: CloudFormation client
        base_name: Base name of the newly deployed stack
        created_stack_id: ID of the newly created stack, always excluded

    Returns:
        Stack descriptions of the prior instances
    """
    summaries = [
        summary
        for summary in client.list_stacks(PRIOR_STACK_STATUS_FILTER)
        if base_name_matches_stack_name(base_name, summary["StackName"])
        and summary["StackId"] != created_stack_id
    ]

    logger.debug(
        f"Found {len(summaries)} candidate prior stacks for base name {base_name}"
    )

    # Described one at a time. There is normally one prior stack, or a few
    # after failed deployments.
    descriptions = []
    for summary in summaries:
        description = client.describe_stack(summary["StackId"])
        if has_base_name_tag(description, base_name):
            descriptions.append(description)

    return descriptions
