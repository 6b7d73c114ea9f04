"""
CloudFormation client, progress tracking and prior instance discovery.
"""

from .client import CloudFormationClient
from .operation import CloudFormationOperation, StackData
from .prior_instances import describe_prior_stacks

__all__ = [
    "CloudFormationClient",
    "CloudFormationOperation",
    "StackData",
    "describe_prior_stacks",
]
