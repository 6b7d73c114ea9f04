"""
Constants shared by the stack operations.
"""

# The available AWS stack capabilities values.
CAPABILITIES = {
    "CAPABILITY_IAM": "CAPABILITY_IAM",
    "CAPABILITY_NAMED_IAM": "CAPABILITY_NAMED_IAM",
}

# What to do with the current stack on failure to deploy.
ON_DEPLOY_FAILURE = {
    # Delete the stack.
    "DELETE": "DELETE",
    # Leave the failed partial stack for diagnosis.
    "DO_NOTHING": "DO_NOTHING",
}

# What to do with prior instances of the stack after a successful deploy.
PRIOR_INSTANCE = {
    "DELETE": "DELETE",
    "DO_NOTHING": "DO_NOTHING",
}


class ResourceStatus:
    """Stack statuses used by the terminal-state tables."""

    CREATE_IN_PROGRESS = "CREATE_IN_PROGRESS"
    CREATE_COMPLETE = "CREATE_COMPLETE"
    CREATE_FAILED = "CREATE_FAILED"
    DELETE_IN_PROGRESS = "DELETE_IN_PROGRESS"
    DELETE_COMPLETE = "DELETE_COMPLETE"
    DELETE_FAILED = "DELETE_FAILED"
    UPDATE_IN_PROGRESS = "UPDATE_IN_PROGRESS"
    UPDATE_COMPLETE = "UPDATE_COMPLETE"
    UPDATE_ROLLBACK_COMPLETE = "UPDATE_ROLLBACK_COMPLETE"
    UPDATE_ROLLBACK_FAILED = "UPDATE_ROLLBACK_FAILED"


class ChangeSetStatus:
    """Change set statuses that end the preview poll."""

    CREATE_COMPLETE = "CREATE_COMPLETE"
    FAILED = "FAILED"


class OperationType:
    """Type of stack operation being awaited."""

    CREATE_STACK = "create"
    DELETE_STACK = "delete"
    UPDATE_STACK = "update"


STACK_RESOURCE_TYPE = "AWS::CloudFormation::Stack"

# Tag keys managed by this package.
TAG_STACK_BASE_NAME = "cloudformation-deploy:stackBaseName"
TAG_STACK_NAME = "cloudformation-deploy:stackName"
TAG_VERSION = "cloudformation-deploy:version"

# Statuses of stacks that may be prior instances: live and not in the middle
# of an update or delete.
PRIOR_STACK_STATUS_FILTER = [
    "CREATE_IN_PROGRESS",
    "CREATE_FAILED",
    "CREATE_COMPLETE",
    "ROLLBACK_IN_PROGRESS",
    "ROLLBACK_FAILED",
    "ROLLBACK_COMPLETE",
    "DELETE_FAILED",
    "UPDATE_COMPLETE",
    "UPDATE_ROLLBACK_COMPLETE",
]

DEFAULT_REGION = "us-east-1"
