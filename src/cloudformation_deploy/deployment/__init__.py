"""
Deploy, update and preview update workflows.
"""

from .deploy import Deploy
from .preview_update import PreviewUpdate
from .results import DeployResult, OperationResult, PreviewUpdateResult, UpdateResult
from .update import Update

__all__ = [
    "Deploy",
    "DeployResult",
    "OperationResult",
    "PreviewUpdate",
    "PreviewUpdateResult",
    "Update",
    "UpdateResult",
]
