"""
Results returned by the deploy, update and preview update workflows.
"""

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List, Optional

from ..cloudformation.operation import StackData


def _to_plain(value: Any) -> Any:
    if isinstance(value, StackData):
        return asdict(value)
    if isinstance(value, BaseException):
        return str(value)
    if isinstance(value, list):
        return [_to_plain(item) for item in value]
    return value


@dataclass
class OperationResult:
    """Partial or complete result of a workflow, with any error raised."""

    errors: List[BaseException] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def error(self) -> Optional[BaseException]:
        return self.errors[0] if self.errors else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to plain data, errors as messages."""
        return {f.name: _to_plain(getattr(self, f.name)) for f in fields(self)}


@dataclass
class DeployResult(OperationResult):
    create_stack: Optional[StackData] = None
    describe_stack: Optional[Dict[str, Any]] = None
    delete_stack: List[StackData] = field(default_factory=list)


@dataclass
class UpdateResult(OperationResult):
    update_stack: Optional[StackData] = None
    describe_stack: Optional[Dict[str, Any]] = None


@dataclass
class PreviewUpdateResult(OperationResult):
    change_set_data: Optional[StackData] = None
    # The latest change set description, complete or not.
    change_set: Optional[Dict[str, Any]] = None
