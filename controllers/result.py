"""
Outcome of a batch command.
"""

from dataclasses import dataclass, field
from typing import Optional

from utils.errors import BatchOperationError


@dataclass
class OperationResult:
    """Per-item outcome of an add, remove or update command."""
    action: str
    item: str = "tokenizer"
    succeeded: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    invalid: list[str] = field(default_factory=list)
    warning: str = ""
    info: str = ""

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def error(self) -> Optional[BatchOperationError]:
        """Error naming every item that failed, None if none did."""
        if not self.failed:
            return None
        return BatchOperationError(self.failed, action=self.action, item=self.item)


def remove_duplicates(names: list[str]) -> list[str]:
    """Drop repeated names, keeping the first occurrence."""
    return list(dict.fromkeys(names))
