from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from bucl.ast import Statement


@dataclass
class BuiltinFunction:
    name: str
    min_args: int
    fn: Any
    def __repr__(self) -> str:
        return f"<builtin {self.name}>"


@dataclass
class Invocation:
    """Everything a builtin receives for one call."""
    function: str
    target: Optional[str]
    args: List[str]
    named: Dict[str, str] = field(default_factory=dict)
    body: Optional[List[Statement]] = None
    continuation: Optional[Statement] = None

    def named_or_positional(self, name: str, index: int) -> Optional[str]:
        if name in self.named:
            return self.named[name]
        if index < len(self.args):
            return self.args[index]
        return None
