"""Step recorder for detailed evaluation."""

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class Step:
    """One evaluated sub-expression and its value."""
    operation: str
    result: float


@dataclass
class EvaluationTrace:
    """Append-only list of steps, populated only when ``detailed`` is set.

    A trace belongs to a single evaluation call and is not shared.
    """
    detailed: bool = False
    steps: List[Step] = field(default_factory=list)

    def record(self, operation: str, result: float) -> None:
        if self.detailed:
            self.steps.append(Step(operation, result))

    def __len__(self) -> int:
        return len(self.steps)
