"""
Decision queue for documents with unsaved changes.

A batch holds the documents still waiting for a decision and at most one
standing decision. Choosing an "all remaining" option stores that decision
and every later document in the same batch reuses it without a prompt.
"""

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Dict, Iterable, Iterator, List, Optional

from ..constants import (
    CHOICE_DISCARD_ALL_AND_PROTECT,
    CHOICE_DISCARD_AND_PROTECT,
    CHOICE_KEEP_ALL_EDITABLE,
    CHOICE_KEEP_EDITABLE,
)
from .host import Document


class BatchDecision(Enum):
    KEEP_EDITABLE = "keep-editable"
    DISCARD_AND_PROTECT = "discard-readonly"


@dataclass(frozen=True)
class BatchChoice:
    label: str
    decision: BatchDecision
    apply_to_remaining: bool = False


CHOICES: Dict[str, BatchChoice] = {
    choice.label: choice for choice in (
        BatchChoice(CHOICE_KEEP_EDITABLE, BatchDecision.KEEP_EDITABLE),
        BatchChoice(CHOICE_KEEP_ALL_EDITABLE, BatchDecision.KEEP_EDITABLE, True),
        BatchChoice(CHOICE_DISCARD_AND_PROTECT, BatchDecision.DISCARD_AND_PROTECT),
        BatchChoice(CHOICE_DISCARD_ALL_AND_PROTECT, BatchDecision.DISCARD_AND_PROTECT, True),
    )
}


class ReconciliationBatch:
    """Ordered queue of dirty documents plus the standing decision"""

    def __init__(self, documents: Iterable[Document]):
        self._queue: Deque[Document] = deque(documents)
        self.size = len(self._queue)
        self.pending_decision: Optional[BatchDecision] = None

    def __iter__(self) -> Iterator[Document]:
        while self._queue:
            yield self._queue.popleft()

    def __len__(self) -> int:
        return len(self._queue)

    @property
    def remaining(self) -> int:
        """Documents still queued behind the current one"""
        return len(self._queue)

    def options(self) -> List[str]:
        if self.remaining > 0:
            return [
                CHOICE_KEEP_EDITABLE,
                CHOICE_KEEP_ALL_EDITABLE,
                CHOICE_DISCARD_AND_PROTECT,
                CHOICE_DISCARD_ALL_AND_PROTECT,
            ]
        return [CHOICE_KEEP_EDITABLE, CHOICE_DISCARD_AND_PROTECT]

    def prompt(self, document: Document) -> str:
        message = (
            f'The file "{document.path.name}" has unsaved changes and will become '
            f'read-only. What would you like to do?'
        )
        if self.remaining > 0:
            plural = 's' if self.remaining > 1 else ''
            message += f" ({self.remaining} more file{plural} to process)"
        return message

    def record(self, label: Optional[str]) -> Optional[BatchDecision]:
        """
        Turn the user's answer into a decision.

        Returns:
            The decision for the current document, or None when the prompt
            was dismissed or answered with an unknown label
        """
        choice = CHOICES.get(label) if label is not None else None
        if choice is None:
            return None
        if choice.apply_to_remaining:
            self.pending_decision = choice.decision
        return choice.decision
