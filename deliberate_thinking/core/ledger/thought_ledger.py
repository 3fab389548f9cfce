from __future__ import annotations

from typing import Iterator, Optional

from deliberate_thinking.core.errors import InvalidReference
from deliberate_thinking.core.model import Role, Thought


class HistoryView:
    """Read-only view over the first ``length`` thoughts of a ledger.

    Iterating twice yields the same thoughts; appends made after the view was
    taken are not visible through it.
    """

    def __init__(self, thoughts: list[Thought], length: int) -> None:
        self._thoughts = thoughts
        self._length = length

    def __iter__(self) -> Iterator[Thought]:
        for i in range(self._length):
            yield self._thoughts[i]

    def __len__(self) -> int:
        return self._length

    def numbers(self) -> list[int]:
        return [t.number for t in self]


class ThoughtLedger:
    """Append-only record of thoughts. Sequence numbers start at 1 and have no gaps."""

    def __init__(self) -> None:
        self._thoughts: list[Thought] = []
        self._branches: dict[str, list[int]] = {}

    def __len__(self) -> int:
        return len(self._thoughts)

    @property
    def next_number(self) -> int:
        return len(self._thoughts) + 1

    def check(self, revision_of: Optional[int] = None, branch_from: Optional[int] = None) -> None:
        """Raise InvalidReference if the references cannot attach to the next thought."""
        if revision_of is not None and branch_from is not None:
            raise InvalidReference(
                code="E_CONFLICTING_REFERENCE",
                message="a thought may revise or branch from an earlier thought, not both",
                path="revisesThought",
            )
        for ref, path in ((revision_of, "revisesThought"), (branch_from, "branchFromThought")):
            if ref is None:
                continue
            if not 1 <= ref < self.next_number:
                raise InvalidReference(
                    code="E_UNKNOWN_REFERENCE",
                    message=f"{path} references unknown thought: {ref} (ledger has {len(self)})",
                    path=path,
                )

    def append(
        self,
        content: str,
        revision_of: Optional[int] = None,
        branch_from: Optional[int] = None,
        branch_label: Optional[str] = None,
        role: Optional[Role] = None,
    ) -> int:
        self.check(revision_of, branch_from)

        number = self.next_number
        thought = Thought(
            number=number,
            content=content,
            revision_of=revision_of,
            branch_from=branch_from,
            branch_label=branch_label if branch_from is not None else None,
            role=role,
        )
        self._thoughts.append(thought)
        if thought.branch_label is not None:
            self._branches.setdefault(thought.branch_label, []).append(number)
        return number

    def get(self, number: int) -> Optional[Thought]:
        if 1 <= number <= len(self._thoughts):
            return self._thoughts[number - 1]
        return None

    def history(self) -> HistoryView:
        return HistoryView(self._thoughts, len(self._thoughts))

    def branches(self) -> list[str]:
        return sorted(self._branches.keys())

    def branch(self, label: str) -> tuple[Thought, ...]:
        """Thoughts on a branch: the trunk up to the branch point, then the branch's own thoughts."""
        numbers = self._branches.get(label)
        if not numbers:
            return ()
        first = self._thoughts[numbers[0] - 1]
        assert first.branch_from is not None
        trunk = [t for t in self._thoughts[: first.branch_from] if t.branch_label is None]
        return tuple(trunk + [self._thoughts[n - 1] for n in numbers])
