from __future__ import annotations

from typing import Optional

from deliberate_thinking.core.model import ConsensusState, SprintPlan


# Both trackers replace wholesale. A caller that wants to change one field sends the full value.


class SprintTracker:
    def __init__(self) -> None:
        self._plan: Optional[SprintPlan] = None

    def set(self, plan: SprintPlan) -> Optional[SprintPlan]:
        previous, self._plan = self._plan, plan
        return previous

    def current(self) -> Optional[SprintPlan]:
        return self._plan


class ConsensusTracker:
    def __init__(self) -> None:
        self._state = ConsensusState()

    def set(self, state: ConsensusState) -> ConsensusState:
        previous, self._state = self._state, state
        return previous

    def current(self) -> ConsensusState:
        return self._state
