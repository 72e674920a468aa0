"""
Retry module: the bounded attempt loop expressed as a small state machine.

States:
    ATTEMPTING -> (SUCCESS)           -> SUCCEEDED
    ATTEMPTING -> (NO_MATCH | ERROR)  -> COOLDOWN   while attempts remain
    ATTEMPTING -> (NO_MATCH | ERROR)  -> EXHAUSTED  on the last attempt
    COOLDOWN   -> ATTEMPTING

Kept free of any browser code so the policy can be tested on its own.
"""

from dataclasses import dataclass
from enum import Enum


class AttemptOutcome(str, Enum):
    SUCCESS = "success"
    NO_MATCH = "no_match"
    ERROR = "error"


class RunState(str, Enum):
    ATTEMPTING = "attempting"
    COOLDOWN = "cooldown"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"

    @property
    def terminal(self) -> bool:
        return self in (RunState.SUCCEEDED, RunState.EXHAUSTED)


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 3
    cooldown_s: float = 2.0

    def __post_init__(self):
        if self.max_retries < 1:
            raise ValueError(f"max_retries must be >= 1, got {self.max_retries}")

    def next_state(self, attempt: int, outcome: AttemptOutcome) -> RunState:
        """State after attempt number `attempt` (1-based) ended with `outcome`."""
        if outcome is AttemptOutcome.SUCCESS:
            return RunState.SUCCEEDED
        if attempt < self.max_retries:
            return RunState.COOLDOWN
        return RunState.EXHAUSTED
