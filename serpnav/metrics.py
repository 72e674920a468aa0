from dataclasses import dataclass, field

from .retry import AttemptOutcome, RunState

@dataclass
class AttemptResult:
    """
    Normalized per-attempt result recorded by the session controller.

    Fields:
        index       : 1-based attempt number.
        outcome     : success / no_match / error.
        user_agent  : User agent the session was opened with (None = browser default).
        ttl_s       : Wall time of the attempt, session close included (seconds).
        clicked_url : Href of the search result that was followed, if any.
        title       : Title of the target page after navigation.
        error_type  : String name of the exception (e.g. "TimeoutError").
        error       : Exception message, for the log and the CSV summary.
        records     : Number of JSON-LD records extracted, None when extraction
                      did not run, found nothing, or fell back to raw redacted text.
    """
    index: int
    outcome: AttemptOutcome
    user_agent: str | None = None
    ttl_s: float = 0.0
    clicked_url: str | None = None
    title: str | None = None
    error_type: str | None = None
    error: str | None = None
    records: int | None = None


@dataclass
class RunReport:
    state: RunState
    attempts: list[AttemptResult] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state is RunState.SUCCEEDED
