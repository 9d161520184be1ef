"""Domain models."""
from __future__ import annotations

from dataclasses import dataclass, field

from poller.app.constants import CycleOutcome
from poller.app.schemas.orders import WorkItem


@dataclass(frozen=True)
class Account:
    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class Session:
    """Bearer credential owned by exactly one worker for its whole lifetime."""

    username: str
    access_token: str = field(repr=False)

    @property
    def authorization(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token}"}


@dataclass(frozen=True)
class WorkUnit:
    """An order and its products, in the order the server returned them."""

    parent_id: int | str
    items: tuple[WorkItem, ...]

    def __post_init__(self) -> None:
        if not self.items:
            raise ValueError("work unit must contain at least one item")


@dataclass
class WorkerReport:
    """Per-worker outcome counters, returned when the worker stops."""

    worker_index: int
    username: str = ""
    succeeded: int = 0
    idle: int = 0
    errors: int = 0
    fatal_error: str | None = None

    @property
    def cycles(self) -> int:
        return self.succeeded + self.idle + self.errors

    def record(self, outcome: CycleOutcome) -> None:
        if outcome is CycleOutcome.SUCCESS:
            self.succeeded += 1
        elif outcome is CycleOutcome.IDLE:
            self.idle += 1
        else:
            self.errors += 1
