"""Contract with an external learned task router.

The router itself is not part of riskroute. Anything registered under the
``riskroute.routers`` entry-point group that satisfies ``LearnedRouter`` is
used; without one, routing falls back to the local heuristic.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")


@dataclass
class RouterAlternative:
    agent_id: str
    confidence: float
    value: float = 0.0


@dataclass
class RouterDecision:
    """One routing decision made by a learned router."""

    agent_id: str
    confidence: float
    value: float = 0.0  # learned value of the selection
    exploration_used: bool = False
    alternatives: List[RouterAlternative] = field(default_factory=list)


@dataclass
class RoutingFeedback:
    """Outcome of a routed task, fed back to the learned router."""

    task_id: str
    agent_id: str
    success: bool
    quality: float  # 0-1
    execution_time_ms: float = 0.0

    def clamped(self) -> "RoutingFeedback":
        return replace(self, quality=min(1.0, max(0.0, self.quality)))


@runtime_checkable
class LearnedRouter(Protocol):
    """Routers select an agent for a task and learn from feedback."""

    def route(self, task: str, explore: bool = True) -> RouterDecision: ...

    def provide_feedback(self, feedback: RoutingFeedback) -> None: ...

    def reset(self) -> None: ...


class RouterTimeoutError(TimeoutError):
    """Raised when a learned router does not answer within its time limit."""

    pass


def call_with_timeout(func: Callable[..., T], timeout: float, *args: Any, **kwargs: Any) -> T:
    """Run *func* on a daemon thread and wait at most *timeout* seconds.

    A router that hangs is abandoned, not interrupted. The thread is a
    daemon so it never holds the interpreter open at exit.

    Raises:
        RouterTimeoutError: If *func* has not returned in time.
        Exception: Whatever *func* raised, re-raised on the calling thread.
    """
    outcome: Dict[str, Any] = {}

    def _target() -> None:
        try:
            outcome["value"] = func(*args, **kwargs)
        except BaseException as e:  # handed back to the calling thread
            outcome["error"] = e

    worker = threading.Thread(target=_target, name="riskroute-router", daemon=True)
    worker.start()
    worker.join(timeout)

    if worker.is_alive():
        raise RouterTimeoutError(f"Router call exceeded {timeout}s timeout")
    if "error" in outcome:
        raise outcome["error"]
    return outcome["value"]
