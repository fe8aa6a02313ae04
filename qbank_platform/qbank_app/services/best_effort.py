"""Side operations whose failure must not fail the surrounding operation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from ..gateway import GatewayError
from ..metrics import record_best_effort_failure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BestEffortOutcome:
    action: str
    ok: bool
    value: Any = None
    error: str | None = None


def best_effort(action: str, fn: Callable[..., Any], *args, **kwargs) -> BestEffortOutcome:
    """Call ``fn`` and turn backend failures into a logged, discarded outcome.

    Only gateway errors are absorbed; programming errors still propagate.
    """

    try:
        value = fn(*args, **kwargs)
    except GatewayError as exc:
        logger.warning(
            "Best-effort %s failed: %s", action, exc, extra={"action": action}
        )
        record_best_effort_failure(action)
        return BestEffortOutcome(action=action, ok=False, error=str(exc))
    return BestEffortOutcome(action=action, ok=True, value=value)
