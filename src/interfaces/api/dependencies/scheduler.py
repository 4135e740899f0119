"""Trigger scheduler dependency registry."""

from fastapi import HTTPException, status

from src.domain.services.trigger_scheduler import TriggerScheduler

_scheduler: TriggerScheduler | None = None


def set_scheduler(scheduler: TriggerScheduler) -> None:
    """Register global trigger scheduler instance."""
    global _scheduler
    _scheduler = scheduler


def clear_scheduler() -> None:
    """Reset trigger scheduler (used on shutdown/tests)."""
    global _scheduler
    _scheduler = None


def get_scheduler() -> TriggerScheduler:
    """FastAPI dependency to fetch the scheduler (503 when disabled)."""
    if _scheduler is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Trigger scheduler has not been initialized.",
        )
    return _scheduler


def get_optional_scheduler() -> TriggerScheduler | None:
    """Scheduler or None; CRUD routes keep working when scheduling is disabled."""
    return _scheduler
