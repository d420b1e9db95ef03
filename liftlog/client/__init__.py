from liftlog.client.api import ApiClient, ApiError
from liftlog.client.workout_session import (
    DraftSlot,
    FlushResult,
    SessionState,
    SessionStateError,
    SlotState,
    WorkoutSession,
    WorkoutStore,
)

__all__ = [
    "ApiClient",
    "ApiError",
    "DraftSlot",
    "FlushResult",
    "SessionState",
    "SessionStateError",
    "SlotState",
    "WorkoutSession",
    "WorkoutStore",
]
