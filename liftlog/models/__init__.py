from liftlog.models.user import User
from liftlog.models.routine import Routine, RoutineExercise
from liftlog.models.workout import Workout, WorkoutSet
from liftlog.models.auth_session import AuthSession

__all__ = ["User", "Routine", "RoutineExercise", "Workout", "WorkoutSet", "AuthSession"]
