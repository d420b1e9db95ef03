"""Workout history roll-ups: per-exercise totals and session duration."""
from __future__ import annotations

from collections import OrderedDict
from typing import Iterable

from liftlog.models import Workout, WorkoutSet
from liftlog.timeutil import as_utc


def duration_minutes(workout: Workout) -> int | None:
    """Whole minutes between start and end; None while the workout is active."""
    if workout.end_time is None:
        return None
    delta = as_utc(workout.end_time) - as_utc(workout.start_time)
    return max(0, int(delta.total_seconds() // 60))


def summarize_sets(sets: Iterable[WorkoutSet]) -> list[dict]:
    # first-seen order
    groups: "OrderedDict[str, list[WorkoutSet]]" = OrderedDict()
    for s in sets:
        groups.setdefault(s.exercise_name, []).append(s)

    out = []
    for name, rows in groups.items():
        weights = [float(r.weight) for r in rows]
        rpes = [r.rpe for r in rows if r.rpe is not None]
        out.append({
            "exercise_name": name,
            "sets": len(rows),
            "total_reps": sum(r.reps for r in rows),
            "volume": round(sum(float(r.weight) * r.reps for r in rows), 2),
            "top_weight": max(weights) if weights else 0.0,
            "avg_rpe": round(sum(rpes) / len(rpes), 1) if rpes else None,
        })
    return out


def summarize_workout(workout: Workout) -> dict:
    exercises = summarize_sets(sorted(workout.sets, key=lambda s: s.id))
    return {
        "duration_minutes": duration_minutes(workout),
        "total_sets": sum(e["sets"] for e in exercises),
        "total_reps": sum(e["total_reps"] for e in exercises),
        "total_volume": round(sum(e["volume"] for e in exercises), 2),
        "exercises": exercises,
    }
