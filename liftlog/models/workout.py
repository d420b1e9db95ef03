from datetime import datetime
from decimal import Decimal
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, ForeignKey, String, DateTime, Numeric, Index, func
from liftlog.db import Base

class Workout(Base):
    __tablename__ = "workouts"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    routine_id: Mapped[int | None] = mapped_column(
        ForeignKey("routines.id", ondelete="SET NULL"), nullable=True, index=True
    )
    # Snapshot of the routine name; survives routine deletion
    routine_name: Mapped[str] = mapped_column(String(120), nullable=False)
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="workouts")
    routine = relationship("Routine", back_populates="workouts")
    sets = relationship(
        "WorkoutSet",
        back_populates="workout",
        cascade="all, delete-orphan",
        order_by="(WorkoutSet.exercise_name, WorkoutSet.set_number, WorkoutSet.id)",
    )

    @property
    def completed(self) -> bool:
        return self.end_time is not None


class WorkoutSet(Base):
    __tablename__ = "workout_sets"
    __table_args__ = (Index("ix_workout_sets_workout_exercise", "workout_id", "exercise_name"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    workout_id: Mapped[int] = mapped_column(ForeignKey("workouts.id", ondelete="CASCADE"), index=True)
    # Plain string, not a FK: sets outlive edits to the routine's exercises
    exercise_name: Mapped[str] = mapped_column(String(120), nullable=False)
    weight: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False, default=0, server_default="0")
    reps: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    rpe: Mapped[int] = mapped_column(Integer, nullable=False, default=5, server_default="5")
    set_number: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    workout = relationship("Workout", back_populates="sets")
