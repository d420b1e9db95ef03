# liftlog/client/api.py
"""HTTP client for the LiftLog API.

Holds the session token returned by signup/signin and sends it as the
``x-session-id`` header. Any ``httpx.Client`` can be injected, which is how
the tests drive it against FastAPI's ``TestClient``.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

import httpx

log = logging.getLogger(__name__)

SESSION_HEADER = "x-session-id"


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class ApiClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        *,
        http: Optional[httpx.Client] = None,
        session_id: Optional[str] = None,
        timeout: float = 10.0,
    ) -> None:
        self.http = http or httpx.Client(base_url=base_url.rstrip("/"), timeout=timeout)
        self.session_id = session_id
        self.user: Optional[dict] = None

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @property
    def authenticated(self) -> bool:
        return self.session_id is not None

    def _request(self, method: str, path: str, **kwargs) -> Any:
        headers = dict(kwargs.pop("headers", None) or {})
        if self.session_id:
            headers[SESSION_HEADER] = self.session_id
        resp = self.http.request(method, f"/api{path}", headers=headers, **kwargs)
        if not resp.is_success:
            try:
                message = resp.json().get("error") or "Request failed"
            except ValueError:
                message = resp.text or "Request failed"
            log.debug("%s %s failed: %s %s", method, path, resp.status_code, message)
            raise ApiError(resp.status_code, message)
        return resp.json()

    # Auth

    def _remember(self, result: dict) -> dict:
        self.session_id = result["sessionId"]
        self.user = result["user"]
        return result["user"]

    def sign_up(self, username: str, password: str) -> dict:
        return self._remember(self._request("POST", "/auth/signup", json={"username": username, "password": password}))

    def sign_in(self, username: str, password: str) -> dict:
        return self._remember(self._request("POST", "/auth/signin", json={"username": username, "password": password}))

    def sign_out(self) -> None:
        try:
            self._request("POST", "/auth/signout")
        finally:
            self.session_id = None
            self.user = None

    def me(self) -> dict:
        return self._request("GET", "/auth/me")["user"]

    # Routines

    def get_routines(self) -> list[dict]:
        return self._request("GET", "/routines")

    def get_routine(self, routine_id: int) -> dict:
        return self._request("GET", f"/routines/{routine_id}")

    def create_routine(self, name: str, exercises: Optional[list[dict]] = None) -> dict:
        return self._request("POST", "/routines", json={"name": name, "exercises": exercises or []})

    def delete_routine(self, routine_id: int) -> None:
        self._request("DELETE", f"/routines/{routine_id}")

    def get_routine_exercises(self, routine_id: int) -> list[dict]:
        return self._request("GET", f"/routines/{routine_id}/exercises")

    def create_routine_exercise(
        self, routine_id: int, name: str, planned_sets: int = 1, order_index: Optional[int] = None
    ) -> dict:
        body = {"name": name, "planned_sets": planned_sets, "order_index": order_index}
        return self._request("POST", f"/routines/{routine_id}/exercises", json=body)

    def delete_routine_exercise(self, exercise_id: int) -> None:
        self._request("DELETE", f"/routine-exercises/{exercise_id}")

    # Workouts

    def get_workouts(self, status: Optional[str] = None) -> list[dict]:
        params = {"status": status} if status else None
        return self._request("GET", "/workouts", params=params)

    def get_workout(self, workout_id: int) -> dict:
        return self._request("GET", f"/workouts/{workout_id}")

    def get_history(self) -> list[dict]:
        return self._request("GET", "/workouts/history")

    def create_workout(
        self,
        *,
        routine_id: Optional[int] = None,
        routine_name: Optional[str] = None,
        start_time: Optional[datetime] = None,
    ) -> dict:
        body: dict[str, Any] = {"routine_id": routine_id, "routine_name": routine_name}
        if start_time is not None:
            body["start_time"] = start_time.isoformat()
        return self._request("POST", "/workouts", json=body)

    def update_workout(self, workout_id: int, **fields) -> dict:
        body = {k: v.isoformat() if isinstance(v, datetime) else v for k, v in fields.items()}
        return self._request("PATCH", f"/workouts/{workout_id}", json=body)

    def finish_workout(self, workout_id: int, end_time: datetime) -> dict:
        return self.update_workout(workout_id, end_time=end_time)

    def delete_workout(self, workout_id: int) -> None:
        self._request("DELETE", f"/workouts/{workout_id}")

    # Sets

    def get_workout_sets(self, workout_id: int) -> list[dict]:
        return self._request("GET", f"/workouts/{workout_id}/sets")

    def create_workout_set(
        self,
        workout_id: int,
        *,
        exercise_name: str,
        weight: float,
        reps: int,
        rpe: int = 5,
        set_number: Optional[int] = None,
    ) -> dict:
        body = {
            "exercise_name": exercise_name,
            "weight": weight,
            "reps": reps,
            "rpe": rpe,
            "set_number": set_number,
        }
        return self._request("POST", f"/workouts/{workout_id}/sets", json=body)

    def update_workout_set(self, set_id: int, **fields) -> dict:
        return self._request("PATCH", f"/workout-sets/{set_id}", json=fields)

    def delete_workout_set(self, set_id: int) -> None:
        self._request("DELETE", f"/workout-sets/{set_id}")

    # WorkoutStore protocol, used by WorkoutSession
    create_set = create_workout_set
    update_set = update_workout_set
    delete_set = delete_workout_set
