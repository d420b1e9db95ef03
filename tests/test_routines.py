from fastapi.testclient import TestClient
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
import pytest
from liftlog.main import app
from liftlog.db import SessionLocal
from liftlog.models import Routine, RoutineExercise
from liftlog.repositories.routine_repo import RoutineRepository
import uuid

client = TestClient(app)
PWD = "Passw0rd!23"

def login():
    r = client.post("/api/auth/signup", json={"username": f"r_{uuid.uuid4().hex[:10]}", "password": PWD})
    assert r.status_code == 201, r.text
    body = r.json()
    return body["user"]["id"], {"x-session-id": body["sessionId"]}

def test_create_then_get_returns_owned_routine():
    user_id, H = login()
    r = client.post("/api/routines", headers=H, json={"name": "  Push Day  "})
    assert r.status_code == 201
    rid = r.json()["id"]

    got = client.get(f"/api/routines/{rid}", headers=H).json()
    assert got["user_id"] == user_id
    assert got["name"] == "Push Day"
    listed = client.get("/api/routines", headers=H).json()
    assert [x["id"] for x in listed] == [rid]

def test_create_with_exercises_orders_them():
    _, H = login()
    r = client.post("/api/routines", headers=H, json={
        "name": "Legs",
        "exercises": [
            {"name": "Squat", "planned_sets": 3},
            {"name": "Lunge", "planned_sets": 2},
            {"name": "Calf Raise", "planned_sets": 4, "order_index": 0},
        ],
    })
    assert r.status_code == 201
    body = r.json()
    # duplicate order_index is allowed; ties fall back to insertion order
    assert [(e["name"], e["order_index"]) for e in body["exercises"]] == [
        ("Squat", 0), ("Calf Raise", 0), ("Lunge", 1),
    ]

def test_invalid_exercise_rejects_whole_routine():
    _, H = login()
    r = client.post("/api/routines", headers=H, json={
        "name": "Broken", "exercises": [{"name": "Squat", "planned_sets": 3}, {"name": "", "planned_sets": 1}],
    })
    assert r.status_code == 400
    assert client.get("/api/routines", headers=H).json() == []

def test_routine_and_exercises_written_in_one_transaction():
    user_id, _ = login()
    with SessionLocal() as db:
        with pytest.raises(IntegrityError):
            RoutineRepository(db).create(
                user_id,
                name="Half written",
                exercises=[{"name": "Squat", "planned_sets": 3}, {"name": None, "planned_sets": 1}],
            )
        count = db.execute(select(func.count()).select_from(Routine).where(Routine.user_id == user_id)).scalar_one()
        assert count == 0

def test_delete_cascades_exercises_and_spares_other_users():
    _, H1 = login()
    _, H2 = login()
    mine = client.post("/api/routines", headers=H1, json={
        "name": "Mine", "exercises": [{"name": "Row", "planned_sets": 3}, {"name": "Curl", "planned_sets": 2}],
    }).json()
    theirs = client.post("/api/routines", headers=H2, json={
        "name": "Theirs", "exercises": [{"name": "Press", "planned_sets": 3}],
    }).json()

    # someone else's routine is invisible
    assert client.delete(f"/api/routines/{theirs['id']}", headers=H1).status_code == 404

    r = client.delete(f"/api/routines/{mine['id']}", headers=H1)
    assert r.status_code == 200
    assert r.json() == {"success": True}
    assert client.get(f"/api/routines/{mine['id']}", headers=H1).status_code == 404

    with SessionLocal() as db:
        left = db.execute(
            select(func.count()).select_from(RoutineExercise).where(RoutineExercise.routine_id == mine["id"])
        ).scalar_one()
        assert left == 0

    still = client.get(f"/api/routines/{theirs['id']}", headers=H2)
    assert still.status_code == 200
    assert [e["name"] for e in still.json()["exercises"]] == ["Press"]

def test_exercise_endpoints():
    _, H = login()
    rid = client.post("/api/routines", headers=H, json={"name": "Pull"}).json()["id"]

    a = client.post(f"/api/routines/{rid}/exercises", headers=H, json={"name": "Deadlift", "planned_sets": 2})
    assert a.status_code == 201
    assert a.json()["order_index"] == 0
    b = client.post("/api/routine-exercises", headers=H,
                    json={"routine_id": rid, "name": "Row", "planned_sets": 3})
    assert b.status_code == 201
    assert b.json()["order_index"] == 1

    listed = client.get(f"/api/routines/{rid}/exercises", headers=H).json()
    assert [e["name"] for e in listed] == ["Deadlift", "Row"]

    assert client.delete(f"/api/routine-exercises/{a.json()['id']}", headers=H).status_code == 200
    assert client.delete(f"/api/routine-exercises/{a.json()['id']}", headers=H).status_code == 404
    assert [e["name"] for e in client.get(f"/api/routines/{rid}/exercises", headers=H).json()] == ["Row"]

def test_exercises_of_other_users_routine_404():
    _, H1 = login()
    _, H2 = login()
    rid = client.post("/api/routines", headers=H1, json={
        "name": "Private", "exercises": [{"name": "Squat", "planned_sets": 1}],
    }).json()["id"]
    ex_id = client.get(f"/api/routines/{rid}/exercises", headers=H1).json()[0]["id"]

    assert client.get(f"/api/routines/{rid}/exercises", headers=H2).status_code == 404
    assert client.post(f"/api/routines/{rid}/exercises", headers=H2,
                       json={"name": "Sneaky", "planned_sets": 1}).status_code == 404
    assert client.delete(f"/api/routine-exercises/{ex_id}", headers=H2).status_code == 404

def test_negative_planned_sets_rejected():
    _, H = login()
    rid = client.post("/api/routines", headers=H, json={"name": "X"}).json()["id"]
    r = client.post(f"/api/routines/{rid}/exercises", headers=H, json={"name": "Y", "planned_sets": -1})
    assert r.status_code == 400
