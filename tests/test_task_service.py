# tests/test_task_service.py

from datetime import datetime

import pytest

from app import task_service, user_service
from app.errors import Forbidden, NotFound
from app.models import Task


def _ticked_by(task, index):
    return [ref["id"] for ref in task["points"][index]["completed_by"]]


def test_create_defaults(db, alice):
    task = task_service.create_task(db, alice, "Write report")
    assert task["status"] == "today"
    assert task["priority"] == "medium"
    assert task["created_by"] == {"id": alice.id, "username": "alice"}
    assert task["assigned_to"] == {"id": alice.id, "username": "alice"}
    assert task["points"] == []
    assert task["files"] == []
    assert task["progress"] == 0
    assert task["due_date"] is None


def test_non_admin_cannot_assign_on_creation(db, alice, bob):
    task = task_service.create_task(db, alice, "Mine", assigned_to=bob.id)
    assert task["assigned_to"]["id"] == alice.id


def test_admin_assigns_on_creation(db, admin, bob):
    task = task_service.create_task(db, admin, "For Bob", assigned_to=bob.id)
    assert task["assigned_to"]["id"] == bob.id
    assert task["created_by"]["id"] == admin.id


def test_admin_cannot_assign_to_unknown_user(db, admin):
    with pytest.raises(NotFound):
        task_service.create_task(db, admin, "Ghost", assigned_to=9999)


def test_tick_untick_scenario(db, alice):
    task = task_service.create_task(db, alice, "Checklist", points=["a", "b"])
    assert task["progress"] == 0

    task = task_service.tick_point(db, task["id"], 0, alice.id)
    assert task["progress"] == 50
    task = task_service.tick_point(db, task["id"], 1, alice.id)
    assert task["progress"] == 100
    task = task_service.untick_point(db, task["id"], 0, alice.id)
    assert task["progress"] == 50


def test_tick_is_idempotent(db, alice):
    task = task_service.create_task(db, alice, "Once", points=["a"])
    task_service.tick_point(db, task["id"], 0, alice.id)
    task = task_service.tick_point(db, task["id"], 0, alice.id)
    assert _ticked_by(task, 0) == [alice.id]


def test_untick_absent_user_is_noop(db, alice, bob):
    task = task_service.create_task(db, alice, "Shared", points=["a"])
    task_service.tick_point(db, task["id"], 0, alice.id)
    task = task_service.untick_point(db, task["id"], 0, bob.id)
    assert _ticked_by(task, 0) == [alice.id]
    assert task["progress"] == 100


def test_any_user_can_tick_any_task(db, alice, bob):
    task = task_service.create_task(db, alice, "Collaborative", points=["a", "b"])
    task = task_service.tick_point(db, task["id"], 1, bob.id)
    assert _ticked_by(task, 1) == [bob.id]
    assert task["points"][1]["completed_by"][0]["username"] == "bob"


@pytest.mark.parametrize("index", [2, -1, 100])
def test_tick_invalid_point_is_not_found(db, alice, index):
    task = task_service.create_task(db, alice, "Short", points=["a", "b"])
    with pytest.raises(NotFound, match="Point"):
        task_service.tick_point(db, task["id"], index, alice.id)


def test_tick_missing_task_is_not_found(db, alice):
    with pytest.raises(NotFound, match="Task"):
        task_service.tick_point(db, 404, 0, alice.id)


def test_update_overwrites_given_fields_only(db, alice):
    task = task_service.create_task(db, alice, "Draft", description="old", priority="low")
    due = datetime(2030, 1, 15, 9, 30)
    task = task_service.update_task(db, alice, task["id"], {"title": "Final", "due_date": due})
    assert task["title"] == "Final"
    assert task["description"] == "old"
    assert task["priority"] == "low"
    assert task["due_date"].replace(tzinfo=None) == due


def test_update_points_replaces_checklist_and_marks(db, alice):
    task = task_service.create_task(db, alice, "Checklist", points=["a", "b"])
    task_service.tick_point(db, task["id"], 0, alice.id)
    task = task_service.update_task(db, alice, task["id"], {"points": ["x", "y", "z"]})
    assert [p["text"] for p in task["points"]] == ["x", "y", "z"]
    assert all(p["completed_by"] == [] for p in task["points"])
    assert task["progress"] == 0


def test_only_owner_or_admin_edits(db, admin, alice, bob):
    task = task_service.create_task(db, admin, "Bob's", assigned_to=bob.id)
    with pytest.raises(Forbidden):
        task_service.update_task(db, bob, task["id"], {"title": "hijack"})
    with pytest.raises(Forbidden):
        task_service.update_task(db, alice, task["id"], {"title": "hijack"})
    task = task_service.update_task(db, admin, task["id"], {"title": "renamed"})
    assert task["title"] == "renamed"


def test_owner_cannot_reassign_through_update(db, alice, bob):
    task = task_service.create_task(db, alice, "Mine")
    with pytest.raises(Forbidden):
        task_service.update_task(db, alice, task["id"], {"assigned_to": bob.id})
    # restating the current assignee is not a change
    task = task_service.update_task(db, alice, task["id"], {"assigned_to": alice.id, "title": "ok"})
    assert task["title"] == "ok"


def test_status_move(db, admin, alice, bob):
    task = task_service.create_task(db, admin, "Move me", assigned_to=alice.id)
    task = task_service.update_task_status(db, alice, task["id"], "this-week")
    assert task["status"] == "this-week"

    with pytest.raises(Forbidden):
        task_service.update_task_status(db, bob, task["id"], "done")
    with pytest.raises(Forbidden):
        task_service.update_task_status(db, alice, task["id"], "done", assigned_to=bob.id)

    task = task_service.update_task_status(db, admin, task["id"], "done", assigned_to=bob.id)
    assert task["status"] == "done"
    assert task["assigned_to"]["id"] == bob.id


def test_assign_is_admin_only(db, admin, alice, bob):
    task = task_service.create_task(db, alice, "Mine")
    with pytest.raises(Forbidden):
        task_service.assign_task(db, alice, task["id"], bob.id)
    task = task_service.assign_task(db, admin, task["id"], bob.id)
    assert task["assigned_to"]["id"] == bob.id


def test_add_file_record(db, alice):
    task = task_service.create_task(db, alice, "With attachment")
    task = task_service.add_file_to_task(
        db, alice, task["id"], filename="abc123.pdf", original_name="report.pdf", path="uploads/abc123.pdf"
    )
    [record] = task["files"]
    assert record["filename"] == "abc123.pdf"
    assert record["original_name"] == "report.pdf"
    assert record["uploaded_by"]["id"] == alice.id
    assert record["uploaded_at"]


def test_unrelated_user_cannot_attach(db, alice, bob):
    task = task_service.create_task(db, alice, "Private")
    with pytest.raises(Forbidden):
        task_service.add_file_to_task(db, bob, task["id"], "f", None, "p")


def test_delete_is_admin_only(db, admin, alice):
    task = task_service.create_task(db, alice, "Doomed")
    with pytest.raises(Forbidden):
        task_service.delete_task(db, alice, task["id"])
    task_service.delete_task(db, admin, task["id"])
    assert db.query(Task).count() == 0


def test_delete_missing_task_leaves_collection_unchanged(db, admin, alice):
    task_service.create_task(db, alice, "Survivor")
    with pytest.raises(NotFound):
        task_service.delete_task(db, admin, 9999)
    assert db.query(Task).count() == 1


def test_listing_is_newest_first_and_filtered(db, admin, alice, bob):
    first = task_service.create_task(db, alice, "alice's first")
    for_alice = task_service.create_task(db, admin, "for alice", assigned_to=alice.id)
    bobs = task_service.create_task(db, bob, "bob's")

    assert [t["id"] for t in task_service.list_tasks(db, admin)] == [bobs["id"], for_alice["id"], first["id"]]
    assert [t["id"] for t in task_service.list_tasks(db, alice)] == [for_alice["id"], first["id"]]
    assert [t["id"] for t in task_service.list_tasks(db, bob)] == [bobs["id"]]

    with pytest.raises(Forbidden):
        task_service.get_task(db, bob, first["id"])
    assert task_service.get_task(db, alice, first["id"])["title"] == "alice's first"


def test_list_by_status(db, alice):
    task_service.create_task(db, alice, "today")
    later = task_service.create_task(db, alice, "later", status="later")
    assert [t["id"] for t in task_service.list_tasks_by_status(db, alice, "later")] == [later["id"]]
    assert task_service.list_tasks_by_status(db, alice, "done") == []


def test_dashboard_stats(db, admin, alice):
    empty = task_service.create_task(db, alice, "untouched", points=["a"])
    half = task_service.create_task(db, alice, "half", points=["a", "b"], status="done")
    full = task_service.create_task(db, alice, "full", points=["a"], status="canceled")
    task_service.tick_point(db, half["id"], 0, alice.id)
    task_service.tick_point(db, full["id"], 0, alice.id)
    assert empty["progress"] == 0

    with pytest.raises(Forbidden):
        task_service.get_admin_dashboard(db, alice)

    dashboard = task_service.get_admin_dashboard(db, admin)
    assert dashboard["stats"] == {
        "total_tasks": 3,
        "completed_tasks": 1,
        "in_progress_tasks": 1,
        "todo_tasks": 1,
        "done_tasks": 1,
        "canceled_tasks": 1,
        "total_users": 2,
    }
    assert len(dashboard["tasks"]) == 3
    assert {u["username"] for u in dashboard["users"]} == {"admin", "alice"}


def test_deleted_assignee_leaves_dangling_reference(db, admin, bob):
    task = task_service.create_task(db, admin, "Orphan", assigned_to=bob.id, points=["a"])
    bob_id = bob.id
    task_service.tick_point(db, task["id"], 0, bob_id)
    user_service.delete_user(db, bob_id)

    [listed] = task_service.list_tasks(db, admin)
    assert listed["assigned_to"] is None
    assert listed["points"][0]["completed_by"] == []
    assert db.get(Task, task["id"]).assigned_to == bob_id
