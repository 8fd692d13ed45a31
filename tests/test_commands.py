# tests/test_commands.py

from __future__ import annotations

import re
from pathlib import Path

from taskdeck.cli.commands import CommandRegistry, registry


def _new_id(reply: str) -> str:
    m = re.search(r": ([0-9a-f]{12})", reply)
    assert m, reply
    return m.group(1)


def test_command_registry_routes_2_and_3_params(state) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}

    def h2(state, args):
        called["h2"] += 1
        return "h2:" + ",".join(args)

    def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b", aliases=["bee"])

    assert reg.handle(state, '/a x "y z"') == "h2:x,y z"
    assert reg.handle(state, "/BEE y", emit=lambda _: None) == "h3"
    assert called == {"h2": 1, "h3": 1}


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")
    assert "Cannot parse" in (reg.handle(state, '/a "unbalanced') or "")


def test_category_task_sub_task_flow(state) -> None:
    cid = _new_id(registry.handle(state, '/cat add Finance "#F59E0B"'))
    tid = _new_id(registry.handle(state, f'/task add {cid} "Open account"'))
    s1 = _new_id(registry.handle(state, f"/sub add {tid} Step1"))
    s2 = _new_id(registry.handle(state, f"/sub add {tid} Step2 5/6/23"))

    assert registry.handle(state, f"/sub toggle {tid} {s1}") == "Progress: 50%"
    assert registry.handle(state, f"/sub toggle {tid} {s2}") == "Progress: 100%"
    assert "progress=100%" in registry.handle(state, "/cat")
    assert "[x]" in registry.handle(state, "/list completed")
    assert registry.handle(state, "/list inProgress") == "No tasks."

    details = registry.handle(state, f"/task show {tid}")
    assert "Open account" in details
    assert "Finance" in details

    assert "Open account" in registry.handle(state, "/day 2023-06-05")
    assert registry.handle(state, "/day 2023-05-06") == "No tasks on 2023-05-06."

    assert "deleted together with 1 task" in registry.handle(state, f"/cat del {cid}")
    assert state.task_store.list_tasks() == []


def test_validation_messages_surface(state) -> None:
    assert registry.handle(state, '/cat add "  "') == "Please enter a category name"
    cid = _new_id(registry.handle(state, "/cat add Home"))
    assert registry.handle(state, f'/task add {cid} " "') == "Please enter a task title"
    tid = _new_id(registry.handle(state, f"/task add {cid} Paint"))
    assert registry.handle(state, f"/task contact {tid} Bob bob-at-mail") == "Please enter a valid email address"
    assert registry.handle(state, f"/task contact {tid} Bob bob@mail.com 555") == "Contact updated."
    assert state.task_store.get_task(tid).metadata.contact.email == "bob@mail.com"
    assert registry.handle(state, "/task show missing") == "No task with id missing."


def test_metadata_edits_keep_other_fields(state) -> None:
    cid = _new_id(registry.handle(state, "/cat add Home"))
    tid = _new_id(registry.handle(state, f"/task add {cid} Paint"))
    registry.handle(state, f'/task cost {tid} "100 EUR"')
    registry.handle(state, f'/task timeline {tid} "by 1/2/25"')
    meta = state.task_store.get_task(tid).metadata
    assert meta.cost == "100 EUR"
    assert meta.timeline == "by 1/2/25"


def test_steps(state) -> None:
    cid = _new_id(registry.handle(state, "/cat add Home"))
    tid = _new_id(registry.handle(state, f"/task add {cid} Paint"))
    a = _new_id(registry.handle(state, f"/step add {tid} Buy"))
    b = _new_id(registry.handle(state, f"/step add {tid} Paint 2030-01-01"))

    tracker = state.task_store.get_task(tid).metadata.progress_tracker
    assert tracker.current_step == a

    assert registry.handle(state, f"/step done {tid} {a}") == "Step updated."
    assert state.task_store.get_task(tid).metadata.progress_tracker.current_step == b
    assert "days left" in registry.handle(state, f"/task show {tid}")
    assert registry.handle(state, f"/step done {tid} nope") == "No step with id nope."


def test_reset_requires_confirmation(state) -> None:
    registry.handle(state, "/sample")
    assert len(state.task_store.list_tasks()) == 3
    assert "/reset yes" in registry.handle(state, "/reset")
    assert len(state.task_store.list_tasks()) == 3

    notes: list[str] = []
    assert registry.handle(state, "/reset yes", emit=notes.append) == "All data has been cleared."
    assert notes == ["Clearing all data..."]
    assert state.task_store.list_categories() == []


def test_export_and_search(state, tmp_path: Path) -> None:
    assert registry.handle(state, "/export") == "There are no tasks to export."
    registry.handle(state, "/sample")
    assert "Obtain Tax Registration" in registry.handle(state, "/search revenue department")
    reply = registry.handle(state, f"/export {tmp_path}")
    assert reply.startswith("Exported 3 task(s) to ")
    files = list(tmp_path.glob("tasks_export_*.csv"))
    assert len(files) == 1


def test_calendar_marks_days(state) -> None:
    cid = _new_id(registry.handle(state, "/cat add Home"))
    tid = _new_id(registry.handle(state, f"/task add {cid} Paint"))
    registry.handle(state, f'/task timeline {tid} "15/6/24"')
    out = registry.handle(state, "/calendar 2024-06")
    lines = out.split("\n")
    assert lines[0] == "June 2024"
    assert " 15*" in out
    assert len(lines) == 2 + 6
    assert registry.handle(state, "/calendar june") == "Usage: /calendar [YYYY-MM]"


def test_settings_command(state) -> None:
    out = registry.handle(state, "/settings dark")
    assert "Dark mode: ON" in out
    out = registry.handle(state, "/settings logout")
    assert "Signed in: no" in out
    assert "Usage" in registry.handle(state, "/settings bogus")


def test_sub_task_heading_and_bullets(state) -> None:
    cid = _new_id(registry.handle(state, "/cat add Home"))
    tid = _new_id(registry.handle(state, f"/task add {cid} Move"))
    sid = _new_id(
        registry.handle(
            state,
            f'/sub add {tid} "Pack boxes" heading=Packing "bullets=- books; * kitchen;  ; lamps"',
        )
    )
    sub = state.task_store.get_task(tid).sub_tasks[0]
    assert sub.id == sid
    assert sub.heading == "Packing"
    assert sub.bullet_points == ["books", "kitchen", "lamps"]
    assert sub.timeline is None

    details = registry.handle(state, f"/task show {tid}")
    assert "Packing" in details and "Pack boxes" in details
    assert "- kitchen" in details

    assert registry.handle(state, f'/sub bullets {tid} {sid} "tape; labels"') == "Bullet points: 2."
    assert state.task_store.get_task(tid).sub_tasks[0].bullet_points == ["tape", "labels"]

    registry.handle(state, f"/sub timeline {tid} {sid} 3/4/25")
    registry.handle(state, f"/sub heading {tid} {sid} -")
    registry.handle(state, f"/sub bullets {tid} {sid} -")
    registry.handle(state, f"/sub timeline {tid} {sid} -")
    sub = state.task_store.get_task(tid).sub_tasks[0]
    assert (sub.heading, sub.bullet_points, sub.timeline) == (None, None, None)
    assert sub.description == "Pack boxes"


def test_sub_task_heading_only_and_validation(state) -> None:
    cid = _new_id(registry.handle(state, "/cat add Home"))
    tid = _new_id(registry.handle(state, f"/task add {cid} Move"))
    assert registry.handle(state, f'/sub add {tid} ""') == "Sub-task needs a description or a heading"
    sid = _new_id(registry.handle(state, f'/sub add {tid} "" heading=Utilities timeline=1/5/25'))
    sub = state.task_store.get_task(tid).sub_tasks[0]
    assert (sub.id, sub.heading, sub.description, sub.timeline) == (sid, "Utilities", "", "1/5/25")
    # Dropping the heading would leave the sub-task empty.
    assert registry.handle(state, f"/sub heading {tid} {sid} -") == "Sub-task needs a description or a heading"


def test_documents_and_contingencies(state) -> None:
    cid = _new_id(registry.handle(state, "/cat add Home"))
    tid = _new_id(registry.handle(state, f"/task add {cid} Visa"))
    registry.handle(state, f'/task cost {tid} "80 EUR"')

    assert registry.handle(state, f'/task docs {tid} "passport; photo"') == "Documents needed: 2."
    assert registry.handle(state, f'/task contingencies {tid} "Apply in person"') == "Contingencies updated."
    meta = state.task_store.get_task(tid).metadata
    assert meta.documents_needed == ["passport", "photo"]
    assert meta.contingencies == "Apply in person"
    assert meta.cost == "80 EUR"

    details = registry.handle(state, f"/task show {tid}")
    assert "Documents: passport; photo" in details
    assert "Contingencies: Apply in person" in details

    registry.handle(state, f"/task docs {tid} -")
    registry.handle(state, f"/task contingencies {tid} -")
    meta = state.task_store.get_task(tid).metadata
    assert meta.documents_needed is None
    assert meta.contingencies is None
    assert meta.cost == "80 EUR"


def test_profile_command(state) -> None:
    out = registry.handle(state, "/profile")
    assert out.startswith("Profile (JD):")
    assert "Email: john.doe@example.com" in out

    out = registry.handle(state, '/profile name "Ada Lovelace"')
    assert out.startswith("Profile (AL):")
    assert state.settings_store.prefs.user_profile.name == "Ada Lovelace"

    assert registry.handle(state, "/profile email nope") == "Please enter a valid email address"
    assert "Location: Paris" in registry.handle(state, "/profile location Paris")
    assert "Bio:" not in registry.handle(state, "/profile bio -")
    assert registry.handle(state, "/profile nickname Ada").startswith("Unknown profile field")

    registry.handle(state, "/settings logout")
    assert registry.handle(state, "/profile") == "Not signed in. Use /settings login."
