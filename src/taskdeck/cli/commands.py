# src/taskdeck/cli/commands.py

from __future__ import annotations

import inspect
import logging
import shlex
from collections.abc import Callable
from dataclasses import replace
from datetime import date, datetime
from typing import cast

from ..core.state import AppState
from ..tasks import date_matcher
from ..tasks.export import write_csv_export
from ..tasks.progress import completed_step_count, is_task_completed, task_progress
from ..tasks.task_models import Contact, ProgressStep, ProgressTracker, Task, TaskFilter
from ..tasks.validation import (
    ValidationError,
    validate_category_name,
    validate_email,
    validate_sub_task,
    validate_task_title,
)
from ..utils import (
    calculate_days_left,
    format_days_left,
    get_initials,
    parse_bullet_points,
    random_category_color,
    truncate_text,
)

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /task, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like '/command args "quoted arg"'.
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError as e:
            return f"Cannot parse command: {e}."
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return h3(state, args, emit)
            h2 = cast(CommandHandler2, handler)
            return h2(state, args)
        except ValidationError as e:
            return str(e)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- formatting helpers ----


def _task_line(task: Task) -> str:
    mark = "x" if is_task_completed(task) else " "
    return f"[{mark}] {task.id}  {truncate_text(task.title, 48)}  ({round(task_progress(task))}%)"


def _task_details(state: AppState, task: Task) -> str:
    store = state.task_store
    cat = store.get_category(task.category_id)
    meta = task.metadata
    lines = [
        f"{task.title}  [{task.id}]",
        f"  Category: {cat.name if cat else '(missing)'}",
        f"  Progress: {round(task_progress(task))}%",
    ]
    if task.description:
        lines.append(f"  {task.description}")
    for st in task.sub_tasks:
        mark = "x" if st.completed else " "
        label = st.heading or st.description
        extra = f"  ({st.timeline})" if st.timeline else ""
        lines.append(f"    [{mark}] {st.id}  {label}{extra}")
        if st.heading and st.description:
            lines.append(f"          {st.description}")
        for bp in st.bullet_points or []:
            lines.append(f"          - {bp}")
    if meta.contact is not None and not meta.contact.is_empty():
        parts = [p for p in (meta.contact.name, meta.contact.email, meta.contact.phone) if p]
        lines.append(f"  Contact: {' - '.join(parts)}")
    if meta.cost:
        lines.append(f"  Cost: {meta.cost}")
    if meta.timeline:
        lines.append(f"  Timeline: {meta.timeline}")
    if meta.documents_needed:
        lines.append(f"  Documents: {'; '.join(meta.documents_needed)}")
    if meta.contingencies:
        lines.append(f"  Contingencies: {meta.contingencies}")
    if meta.progress_note:
        lines.append(f"  Progress note: {meta.progress_note}")
    tracker = meta.progress_tracker
    if tracker is not None:
        lines.append(f"  Steps ({completed_step_count(tracker)}/{len(tracker.steps)}):")
        for n, step in enumerate(tracker.steps, start=1):
            mark = "x" if step.completed else " "
            cur = " <" if step.id == tracker.current_step else ""
            due = ""
            if step.due_date:
                try:
                    due = f"  {format_days_left(calculate_days_left(date.fromisoformat(step.due_date[:10])))}"
                except ValueError:
                    due = f"  due {step.due_date}"
            lines.append(f"    {n}. [{mark}] {step.id}  {step.title}{due}{cur}")
    return "\n".join(lines)


def _need(args: list[str], n: int, usage: str) -> None:
    if len(args) < n:
        raise ValidationError(f"Usage: {usage}")


# A lone "-" clears an optional field.
CLEAR = "-"


def _opt(text: str) -> str | None:
    return None if text.strip() == CLEAR else text


def _items(text: str) -> list[str]:
    """Bullet / document list typed on one line: items split on ";" or a literal \\n."""
    return parse_bullet_points(text.replace("\\n", "\n").replace(";", "\n"))


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    store = state.task_store
    prefs = state.settings_store.prefs
    tasks = store.list_tasks()
    done = sum(1 for t in tasks if is_task_completed(t))
    return (
        "Status:\n"
        f"  Categories: {len(store.list_categories())}\n"
        f"  Tasks: {len(tasks)} ({done} completed)\n"
        f"  Dark mode: {'ON' if prefs.dark_mode else 'OFF'}\n"
        f"  Notifications: {'ON' if prefs.notifications else 'OFF'}\n"
        f"  Data dir: {getattr(state.settings, 'data_dir', '?')}"
    )


def cmd_cat(state: AppState, args: list[str]) -> str:
    """
    /cat                      -> list categories with progress
    /cat add <name> [color]   -> create a category
    /cat rename <id> <name>
    /cat color <id> <color>
    /cat del <id>             -> delete category AND its tasks
    """
    store = state.task_store
    sub = args[0].lower() if args else "list"

    if sub in ("list", "ls"):
        cats = store.list_categories()
        if not cats:
            return "No categories yet. Use /cat add <name>."
        lines = ["Categories:"]
        for c in cats:
            n = len(store.get_tasks_by_category(c.id))
            lines.append(
                f"  {c.id}  {c.name}  {c.color}  tasks={n}  progress={round(store.get_category_progress(c.id))}%"
            )
        return "\n".join(lines)

    if sub == "add":
        _need(args, 2, "/cat add <name> [color]")
        name = validate_category_name(args[1])
        color = args[2] if len(args) > 2 else random_category_color()
        cid = store.add_category(name, color)
        return f"Category created: {cid} ({name})"

    if sub == "rename":
        _need(args, 3, "/cat rename <id> <name>")
        if store.get_category(args[1]) is None:
            return f"No category with id {args[1]}."
        store.update_category(args[1], name=validate_category_name(args[2]))
        return "Category renamed."

    if sub == "color":
        _need(args, 3, "/cat color <id> <color>")
        if store.get_category(args[1]) is None:
            return f"No category with id {args[1]}."
        store.update_category(args[1], color=args[2])
        return "Category color updated."

    if sub in ("del", "delete", "rm"):
        _need(args, 2, "/cat del <id>")
        if store.get_category(args[1]) is None:
            return f"No category with id {args[1]}."
        n = len(store.get_tasks_by_category(args[1]))
        store.delete_category(args[1])
        return f"Category deleted together with {n} task(s)."

    return "Usage: /cat [list] | add <name> [color] | rename <id> <name> | color <id> <color> | del <id>"


def cmd_task(state: AppState, args: list[str]) -> str:
    """
    /task add <category_id> <title> [description]
    /task show <id>
    /task title|desc|timeline|cost <id> <text>
    /task move <id> <category_id>
    /task contact <id> <name> [email] [phone]
    /task docs <id> "<doc; doc; ...>"
    /task contingencies <id> <text>
    /task del <id>

    For timeline, cost, docs and contingencies a lone "-" clears the field.
    """
    store = state.task_store
    usage = (
        "Usage: /task add <category_id> <title> [description] | show <id> | "
        "title|desc|timeline|cost <id> <text> | move <id> <category_id> | "
        "contact <id> <name> [email] [phone] | docs <id> <list> | contingencies <id> <text> | del <id>"
    )
    if not args:
        return usage
    sub = args[0].lower()

    if sub == "add":
        _need(args, 3, "/task add <category_id> <title> [description]")
        if store.get_category(args[1]) is None:
            return f"No category with id {args[1]}."
        title = validate_task_title(args[2])
        desc = args[3] if len(args) > 3 else ""
        tid = store.add_task(title=title, description=desc, category_id=args[1])
        return f"Task created: {tid}"

    _need(args, 2, usage[len("Usage: "):])
    task = store.get_task(args[1])
    if task is None:
        return f"No task with id {args[1]}."

    if sub == "show":
        return _task_details(state, task)

    if sub in ("del", "delete", "rm"):
        store.delete_task(task.id)
        return "Task deleted."

    if sub == "title":
        _need(args, 3, "/task title <id> <text>")
        store.update_task(task.id, title=validate_task_title(args[2]))
        return "Task updated."

    if sub == "desc":
        _need(args, 3, "/task desc <id> <text>")
        store.update_task(task.id, description=args[2])
        return "Task updated."

    if sub == "move":
        _need(args, 3, "/task move <id> <category_id>")
        if store.get_category(args[2]) is None:
            return f"No category with id {args[2]}."
        store.update_task(task.id, category_id=args[2])
        return "Task moved."

    # Metadata is replaced wholesale: start from the current metadata.
    if sub == "timeline":
        _need(args, 3, "/task timeline <id> <text>")
        store.update_task(task.id, metadata=replace(task.metadata, timeline=_opt(args[2])))
        return "Timeline updated."

    if sub == "cost":
        _need(args, 3, "/task cost <id> <text>")
        store.update_task(task.id, metadata=replace(task.metadata, cost=_opt(args[2])))
        return "Cost updated."

    if sub == "contact":
        _need(args, 3, "/task contact <id> <name> [email] [phone]")
        email = validate_email(args[3]) if len(args) > 3 else None
        phone = args[4] if len(args) > 4 else None
        contact = Contact(name=args[2], email=email, phone=phone)
        store.update_task(task.id, metadata=replace(task.metadata, contact=contact))
        return "Contact updated."

    if sub in ("docs", "documents"):
        _need(args, 3, "/task docs <id> \"<doc; doc; ...>\"")
        docs = None if _opt(args[2]) is None else _items(" ".join(args[2:]))
        store.update_task(task.id, metadata=replace(task.metadata, documents_needed=docs or None))
        return f"Documents needed: {len(docs or [])}."

    if sub == "contingencies":
        _need(args, 3, "/task contingencies <id> <text>")
        text = _opt(" ".join(args[2:]))
        store.update_task(task.id, metadata=replace(task.metadata, contingencies=text))
        return "Contingencies updated."

    return usage


def cmd_list(state: AppState, args: list[str]) -> str:
    """/list [all|completed|inProgress] [category_id]"""
    task_filter = TaskFilter.from_raw(args[0]) if args else TaskFilter.ALL
    category_id = args[1] if len(args) > 1 else None
    tasks = state.task_store.filter_tasks(task_filter, category_id=category_id)
    if not tasks:
        return "No tasks."
    return "\n".join(_task_line(t) for t in tasks)


def cmd_search(state: AppState, args: list[str]) -> str:
    query = " ".join(args)
    tasks = state.task_store.search_tasks(query)
    if not tasks:
        return f"No tasks match {query!r}."
    return "\n".join(_task_line(t) for t in tasks)


_SUB_ADD_OPTIONS = ("heading", "bullets", "timeline")


def _split_options(args: list[str], names: tuple[str, ...]) -> tuple[list[str], dict[str, str]]:
    """Separate key=value options (only the given keys) from positional args."""
    positional: list[str] = []
    options: dict[str, str] = {}
    for arg in args:
        key, sep, value = arg.partition("=")
        if sep and key.lower() in names:
            options[key.lower()] = value
        else:
            positional.append(arg)
    return positional, options


def cmd_sub(state: AppState, args: list[str]) -> str:
    """
    /sub add <task_id> <description> [timeline] [heading=<text>] [bullets="<a; b>"]
    /sub toggle <task_id> <sub_id>
    /sub edit <task_id> <sub_id> <description>
    /sub heading|timeline <task_id> <sub_id> <text|->
    /sub bullets <task_id> <sub_id> "<a; b; ...>|-"
    /sub del <task_id> <sub_id>
    """
    store = state.task_store
    usage = (
        "Usage: /sub add <task_id> <description> [timeline] [heading=..] [bullets=..] | "
        "toggle <task_id> <sub_id> | edit <task_id> <sub_id> <description> | "
        "heading|timeline|bullets <task_id> <sub_id> <text|-> | del <task_id> <sub_id>"
    )
    if len(args) < 3:
        return usage
    sub, task_id = args[0].lower(), args[1]
    task = store.get_task(task_id)
    if task is None:
        return f"No task with id {task_id}."

    if sub == "add":
        positional, options = _split_options(args[2:], _SUB_ADD_OPTIONS)
        description = positional[0] if positional else ""
        heading = options.get("heading") or None
        validate_sub_task(description, heading)
        timeline = options.get("timeline") or (positional[1] if len(positional) > 1 else None)
        bullets = _items(options["bullets"]) if "bullets" in options else None
        sid = store.add_sub_task(
            task_id,
            description=description,
            heading=heading,
            bullet_points=bullets or None,
            timeline=timeline,
        )
        return f"Sub-task added: {sid}"

    sub_id = args[2]
    current = next((st for st in task.sub_tasks if st.id == sub_id), None)
    if current is None:
        return f"No sub-task with id {sub_id}."

    if sub == "toggle":
        store.toggle_sub_task(task_id, sub_id)
        return f"Progress: {round(store.get_task_progress(task_id))}%"

    if sub == "edit":
        _need(args, 4, "/sub edit <task_id> <sub_id> <description>")
        validate_sub_task(args[3], current.heading)
        store.update_sub_task(task_id, sub_id, description=args[3])
        return "Sub-task updated."

    if sub == "heading":
        _need(args, 4, "/sub heading <task_id> <sub_id> <text|->")
        heading = _opt(args[3])
        validate_sub_task(current.description, heading)
        store.update_sub_task(task_id, sub_id, heading=heading)
        return "Sub-task updated."

    if sub == "timeline":
        _need(args, 4, "/sub timeline <task_id> <sub_id> <text|->")
        store.update_sub_task(task_id, sub_id, timeline=_opt(args[3]))
        return "Sub-task updated."

    if sub == "bullets":
        _need(args, 4, "/sub bullets <task_id> <sub_id> \"<a; b; ...>|-\"")
        text = _opt(" ".join(args[3:]))
        bullets = _items(text) if text is not None else []
        store.update_sub_task(task_id, sub_id, bullet_points=bullets or None)
        return f"Bullet points: {len(bullets)}."

    if sub in ("del", "delete", "rm"):
        store.delete_sub_task(task_id, sub_id)
        return "Sub-task deleted."

    return usage


def cmd_step(state: AppState, args: list[str]) -> str:
    """
    /step add <task_id> <title> [due YYYY-MM-DD]
    /step done <task_id> <step_id>
    /step undo <task_id> <step_id>
    """
    store = state.task_store
    usage = "Usage: /step add <task_id> <title> [due] | done <task_id> <step_id> | undo <task_id> <step_id>"
    if len(args) < 3:
        return usage
    sub, task_id = args[0].lower(), args[1]
    task = store.get_task(task_id)
    if task is None:
        return f"No task with id {task_id}."

    if sub == "add":
        tracker = task.metadata.progress_tracker or ProgressTracker()
        step = ProgressStep(title=args[2], due_date=args[3] if len(args) > 3 else None)
        new_tracker = ProgressTracker(
            steps=[*tracker.steps, step],
            current_step=tracker.current_step or step.id,
        )
        store.update_task(task_id, metadata=replace(task.metadata, progress_tracker=new_tracker))
        return f"Step added: {step.id}"

    if sub in ("done", "undo"):
        tracker = task.metadata.progress_tracker
        if tracker is None or not any(s.id == args[2] for s in tracker.steps):
            return f"No step with id {args[2]}."
        store.update_progress_step(task_id, args[2], sub == "done")
        return "Step updated."

    return usage


def cmd_calendar(state: AppState, args: list[str]) -> str:
    """/calendar [YYYY-MM] -> month grid; '*' marks days with tasks."""
    if args:
        try:
            month_start = datetime.strptime(args[0], "%Y-%m").date()
        except ValueError:
            return "Usage: /calendar [YYYY-MM]"
    else:
        month_start = date.today().replace(day=1)

    grid = date_matcher.build_month_grid(month_start.year, month_start.month)
    marked = date_matcher.days_with_tasks(
        state.task_store.list_tasks(), month_start.year, month_start.month
    )
    lines = [month_start.strftime("%B %Y"), " Su  Mo  Tu  We  Th  Fr  Sa"]
    for i in range(0, len(grid), 7):
        week = grid[i : i + 7]
        lines.append(
            "".join(f"{d.day:>3}{'*' if d in marked else ' '}" for d in week).rstrip()
        )
    return "\n".join(lines)


def cmd_day(state: AppState, args: list[str]) -> str:
    """/day [YYYY-MM-DD] -> tasks placed on that day."""
    try:
        day = date.fromisoformat(args[0]) if args else date.today()
    except ValueError:
        return "Usage: /day [YYYY-MM-DD]"
    tasks = date_matcher.tasks_on_date(state.task_store.list_tasks(), day)
    if not tasks:
        return f"No tasks on {day.isoformat()}."
    return "\n".join([f"Tasks on {day.isoformat()}:"] + [_task_line(t) for t in tasks])


def cmd_export(state: AppState, args: list[str]) -> str:
    store = state.task_store
    tasks = store.list_tasks()
    if not tasks:
        return "There are no tasks to export."
    directory = args[0] if args else getattr(state.settings, "export_dir", ".")
    try:
        path = write_csv_export(tasks, store.list_categories(), directory)
    except OSError:
        logger.exception("CSV export failed dir=%s", directory)
        return "Export failed. See the log for details."
    return f"Exported {len(tasks)} task(s) to {path}"


def cmd_sample(state: AppState, args: list[str]) -> str:
    n = state.task_store.load_sample_data()
    return f"Sample data loaded ({n} tasks)."


def cmd_reset(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args or args[0].lower() != "yes":
        return "This deletes ALL tasks and categories. Run /reset yes to confirm."
    if emit:
        emit("Clearing all data...")
    state.task_store.reset_store()
    return "All data has been cleared."


def cmd_settings(state: AppState, args: list[str]) -> str:
    """
    /settings                -> show
    /settings dark|notifications|demo  -> toggle
    /settings login|logout
    """
    ss = state.settings_store
    if args:
        sub = args[0].lower()
        if sub == "dark":
            ss.toggle_dark_mode()
        elif sub in ("notifications", "notify"):
            ss.toggle_notifications()
        elif sub == "demo":
            ss.toggle_backend_demo()
        elif sub == "login":
            ss.login()
        elif sub == "logout":
            ss.logout()
        else:
            return "Usage: /settings [dark|notifications|demo|login|logout]"

    p = ss.prefs
    who = p.user_profile.name if p.user_profile and p.user_profile.name else "-"
    return (
        "Settings:\n"
        f"  Dark mode: {'ON' if p.dark_mode else 'OFF'}\n"
        f"  Notifications: {'ON' if p.notifications else 'OFF'}\n"
        f"  Backend demo: {'ON' if p.show_backend_demo else 'OFF'}\n"
        f"  Signed in: {'yes' if p.is_logged_in else 'no'} ({who})"
    )


_PROFILE_FIELDS = {
    "name": "name",
    "email": "email",
    "phone": "phone",
    "location": "location",
    "bio": "bio",
    "avatar": "avatar_url",
    "joined": "join_date",
}


def cmd_profile(state: AppState, args: list[str]) -> str:
    """
    /profile                      -> show the signed-in user's profile
    /profile <field> <value|->    -> edit name, email, phone, location, bio, avatar, joined
    """
    ss = state.settings_store
    if not ss.prefs.is_logged_in:
        return "Not signed in. Use /settings login."

    if args:
        _need(args, 2, "/profile <field> <value|->")
        attr = _PROFILE_FIELDS.get(args[0].lower())
        if attr is None:
            return f"Unknown profile field: {args[0]}. Fields: {', '.join(_PROFILE_FIELDS)}."
        value = _opt(" ".join(args[1:]))
        if attr == "name" and value is None:
            raise ValidationError("Please enter a name")
        if attr == "email":
            value = validate_email(value)
        # update_user_profile skips None, so clearing goes through an empty string.
        ss.update_user_profile(**{attr: "" if value is None else value})

    profile = ss.prefs.user_profile
    if profile is None:
        return "No profile."
    lines = [f"Profile ({get_initials(profile.name or '') or '?'}):"]
    for label, attr in _PROFILE_FIELDS.items():
        value = getattr(profile, attr)
        if value:
            lines.append(f"  {label.capitalize()}: {value}")
    return "\n".join(lines)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show counts and current settings.")
registry.register("cat", cmd_cat, help_text="Categories: /cat [list] | add | rename | color | del.")
registry.register("task", cmd_task, help_text="Tasks: /task add | show | title | desc | move | timeline | cost | contact | docs | contingencies | del.")
registry.register("list", cmd_list, help_text="List tasks: /list [all|completed|inProgress] [category_id].", aliases=["ls"])
registry.register("search", cmd_search, help_text="Search title, description, sub-tasks and contact name.")
registry.register("sub", cmd_sub, help_text="Sub-tasks: /sub add | toggle | edit | heading | timeline | bullets | del.")
registry.register("step", cmd_step, help_text="Progress steps: /step add | done | undo.")
registry.register("calendar", cmd_calendar, help_text="Month view: /calendar [YYYY-MM].", aliases=["cal"])
registry.register("day", cmd_day, help_text="Tasks on a day: /day [YYYY-MM-DD].")
registry.register("export", cmd_export, help_text="Export tasks to CSV: /export [dir].")
registry.register("sample", cmd_sample, help_text="Load sample categories and tasks.")
registry.register("reset", cmd_reset, help_text="Delete all tasks and categories: /reset yes.")
registry.register("settings", cmd_settings, help_text="Preferences: /settings [dark|notifications|demo|login|logout].")
registry.register("profile", cmd_profile, help_text="Profile: /profile [<field> <value>].", aliases=["me"])
