from todolist.domain.errors import DomainError, TaskNotFoundError, TaskValidationError, DuplicateTitleError
from todolist.domain.task import Task
from todolist.domain.enums import TaskFilter
from todolist.services.task_service import TaskService
from todolist.services.task_store import TaskStore
from todolist.services.autosave import AutoSaver
from todolist.adapters.file.task_storage import FileTaskStorage
from todolist.adapters.memory.task_storage import InMemoryTaskStorage
from todolist.api.colors import TaskColor
from todolist.config import Settings, load_settings
from todolist.logging_setup import setup_logging
from typer import Context, Option, Typer
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import Prompt
from dataclasses import replace
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Optional
import logging
import shlex


### COMMENTS
# ==========================================================
# CLI (Typer + Rich) — presentation layer for the task list.
# ==========================================================
# Role:
# - Maps commands onto TaskService (add/list/show/toggle/edit/rm).
# - Renders results as tables and panels.
# - Catches DomainError and prints friendly messages.
#
# Rules:
# - No business logic here; delegate to TaskService / TaskStore.
# - One bootstrap per process (callback): settings -> logging -> store -> load.
# - Closing the Typer context performs one final save (shutdown hook).


app = Typer(help="To-do list CLI")
console = Console()
logger = logging.getLogger(__name__)

service: TaskService | None = None  # set in the callback
settings: Settings | None = None

DATE_FORMATS = ["%Y-%m-%d"]


def build_service(path: Path) -> TaskService:
    """Builds the store on a JSON file and wraps it in a service."""
    return TaskService(TaskStore(FileTaskStorage(path)))


@app.callback()
def main(
    ctx: Context,
    file: Optional[Path] = Option(
        None,
        "--file",
        "-f",
        help="Path of the JSON task file (default: $TODOLIST_DATA_PATH or ./tasks.json)",
    ),
    log_level: Optional[str] = Option(None, "--log-level", help="Console log level"),
) -> None:
    """Bootstraps dependencies when the CLI process starts."""
    global service, settings
    settings = load_settings()
    if file is not None:
        settings = replace(settings, data_path=file)
    if log_level:
        settings = replace(settings, log_level=log_level.upper())
    setup_logging(settings.log_level, log_file=settings.log_file)

    # demo runs on its own in-memory store
    if ctx.invoked_subcommand == "demo":
        return

    service = build_service(settings.data_path)
    if service.store.load():
        ctx.call_on_close(service.store.save)
    else:
        logger.warning("Final save disabled: %s could not be loaded", settings.data_path)


def short_id(task_id, n: int = 8) -> str:
    """Returns the first characters of the UUID for display."""
    return str(task_id)[:n]


def color_status(task: Task, today: date) -> str:
    """Returns the task state as Rich markup."""
    if task.completed:
        return f"{TaskColor.GREEN}Done{TaskColor.RESET}"
    if task.is_overdue(today):
        return f"{TaskColor.RED}Overdue{TaskColor.RESET}"
    if task.is_due_on(today):
        return f"{TaskColor.YELLOW}Today{TaskColor.RESET}"
    return "Open"


def to_date(value: Optional[datetime]) -> Optional[date]:
    return value.date() if value is not None else None


def render_list(items: list[Task], today: date, caption: str = "") -> None:
    """Renders a Rich table with columns: ID, Title, Due, Status."""

    table = Table(show_lines=True, header_style="bold", caption=caption or None)
    table.add_column("ID", no_wrap=True, style="cyan")
    table.add_column("Title")
    table.add_column("Due", no_wrap=True, style="dim")
    table.add_column("Status", no_wrap=True)

    for t in items:
        table.add_row(
            short_id(t.task_id),
            t.title,
            t.due_date.isoformat() if t.due_date else "-",
            color_status(t, today),
        )

    console.print(table)
    console.print(f"[dim]Total: {len(items)}[/dim]")


def print_error(e: DomainError, hint: str = "") -> None:
    if isinstance(e, TaskNotFoundError):
        title = "Not found"
        hint = hint or "Use 'todolist list' to find the right ID"
    elif isinstance(e, TaskValidationError):
        title = "Validation error"
    elif isinstance(e, DuplicateTitleError):
        title = "Duplicate title"
    else:
        title = "Domain error"
    console.print(Panel.fit(
        f"❌ {e}" + (f"\n[dim]{hint}[/]" if hint else ""),
        title=title,
        border_style="red",
    ))


def print_task(task: Task, title: str, border_style: str = "green") -> None:
    today = service.store.clock.today()
    lines = [
        f"[cyan]ID:[/cyan] {task.task_id}",
        f"[dim]Title:[/dim] {task.title}",
        f"[dim]Description:[/dim] {task.description or '[dim]none[/]'}",
        f"[dim]Due:[/dim] {task.due_date.isoformat() if task.due_date else '[dim]none[/]'}",
        f"Status: {color_status(task, today)}",
    ]
    console.print(Panel.fit("\n".join(lines), title=title, border_style=border_style))


@app.command("add")
def add(
    title: str,
    desc: Optional[str] = Option(None, "--desc", "-d"),
    due: Optional[datetime] = Option(None, "--due", formats=DATE_FORMATS, help="Due date, YYYY-MM-DD"),
) -> None:
    """
    Adds a new task.

    Flow:
    - service.create_task(title, description=desc, due_date=due)
    - Success: panel with the short ID.
    - Blank or duplicate title: red panel.
    """
    try:
        task = service.create_task(title=title, description=desc, due_date=to_date(due))
        console.print(Panel.fit(
            f"✅ Task added\n"
            f"[cyan]ID:[/cyan] {short_id(task.task_id)}\n"
            f"[dim]Title:[/dim] {task.title}"
            + (f"\n[dim]Due:[/dim] {task.due_date.isoformat()}" if task.due_date else ""),
            title="Success",
            border_style="green",
        ))
    except TaskValidationError as e:
        print_error(e, "Example: todolist add 'Title' -d 'Description' --due 2025-01-31")
    except DomainError as e:
        print_error(e)


@app.command("list")
def list_cmd(
    search: Optional[str] = Option(None, "--search", "-s", help="Case-insensitive text in the title"),
    task_filter: TaskFilter = Option(TaskFilter.ALL, "--filter", "-F", case_sensitive=False),
) -> None:
    """
    Lists tasks in insertion order, optionally searched and filtered.
    """
    items = service.list_tasks(search, task_filter)
    caption = f"filter: {task_filter}" + (f", search: {search}" if search else "")
    render_list(items, service.store.clock.today(), caption)


@app.command("show")
def show(task_id: str) -> None:
    """Shows the details of one task (full or short ID)."""
    try:
        print_task(service.find_task(task_id), "Task details", border_style="cyan")
    except DomainError as e:
        print_error(e)


@app.command("toggle")
def toggle(task_id: str) -> None:
    """
    Marks a task completed, or reopens it if it already is.
    """
    try:
        task = service.toggle_task(service.find_task(task_id).task_id)
        print_task(task, "Completed" if task.completed else "Reopened")
    except DomainError as e:
        print_error(e)


@app.command("edit")
def edit(
    task_id: str,
    title: Optional[str] = Option(None, "--title", "-t"),
    desc: Optional[str] = Option(None, "--desc", "-d"),
    due: Optional[datetime] = Option(None, "--due", formats=DATE_FORMATS, help="Due date, YYYY-MM-DD"),
    no_due: bool = Option(False, "--no-due", help="Remove the due date"),
) -> None:
    """Edits the title, description or due date of a task."""
    try:
        current = service.find_task(task_id)
        task = service.edit_task(current.task_id, title=title, description=desc, due_date=to_date(due), clear_due=no_due)
        print_task(task, "Updated")
    except DomainError as e:
        print_error(e)


@app.command("rm")
def rm(task_id: str) -> None:
    """
    Removes a task.
    """
    try:
        task = service.find_task(task_id)
        service.remove_task(task.task_id)
        console.print(Panel.fit(
            f"🟡 Task removed\nID: {short_id(task.task_id)}\n[dim]{task.title}[/]",
            title="Removed",
            border_style="yellow",
        ))
    except DomainError as e:
        print_error(e)


class ListRenderer:
    """Observer that re-renders the current view whenever the store changes."""

    def __init__(self, svc: TaskService) -> None:
        self.service = svc
        self.text: Optional[str] = None
        self.task_filter = TaskFilter.ALL
        self.renders = 0

    def on_tasks_changed(self) -> None:
        self.render()

    def render(self) -> None:
        self.renders += 1
        items = self.service.list_tasks(self.text, self.task_filter)
        render_list(items, self.service.store.clock.today(), f"filter: {self.task_filter}")


INTERACTIVE_HELP = (
    "add TITLE [YYYY-MM-DD] | toggle ID | rm ID | edit ID NEW_TITLE | "
    "search [TEXT] | filter all|today|overdue|completed | save | quit"
)


def run_interactive_command(svc: TaskService, view: ListRenderer, line: str) -> bool:
    """Runs one interactive command; returns False when the session should end."""
    parts = shlex.split(line)
    if not parts:
        return True
    cmd, args = parts[0].lower(), parts[1:]
    try:
        if cmd in {"quit", "exit", "q"}:
            return False
        if cmd == "add" and args:
            due = None
            if len(args) > 1:
                try:
                    due = date.fromisoformat(args[-1])
                    args = args[:-1]
                except ValueError:
                    due = None
            svc.create_task(" ".join(args), due_date=due)
        elif cmd == "toggle" and args:
            svc.toggle_task(svc.find_task(args[0]).task_id)
        elif cmd == "rm" and args:
            svc.remove_task(svc.find_task(args[0]).task_id)
        elif cmd == "edit" and len(args) > 1:
            svc.edit_task(svc.find_task(args[0]).task_id, title=" ".join(args[1:]))
        elif cmd == "search":
            view.text = " ".join(args) or None
            view.render()
        elif cmd == "filter" and args:
            view.task_filter = TaskFilter(args[0].lower())
            view.render()
        elif cmd == "save":
            ok = svc.store.save()
            console.print("[green]Saved[/]" if ok else "[red]Save failed, see log[/]")
        else:
            console.print(f"[dim]{INTERACTIVE_HELP}[/]")
    except DomainError as e:
        print_error(e)
    except ValueError:
        console.print(f"[dim]{INTERACTIVE_HELP}[/]")
    return True


@app.command("interactive")
def interactive() -> None:
    """
    Interactive session: the list re-renders on every change and the store is
    auto-saved in the background; one last save runs on exit.
    """
    view = ListRenderer(service)
    service.store.subscribe(view)
    saver = AutoSaver(service.store, interval=settings.autosave_interval, initial_delay=settings.autosave_delay)
    console.print(Panel.fit(INTERACTIVE_HELP, title="todolist", border_style="cyan"))
    view.render()
    with saver:
        while True:
            try:
                line = Prompt.ask("[bold]>[/]", console=console, default="", show_default=False)
            except (EOFError, KeyboardInterrupt):
                break
            if not run_interactive_command(service, view, line):
                break
    service.store.unsubscribe(view)


@app.command("demo")
def demo() -> None:
    """
    Demonstration run on an in-memory store (the task file is not touched).

    - Creates 4 tasks.
    - Toggles one, removes another.
    - Shows the TODAY / OVERDUE / search views.
    """
    store = TaskStore(InMemoryTaskStorage())
    svc = TaskService(store)
    today = store.clock.today()

    console.print(Panel.fit("🚀 Demo start", border_style="cyan"))

    # 1️⃣ Create tasks
    svc.create_task("Buy milk", description="2% lactose-free")
    pay_rent = svc.create_task("Pay rent", due_date=today)
    call_mom = svc.create_task("Call mom", due_date=today - timedelta(days=1))
    read_book = svc.create_task("Read a book", description="DDD chapter 3")
    console.print("\n📋 After creating:")
    render_list(svc.list_tasks(), today)

    # 2️⃣ Duplicate title is rejected
    try:
        svc.create_task("  buy MILK ")
    except DuplicateTitleError as e:
        console.print(Panel.fit(f"❌ {e}", border_style="red"))

    # 3️⃣ Toggle and remove
    svc.toggle_task(call_mom.task_id)
    svc.remove_task(read_book.task_id)
    console.print(Panel.fit(f"✔️ Completed: {call_mom.title}\n🗑️ Removed: {read_book.title}", border_style="yellow"))

    # 4️⃣ Views
    console.print("\n📋 Today:")
    render_list(svc.list_tasks(task_filter=TaskFilter.TODAY), today)
    console.print("\n📋 Overdue:")
    render_list(svc.list_tasks(task_filter=TaskFilter.OVERDUE), today)
    console.print("\n📋 Search 'pay':")
    render_list(svc.list_tasks("pay"), today)
    console.print(f"[dim]{pay_rent.title} is due {pay_rent.due_date.isoformat()}[/]")

    console.print(Panel.fit("🏁 Demo finished", border_style="cyan"))


if __name__ == "__main__":
    app()
