"""Command-line front end for the taskboard API."""
import argparse
import sys
from typing import List, Optional

from app.config import settings
from app.logger import setup_logging
from client.api_client import ApiError, TaskboardClient
from client.board import STATUS_COLUMNS, KanbanBoard
from client.state import ClientStore
from client.views import format_task_detail, render_board, render_list


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="taskboard", description="Taskboard client")
    parser.add_argument("--base-url", default=settings.api_base_url)
    parser.add_argument("--state", default=settings.client_state_path, help="client state file")
    sub = parser.add_subparsers(dest="command", required=True)

    login = sub.add_parser("login", help="log in and remember the session")
    login.add_argument("email")
    login.add_argument("password")

    sub.add_parser("logout", help="forget the session")
    sub.add_parser("whoami", help="show the logged-in user")

    tasks = sub.add_parser("tasks", help="list view")
    tasks.add_argument("--status", choices=STATUS_COLUMNS)
    tasks.add_argument("--detail", action="store_true")

    sub.add_parser("board", help="kanban view")

    create = sub.add_parser("create", help="create a task")
    create.add_argument("title")
    create.add_argument("--description")
    create.add_argument("--status", choices=STATUS_COLUMNS)
    create.add_argument("--priority", choices=["low", "medium", "high"])
    create.add_argument("--due", dest="due_date", help="ISO date or datetime")
    create.add_argument("--assign", dest="assigned_to", type=int, help="user id (admins only)")
    create.add_argument("--point", dest="points", action="append", default=[])

    move = sub.add_parser("move", help="move a task to another column")
    move.add_argument("task_id", type=int)
    move.add_argument("column", help="status or custom section id")

    for name in ("tick", "untick"):
        cmd = sub.add_parser(name, help=f"{name} a checklist point")
        cmd.add_argument("task_id", type=int)
        cmd.add_argument("index", type=int)

    add_section = sub.add_parser("section-add", help="add a local kanban section")
    add_section.add_argument("name")
    add_section.add_argument("--color", default="emerald")

    remove_section = sub.add_parser("section-remove", help="remove a local kanban section")
    remove_section.add_argument("section_id")

    return parser


def run(args: argparse.Namespace, client: TaskboardClient, store: ClientStore) -> int:
    state = store.state
    if args.command not in ("login", "logout", "section-add", "section-remove") and not state.is_logged_in:
        print("Not logged in. Run `login` first.", file=sys.stderr)
        return 1

    if args.command == "login":
        user = client.login(args.email, args.password)
        print(f"Logged in as {user['username']}{' (admin)' if user.get('isAdmin') else ''}")
    elif args.command == "logout":
        client.logout()
        print("Logged out")
    elif args.command == "whoami":
        profile = client.get_profile()
        print(f"{profile['username']} <{profile['email']}> phone: {profile.get('phoneNumber') or '-'}")
    elif args.command == "tasks":
        tasks = client.list_tasks_by_status(args.status) if args.status else client.list_tasks()
        if args.detail:
            print("\n\n".join(format_task_detail(t, state.user_id) for t in tasks) or "No tasks.")
        else:
            print(render_list(tasks, state.user_id))
    elif args.command == "board":
        board = KanbanBoard(client, store)
        if not board.refresh():
            print(board.error, file=sys.stderr)
            return 1
        print(render_board(board.columns, board.titles(), state.user_id))
    elif args.command == "create":
        task = client.create_task(
            args.title,
            description=args.description,
            status=args.status,
            priority=args.priority,
            dueDate=args.due_date,
            assignedTo=args.assigned_to,
            points=args.points,
        )
        print(format_task_detail(task, state.user_id))
    elif args.command == "move":
        # one-shot process: report a failed move instead of reconciling
        board = KanbanBoard(client, store, scheduler=lambda delay, fn: None)
        if not board.refresh():
            print(board.error, file=sys.stderr)
            return 1
        location = board.find(args.task_id)
        if location is None:
            print(f"Task {args.task_id} is not on your board", file=sys.stderr)
            return 1
        if not board.move(location[0], location[1], args.column, 0):
            print("You cannot move this task there", file=sys.stderr)
            return 1
        if board.error:
            print(board.error, file=sys.stderr)
            return 1
        print(f"Moved #{args.task_id} to {board.titles().get(args.column, args.column)}")
    elif args.command in ("tick", "untick"):
        action = client.tick_point if args.command == "tick" else client.untick_point
        print(format_task_detail(action(args.task_id, args.index), state.user_id))
    elif args.command == "section-add":
        section = store.add_section(args.name, color=args.color)
        print(f"Added section {section['name']} ({section['id']})")
    elif args.command == "section-remove":
        if not store.remove_section(args.section_id):
            print(f"No section {args.section_id}", file=sys.stderr)
            return 1
        print(f"Removed section {args.section_id}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    setup_logging(settings.log_level)
    args = build_parser().parse_args(argv)

    store = ClientStore(args.state)
    store.load()
    client = TaskboardClient(store, base_url=args.base_url)

    try:
        return run(args, client, store)
    except ApiError as e:
        print(e.msg, file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
