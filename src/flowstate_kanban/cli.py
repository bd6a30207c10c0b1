from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .board.engine import BoardEngine
from .board.filters import FilterCriteria
from .board.model import Priority, Stage
from .board.mutations import Direction, TaskDraft
from .board.views import BoardView
from .config import get_logging_config, load_board_config
from .constants import FILTER_ALL
from .logging_setup import configure_logging

_PRIORITY_STYLE = {
    Priority.HIGH: "red",
    Priority.MEDIUM: "yellow",
    Priority.LOW: "green",
}


def _resolve_project_dir(project_dir: Optional[str]) -> Path:
    return Path(project_dir).expanduser().resolve() if project_dir else Path.cwd().resolve()


def _engine(args: argparse.Namespace) -> BoardEngine:
    return BoardEngine.open(_resolve_project_dir(args.project_dir))


def _emit(payload: dict[str, Any]) -> None:
    sys.stdout.write(json.dumps(payload, indent=2) + '\n')


def _not_found(task_id: str) -> int:
    sys.stderr.write(f"Task {task_id} not found\n")
    return 1


def render_board(view: BoardView, console: Optional[Console] = None) -> None:
    """Print the board as one table column per stage."""
    console = console or Console()
    table = Table(title=f"Flowstate board ({view.visible} of {view.total} tasks)", show_header=True)
    for stat in view.stats:
        suffix = "done" if stat.stage is Stage.DONE else f"{stat.display_value}%"
        table.add_column(f"{stat.stage.column_title} ({stat.count}, {suffix})", style="bold")

    columns = [view.columns[stage] for stage in Stage.ordered()]
    depth = max((len(col) for col in columns), default=0)
    for row in range(depth):
        cells: list[str] = []
        for col in columns:
            if row >= len(col):
                cells.append("")
                continue
            task = col[row]
            style = _PRIORITY_STYLE[task.priority]
            lines = [f"[{style}]{task.priority.label}[/{style}] {escape(task.title)}", f"[dim]{task.id}[/dim]"]
            if task.assignee:
                lines.append(escape(f"@{task.assignee}"))
            if task.tags:
                lines.append(escape(" ".join(f"#{tag}" for tag in task.tags)))
            if task.due_date is not None:
                lines.append(f"Due {task.due_date.strftime('%b %d')}")
            cells.append("\n".join(lines))
        table.add_row(*cells)
    console.print(table)


def _board(args: argparse.Namespace) -> int:
    engine = _engine(args)
    criteria = FilterCriteria(
        search=args.search,
        priority=args.priority,
        tag=args.tag,
        assignee=args.assignee,
    )
    view = engine.view(criteria)
    if args.json:
        _emit(view.to_dict())
    else:
        render_board(view)
    return 0


def _task_create(args: argparse.Namespace) -> int:
    engine = _engine(args)
    draft = TaskDraft(
        title=args.title,
        description=args.description,
        priority=args.priority,
        assignee=args.assignee,
        stage=args.stage,
        tags=args.tags,
        due_date=args.due or "",
    )
    task = engine.create_task(draft)
    if task is None:
        sys.stderr.write("; ".join(draft.validate()) + '\n')
        return 1
    _emit({'task': task.to_dict()})
    return 0


def _task_edit(args: argparse.Namespace) -> int:
    engine = _engine(args)
    changes: dict[str, Any] = {}
    for key in ("title", "description", "priority", "assignee", "tags"):
        value = getattr(args, key)
        if value is not None:
            changes[key] = value
    if args.clear_due:
        changes["due_date"] = None
    elif args.due is not None:
        changes["due_date"] = args.due
    task = engine.edit_task(args.task_id, changes)
    if task is None:
        return _not_found(args.task_id)
    _emit({'task': task.to_dict()})
    return 0


def _task_move(args: argparse.Namespace) -> int:
    task = _engine(args).move_task(args.task_id, Stage(args.stage))
    if task is None:
        return _not_found(args.task_id)
    _emit({'task': task.to_dict()})
    return 0


def _task_step(args: argparse.Namespace) -> int:
    task = _engine(args).step_task(args.task_id, Direction(args.direction))
    if task is None:
        return _not_found(args.task_id)
    _emit({'task': task.to_dict()})
    return 0


def _task_cycle(args: argparse.Namespace) -> int:
    task = _engine(args).cycle_priority(args.task_id)
    if task is None:
        return _not_found(args.task_id)
    _emit({'task': task.to_dict()})
    return 0


def _task_duplicate(args: argparse.Namespace) -> int:
    task = _engine(args).duplicate_task(args.task_id)
    if task is None:
        return _not_found(args.task_id)
    _emit({'task': task.to_dict()})
    return 0


def _task_delete(args: argparse.Namespace) -> int:
    if not _engine(args).delete_task(args.task_id):
        return _not_found(args.task_id)
    _emit({'deleted': True, 'task_id': args.task_id})
    return 0


def _reset(args: argparse.Namespace) -> int:
    tasks = _engine(args).reset_board()
    _emit({'reset': True, 'tasks': len(tasks)})
    return 0


def _events(args: argparse.Namespace) -> int:
    _emit({'events': _engine(args).recent_events(args.limit)})
    return 0


def _server(args: argparse.Namespace) -> int:
    try:
        import uvicorn
    except ImportError:
        sys.stderr.write("Install server extras: pip install 'flowstate-kanban[server]'\n")
        return 1

    from .server import create_app

    app = create_app(project_dir=_resolve_project_dir(args.project_dir))
    uvicorn.run(app, host=args.host, port=args.port, reload=args.reload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    stages = [s.value for s in Stage.ordered()]
    priorities = [p.value for p in Priority]

    parser = argparse.ArgumentParser(description='Flowstate Kanban board')
    parser.add_argument('--project-dir', default=None, help='Directory holding .flowstate/ (default: current working directory)')
    parser.add_argument('--log-level', default=None, help='Log level (default: from config, else INFO)')
    subparsers = parser.add_subparsers(dest='command', required=True)

    server = subparsers.add_parser('server', help='Start the web server')
    server.add_argument('--host', default='127.0.0.1')
    server.add_argument('--port', default=8000, type=int)
    server.add_argument('--reload', action='store_true')
    server.set_defaults(func=_server)

    board = subparsers.add_parser('board', help='Show the board')
    board.add_argument('--search', default='')
    board.add_argument('--priority', default=FILTER_ALL)
    board.add_argument('--tag', default=FILTER_ALL)
    board.add_argument('--assignee', default=FILTER_ALL)
    board.add_argument('--json', action='store_true', help='Print the board view as JSON')
    board.set_defaults(func=_board)

    task = subparsers.add_parser('task', help='Manage tasks')
    task_sub = task.add_subparsers(dest='task_cmd', required=True)
    tcreate = task_sub.add_parser('create', help='Create a task')
    tcreate.add_argument('title')
    tcreate.add_argument('--description', default='')
    tcreate.add_argument('--priority', default=Priority.MEDIUM.value, choices=priorities)
    tcreate.add_argument('--assignee', default='')
    tcreate.add_argument('--stage', default=Stage.BACKLOG.value, choices=stages)
    tcreate.add_argument('--tags', default='', help='Comma-separated tags')
    tcreate.add_argument('--due', default=None, help='Due date (YYYY-MM-DD)')
    tcreate.set_defaults(func=_task_create)
    tedit = task_sub.add_parser('edit', help='Edit a task')
    tedit.add_argument('task_id')
    tedit.add_argument('--title', default=None)
    tedit.add_argument('--description', default=None)
    tedit.add_argument('--priority', default=None, choices=priorities)
    tedit.add_argument('--assignee', default=None)
    tedit.add_argument('--tags', default=None, help='Comma-separated tags')
    tedit.add_argument('--due', default=None, help='Due date (YYYY-MM-DD)')
    tedit.add_argument('--clear-due', action='store_true')
    tedit.set_defaults(func=_task_edit)
    tmove = task_sub.add_parser('move', help='Move a task to a stage')
    tmove.add_argument('task_id')
    tmove.add_argument('stage', choices=stages)
    tmove.set_defaults(func=_task_move)
    tstep = task_sub.add_parser('step', help='Move a task one stage forward or backward')
    tstep.add_argument('task_id')
    tstep.add_argument('direction', choices=[d.value for d in Direction])
    tstep.set_defaults(func=_task_step)
    tcycle = task_sub.add_parser('cycle', help='Cycle task priority low -> medium -> high')
    tcycle.add_argument('task_id')
    tcycle.set_defaults(func=_task_cycle)
    tdup = task_sub.add_parser('duplicate', help='Duplicate a task')
    tdup.add_argument('task_id')
    tdup.set_defaults(func=_task_duplicate)
    tdel = task_sub.add_parser('delete', help='Delete a task permanently')
    tdel.add_argument('task_id')
    tdel.set_defaults(func=_task_delete)

    reset = subparsers.add_parser('reset', help='Restore the demo board and clear saved state')
    reset.set_defaults(func=_reset)

    events = subparsers.add_parser('events', help='Show recent board activity')
    events.add_argument('--limit', default=50, type=int)
    events.set_defaults(func=_events)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    level = args.log_level
    if level is None:
        config, _ = load_board_config(_resolve_project_dir(args.project_dir))
        level = get_logging_config(config)["level"]
    configure_logging(level)
    handler = getattr(args, 'func', None)
    if handler is None:
        parser.print_help()
        return 1
    return int(handler(args) or 0)


if __name__ == '__main__':
    raise SystemExit(main())
