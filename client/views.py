"""
Plain-text list and kanban views.
"""
from typing import Dict, Iterable, List, Optional

from app.models import TaskStatus

STATUS_TITLES = {
    TaskStatus.TODAY.value: "Today",
    TaskStatus.THIS_WEEK.value: "This Week",
    TaskStatus.THIS_MONTH.value: "This Month",
    TaskStatus.LATER.value: "Later",
    TaskStatus.DONE.value: "Done",
    TaskStatus.CANCELED.value: "Canceled",
}


def assignee_label(task: Dict) -> str:
    assignee = task.get("assignedTo")
    return assignee["username"] if assignee else "Unassigned"


def points_ticked_by(task: Dict, user_id: Optional[int]) -> int:
    return sum(
        1 for point in task.get("points", [])
        if any(ref["id"] == user_id for ref in point.get("completedBy", []))
    )


def format_task_line(task: Dict, user_id: Optional[int] = None) -> str:
    total = len(task.get("points", []))
    line = (
        f"#{task['id']:<4} {task['title']}  "
        f"[{task['priority']}] {task['progress']:>3}%  -> {assignee_label(task)}"
    )
    if total:
        line += f"  (mine {points_ticked_by(task, user_id)}/{total})"
    return line


def format_task_detail(task: Dict, user_id: Optional[int] = None) -> str:
    creator = task.get("createdBy")
    lines = [
        format_task_line(task, user_id),
        f"      status: {task['status']}   created by: {creator['username'] if creator else 'Unknown'}",
    ]
    if task.get("description"):
        lines.append(f"      {task['description']}")
    if task.get("dueDate"):
        lines.append(f"      due: {task['dueDate']}")
    for index, point in enumerate(task.get("points", [])):
        mark = "x" if point.get("completedBy") else " "
        who = ", ".join(ref["username"] for ref in point.get("completedBy", []))
        lines.append(f"      {index}. [{mark}] {point['text']}" + (f"  ({who})" if who else ""))
    for record in task.get("files", []):
        lines.append(f"      file: {record.get('originalName') or record['filename']} -> {record['path']}")
    return "\n".join(lines)


def render_list(tasks: Iterable[Dict], user_id: Optional[int] = None) -> str:
    tasks = list(tasks)
    if not tasks:
        return "No tasks."
    return "\n".join(format_task_line(task, user_id) for task in tasks)


def render_board(columns: Dict[str, List[Dict]], titles: Dict[str, str], user_id: Optional[int] = None) -> str:
    blocks = []
    for column_id, tasks in columns.items():
        header = f"== {titles.get(column_id, column_id)} ({len(tasks)})"
        body = [f"  {format_task_line(task, user_id)}" for task in tasks] or ["  -"]
        blocks.append("\n".join([header] + body))
    return "\n\n".join(blocks)
