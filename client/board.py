"""
Kanban board view-model.

Columns are the six status columns in board order followed by the custom
sections from the client store. Moves between status columns are applied
locally first and then persisted; if the server refuses, the board keeps an
error message and schedules a full refetch to reconcile.
"""
import threading
from typing import Callable, Dict, List, Optional

from app.config import settings
from app.logger import get_logger
from app.models import TaskStatus
from client.api_client import ApiError, TaskboardClient
from client.state import ClientStore
from client.views import STATUS_TITLES

logger = get_logger(__name__)

STATUS_COLUMNS = [status.value for status in TaskStatus]

# Returns a handle with cancel(), or None when the callback cannot be cancelled
Scheduler = Callable[[float, Callable[[], None]], Optional[object]]


def _timer_scheduler(delay: float, callback: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


class KanbanBoard:
    def __init__(
        self,
        client: TaskboardClient,
        store: ClientStore,
        reconcile_delay: Optional[float] = None,
        scheduler: Optional[Scheduler] = None,
    ):
        self.client = client
        self.store = store
        if reconcile_delay is None:
            reconcile_delay = settings.reconcile_delay_seconds
        self.reconcile_delay = reconcile_delay
        self.scheduler = scheduler or _timer_scheduler
        self.columns: Dict[str, List[Dict]] = {column_id: [] for column_id in self.column_ids()}
        self.error: Optional[str] = None
        # guards columns/error against the reconcile callback's thread
        self._lock = threading.RLock()
        self._pending = None

    def column_ids(self) -> List[str]:
        return STATUS_COLUMNS + [s["id"] for s in self.store.state.custom_sections]

    def titles(self) -> Dict[str, str]:
        titles = dict(STATUS_TITLES)
        titles.update({s["id"]: s["name"] for s in self.store.state.custom_sections})
        return titles

    def refresh(self) -> bool:
        """Refetch every status column. Custom sections come back empty."""
        try:
            columns = {status: self.client.list_tasks_by_status(status) for status in STATUS_COLUMNS}
        except ApiError as e:
            logger.error(f"Error fetching tasks: {e}")
            with self._lock:
                self.error = "Failed to load tasks. Please check your connection and try again."
            return False

        for section in self.store.state.custom_sections:
            columns[section["id"]] = []
        with self._lock:
            self.columns = columns
            self.error = None
        return True

    def _schedule_reconcile(self) -> None:
        self.cancel_pending()
        self._pending = self.scheduler(self.reconcile_delay, self.refresh)

    def cancel_pending(self) -> None:
        """Drop a scheduled reconcile that has not run yet."""
        pending, self._pending = self._pending, None
        if pending is not None and hasattr(pending, "cancel"):
            pending.cancel()

    def can_move(self, task: Dict) -> bool:
        state = self.store.state
        if state.is_admin:
            return True
        creator = task.get("createdBy") or {}
        assignee = task.get("assignedTo") or {}
        return state.user_id is not None and state.user_id in (creator.get("id"), assignee.get("id"))

    def move(self, source: str, source_index: int, destination: Optional[str], destination_index: int) -> bool:
        """
        Apply a drag from `source`[`source_index`] to `destination` at
        `destination_index`. Returns False when the drag is ignored.
        """
        with self._lock:
            return self._move(source, source_index, destination, destination_index)

    def _move(self, source, source_index, destination, destination_index) -> bool:
        if destination is None or destination not in self.columns:
            return False
        try:
            task = self.columns[source][source_index]
        except (KeyError, IndexError):
            return False
        if not self.can_move(task):
            return False

        if source == destination:
            column = list(self.columns[source])
            column.insert(destination_index, column.pop(source_index))
            self.columns[source] = column
            return True

        source_column = list(self.columns[source])
        dest_column = list(self.columns[destination])
        moved = source_column.pop(source_index)
        dest_column.insert(destination_index, moved)
        self.columns[source] = source_column
        self.columns[destination] = dest_column

        if destination not in STATUS_COLUMNS:
            # custom sections only exist on this client
            return True

        try:
            updated = self.client.move_task(moved["id"], destination)
        except ApiError as e:
            logger.error(f"Error updating task status: {e}")
            self.error = "Failed to update task status. Changes will be reverted."
            self._schedule_reconcile()
            return True

        self.columns[destination] = [updated if t["id"] == updated["id"] else t for t in dest_column]
        return True

    def add_section(self, name: str, color: str = "emerald", icon: str = "Target") -> Dict:
        section = self.store.add_section(name, color=color, icon=icon)
        self.columns[section["id"]] = []
        return section

    def remove_section(self, section_id: str) -> bool:
        removed = self.store.remove_section(section_id)
        if removed:
            self.columns.pop(section_id, None)
        return removed

    def find(self, task_id: int) -> Optional[tuple]:
        """(column id, index) of a task on the board."""
        for column_id, tasks in self.columns.items():
            for index, task in enumerate(tasks):
                if task["id"] == task_id:
                    return column_id, index
        return None
