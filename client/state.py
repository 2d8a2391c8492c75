"""
Client-side state: the session (token and current user) and the custom kanban
sections, persisted to a JSON file through explicit load/save calls.
"""
import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from app.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ClientState:
    token: Optional[str] = None
    user: Optional[Dict] = None
    custom_sections: List[Dict] = field(default_factory=list)

    @property
    def is_logged_in(self) -> bool:
        return bool(self.token and self.user)

    @property
    def is_admin(self) -> bool:
        return bool(self.user and self.user.get("isAdmin"))

    @property
    def user_id(self) -> Optional[int]:
        return self.user.get("id") if self.user else None


class ClientStore:
    """
    Owns a `ClientState` and its file. Nothing is written until `save()`.
    """

    def __init__(self, path):
        self.path = Path(path).expanduser()
        self.state = ClientState()

    def load(self) -> ClientState:
        if not self.path.exists():
            self.state = ClientState()
            return self.state

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable client state at {self.path}: {e}")
            raw = {}
        if not isinstance(raw, dict):
            logger.warning(f"Ignoring client state at {self.path}: expected an object")
            raw = {}

        self.state = ClientState(
            token=raw.get("token"),
            user=raw.get("user"),
            custom_sections=list(raw.get("customSections") or []),
        )
        return self.state

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "token": self.state.token,
            "user": self.state.user,
            "customSections": self.state.custom_sections,
        }
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def set_session(self, token: str, user: Dict) -> None:
        self.state.token = token
        self.state.user = user
        self.save()

    def update_user(self, user: Dict) -> None:
        self.state.user = user
        self.save()

    def clear_session(self) -> None:
        """Log out; custom sections survive."""
        self.state.token = None
        self.state.user = None
        self.save()

    def add_section(self, name: str, color: str = "emerald", icon: str = "Target") -> Dict:
        name = name.strip()
        if not name:
            raise ValueError("Section name is required")
        section = {
            "id": f"custom-{int(time.time() * 1000)}",
            "name": name,
            "color": color,
            "icon": icon,
        }
        # ids are millisecond stamps; bump on collision
        while any(s["id"] == section["id"] for s in self.state.custom_sections):
            section["id"] = f"custom-{int(section['id'].split('-', 1)[1]) + 1}"
        self.state.custom_sections.append(section)
        self.save()
        return section

    def remove_section(self, section_id: str) -> bool:
        before = len(self.state.custom_sections)
        self.state.custom_sections = [s for s in self.state.custom_sections if s["id"] != section_id]
        removed = len(self.state.custom_sections) != before
        if removed:
            self.save()
        return removed
