"""
HTTP client for the taskboard API.
Adds the bearer token from the client store and turns error responses into
`ApiError` carrying the server's `msg`.
"""
from typing import Any, Dict, List, Optional

import httpx

from app.logger import get_logger
from client.state import ClientStore

logger = get_logger(__name__)


class ApiError(Exception):
    """A failed API call. `status_code` is None when the server was unreachable."""

    def __init__(self, status_code: Optional[int], msg: str):
        self.status_code = status_code
        self.msg = msg
        super().__init__(f"{status_code}: {msg}" if status_code else msg)


class TaskboardClient:
    def __init__(self, store: ClientStore, base_url: str = "", http: Optional[httpx.Client] = None):
        self.store = store
        self.http = http or httpx.Client(base_url=base_url, timeout=30)

    # ── Core request helper ───────────────────────────────────────────────

    def _headers(self) -> Dict[str, str]:
        token = self.store.state.token
        return {"Authorization": f"Bearer {token}"} if token else {}

    def _request(self, method: str, path: str, json: Optional[Dict] = None) -> Any:
        try:
            resp = self.http.request(method, path, json=json, headers=self._headers())
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise ApiError(None, f"Network error: {e}") from e

        if resp.is_error:
            try:
                msg = resp.json().get("msg") or resp.reason_phrase
            except ValueError:
                msg = resp.text or resp.reason_phrase
            raise ApiError(resp.status_code, msg)
        return resp.json()

    # ── Auth and users ────────────────────────────────────────────────────

    def login(self, email: str, password: str) -> Dict:
        """Log in and persist the session. A failed login leaves the store untouched."""
        data = self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.store.set_session(data["token"], data["user"])
        return data["user"]

    def logout(self) -> None:
        self.store.clear_session()

    def get_profile(self) -> Dict:
        return self._request("GET", "/auth/profile")

    def update_profile(
        self,
        phone_number: Optional[str] = None,
        current_password: Optional[str] = None,
        new_password: Optional[str] = None,
    ) -> Dict:
        body = {
            "phoneNumber": phone_number,
            "currentPassword": current_password,
            "newPassword": new_password,
        }
        data = self._request("PUT", "/auth/profile", json={k: v for k, v in body.items() if v is not None})
        self.store.update_user(data["user"])
        return data["user"]

    def list_users(self) -> List[Dict]:
        return self._request("GET", "/auth/users")

    def create_user(self, username: str, email: str, password: str, is_admin: bool = False,
                    phone_number: Optional[str] = None) -> Dict:
        body = {
            "username": username,
            "email": email,
            "password": password,
            "isAdmin": is_admin,
            "phoneNumber": phone_number,
        }
        return self._request("POST", "/auth/create-user", json=body)["user"]

    def delete_user(self, user_id: int) -> str:
        return self._request("DELETE", f"/auth/users/{user_id}")["msg"]

    # ── Tasks ─────────────────────────────────────────────────────────────

    def list_tasks(self) -> List[Dict]:
        return self._request("GET", "/tasks")

    def list_tasks_by_status(self, status: str) -> List[Dict]:
        return self._request("GET", f"/tasks/status/{status}")

    def get_task(self, task_id: int) -> Dict:
        return self._request("GET", f"/tasks/{task_id}")

    def create_task(self, title: str, **fields: Any) -> Dict:
        body = {"title": title, **{k: v for k, v in fields.items() if v is not None}}
        if not self.store.state.is_admin:
            # only admins may hand a task to someone else
            body.pop("assignedTo", None)
        return self._request("POST", "/tasks", json=body)

    def update_task(self, task_id: int, **fields: Any) -> Dict:
        return self._request("PUT", f"/tasks/{task_id}", json=fields)

    def move_task(self, task_id: int, status: str) -> Dict:
        return self._request("PUT", f"/tasks/{task_id}/status", json={"status": status})

    def assign_task(self, task_id: int, user_id: int) -> Dict:
        return self._request("PUT", f"/tasks/{task_id}/assign", json={"assignedTo": user_id})

    def tick_point(self, task_id: int, index: int) -> Dict:
        return self._request("PUT", f"/tasks/{task_id}/points/{index}/tick")

    def untick_point(self, task_id: int, index: int) -> Dict:
        return self._request("PUT", f"/tasks/{task_id}/points/{index}/untick")

    def add_file(self, task_id: int, filename: str, path: str, original_name: Optional[str] = None) -> Dict:
        body = {"filename": filename, "originalName": original_name or filename, "path": path}
        return self._request("POST", f"/tasks/{task_id}/files", json=body)

    def delete_task(self, task_id: int) -> str:
        return self._request("DELETE", f"/tasks/{task_id}")["msg"]

    def admin_dashboard(self) -> Dict:
        return self._request("GET", "/tasks/admin/dashboard")
