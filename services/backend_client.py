"""
Клиент backend API КӨПҮРӨ
Авторизация, обращения граждан, администрирование и статистика
"""
import requests
from typing import Any, Dict, List, Optional
from config import Config
from services.errors import BackendError, NETWORK_ERROR, format_error_detail


class BackendClient:
    """Тонкая обёртка над REST API backend"""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = (base_url or Config.BACKEND_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else Config.BACKEND_TIMEOUT

    def _request(self, method: str, path: str, token: Optional[str] = None, **kwargs) -> Any:
        """
        Запрос к backend

        Токен передаётся явно в каждый вызов, общего заголовка нет.

        Raises:
            BackendError: ответ не 2xx или сетевая ошибка
        """
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = requests.request(
                method,
                f"{self.base_url}{path}",
                headers=headers,
                timeout=self.timeout,
                **kwargs
            )
        except requests.RequestException as e:
            print(f"BackendClient Error: {method} {path}: {e}")
            raise BackendError(NETWORK_ERROR) from e

        if not response.ok:
            raise self._error_from_response(response)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            print(f"BackendClient Error: {method} {path}: invalid JSON")
            raise BackendError(NETWORK_ERROR, response.status_code) from e

    @staticmethod
    def _error_from_response(response: requests.Response) -> BackendError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        detail = body.get("detail")
        message = format_error_detail(detail)
        if not message and isinstance(body.get("message"), str):
            message = body["message"]
        if not message:
            message = f"Ошибка сервера: {response.reason or response.status_code}"

        print(f"BackendClient Error: {response.status_code} - {str(detail)[:200]}")
        return BackendError(message, response.status_code, detail)

    # ==================== AUTH ====================

    def login_for_token(self, email: str, password: str) -> str:
        """Обмен email/пароля на access token (form-encoded)"""
        data = self._request(
            "POST",
            "/auth/token",
            data={"username": email, "password": password}
        )
        return data["access_token"]

    def register(self, email: str, password: str, full_name: Optional[str] = None) -> Dict:
        payload = {"email": email, "password": password}
        if full_name:
            payload["full_name"] = full_name
        return self._request("POST", "/auth/register", json=payload)

    def get_current_user(self, token: str) -> Dict:
        return self._request("GET", "/auth/users/me", token=token)

    # ==================== ADMIN ====================

    def list_users(self, token: str, skip: int = 0, limit: int = 100) -> List[Dict]:
        return self._request("GET", "/admin/users", token=token, params={"skip": skip, "limit": limit})

    def list_unconfirmed_workers(self, token: str, skip: int = 0, limit: int = 100) -> List[Dict]:
        return self._request(
            "GET", "/admin/unconfirmed-workers", token=token, params={"skip": skip, "limit": limit}
        )

    def confirm_worker(self, token: str, user_id: int) -> Dict:
        return self._request("PATCH", f"/admin/confirm-worker/{user_id}", token=token)

    # ==================== ISSUES ====================

    def submit_issue(self, issue: Dict) -> Dict:
        """Подача обращения. Ответ ждёт завершения LLM-анализа на backend."""
        return self._request("POST", "/api/submit-issue/", json=issue)

    def list_issues(self, source_user_id: str, limit: int = 100) -> List[Dict]:
        return self._request(
            "GET", "/api/issues/", params={"source_user_id": source_user_id, "limit": limit}
        )

    def submit_feedback(self, issue_id: int, feedback: str) -> Dict:
        return self._request(
            "POST", f"/api/issue/{issue_id}/feedback", json={"user_feedback_on_resolution": feedback}
        )

    # ==================== STATS ====================

    def get_overall_stats(self, token: str) -> Dict:
        return self._request("GET", "/stats/overall", token=token)

    def get_timeline_stats(self, token: str, group_by_period: str = "day") -> Any:
        return self._request(
            "GET", "/stats/timeline", token=token, params={"group_by_period": group_by_period}
        )

    def get_top_addresses(self, token: str, limit: int = 10) -> Any:
        return self._request(
            "GET", "/stats/top_problematic_addresses", token=token, params={"limit": limit}
        )


# Singleton instance
backend_client = BackendClient()
