"""
Сервис обращений граждан
Подача, отслеживание по контакту и отзыв о решении
"""
from datetime import datetime, timezone
from typing import Dict, List, Optional
from config import Config
from data.statuses import (
    STATUS_TRANSLATIONS, SUBMISSION_STATUS_TRANSLATIONS, SUBMISSION_TYPES,
    SUBMISSION_SOURCE, RESOLUTION_STATUSES
)
from services.errors import InputError
from services.timeline_service import build_timeline, is_deviation, can_leave_feedback


MSG_CONTACT_REQUIRED_SUBMIT = "Пожалуйста, укажите ваш контактный Email или Telegram ID для отслеживания статуса."
MSG_CONTACT_REQUIRED_TRACK = "Пожалуйста, введите ваш контакт (Email или Telegram ID)."
MSG_TEXT_REQUIRED = "Пожалуйста, опишите вашу проблему или предложение."
MSG_FEEDBACK_REQUIRED = "Отзыв не может быть пустым."
MSG_NOT_FOUND = "Для указанного контакта обращений не найдено. Проверьте правильность ввода или попробуйте позже."
MSG_SUBMITTED = "Ваше обращение успешно получено и принято в обработку."


def _parse_timestamp(value: Optional[str]) -> datetime:
    """ISO-дата от backend; без зоны считаем UTC"""
    if not value:
        return datetime.min.replace(tzinfo=timezone.utc)
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return datetime.min.replace(tzinfo=timezone.utc)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class IssueService:
    """Операции с обращениями для публичных страниц"""

    def __init__(self, client):
        self.client = client

    def submit(self, text: str, submission_type: str, source_user_id: str,
               source_username: str = "", user_first_name: str = "") -> Dict:
        """
        Подать обращение

        Returns:
            {"message", "id", "initial_status"}
        """
        contact = (source_user_id or "").strip()
        if not contact:
            raise InputError(MSG_CONTACT_REQUIRED_SUBMIT)
        if not (text or "").strip():
            raise InputError(MSG_TEXT_REQUIRED)
        if submission_type not in SUBMISSION_TYPES:
            submission_type = "жалоба"

        issue = {
            "text": text,
            "submission_type_by_user": submission_type,
            "source": SUBMISSION_SOURCE,
            "source_user_id": contact,
            "source_username": (source_username or "").strip() or None,
            "user_first_name": (user_first_name or "").strip() or None,
        }

        result = self.client.submit_issue(issue)
        status = result.get("status", "")
        print(f"IssueService: submitted issue #{result.get('saved_record_id')} with status {status}")

        return {
            "message": MSG_SUBMITTED,
            "id": result.get("saved_record_id"),
            "initial_status": SUBMISSION_STATUS_TRANSLATIONS.get(status, status),
            "llm_processing_error": result.get("llm_processing_error"),
        }

    def track(self, source_user_id: str, sent_feedback: Optional[Dict] = None) -> List[Dict]:
        """
        Обращения контакта, новые сверху, с разложенным таймлайном

        sent_feedback: результат submit_feedback с "issue_id"; накладывается
        на соответствующее обращение, пока backend не вернул его сам.
        """
        contact = (source_user_id or "").strip()
        if not contact:
            raise InputError(MSG_CONTACT_REQUIRED_TRACK)

        issues = self.client.list_issues(contact, limit=Config.ISSUES_LIMIT) or []
        if sent_feedback:
            issues = [self.apply_feedback(issue, sent_feedback) for issue in issues]
        issues = sorted(issues, key=lambda i: _parse_timestamp(i.get("created_at")), reverse=True)
        return [self.decorate(issue) for issue in issues]

    @staticmethod
    def apply_feedback(issue: Dict, sent_feedback: Dict) -> Dict:
        if issue.get("id") != sent_feedback.get("issue_id") or not can_leave_feedback(issue):
            return issue
        updated = dict(issue)
        updated["status"] = sent_feedback["status"] or issue.get("status", "")
        updated["user_feedback_on_resolution"] = sent_feedback["feedback"]
        return updated

    @staticmethod
    def decorate(issue: Dict) -> Dict:
        """Добавляет к обращению поля для шаблона"""
        status = issue.get("status", "")
        view = dict(issue)
        view["status_label"] = STATUS_TRANSLATIONS.get(status, status)
        view["is_deviation"] = is_deviation(status)
        view["timeline"] = build_timeline(status)
        view["can_leave_feedback"] = can_leave_feedback(issue)
        view["show_resolution"] = bool(issue.get("resolution_details")) and status in RESOLUTION_STATUSES
        view["created"] = _parse_timestamp(issue.get("created_at"))
        return view

    def submit_feedback(self, issue_id: int, text: str, current_status: str = "") -> Dict:
        """
        Отзыв о решении

        Returns:
            {"issue_id", "feedback", "status"}: статус после отзыва
        """
        feedback = (text or "").strip()
        if not feedback:
            raise InputError(MSG_FEEDBACK_REQUIRED)

        self.client.submit_feedback(issue_id, feedback)
        status = "closed" if current_status == "pending_user_feedback" else current_status
        return {"issue_id": issue_id, "feedback": feedback, "status": status}
