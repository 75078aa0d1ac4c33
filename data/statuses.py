"""
Справочник статусов обращений
Статусы, переводы и этапы рассмотрения (таймлайн)
"""

# Статусы в том виде, в котором их отдаёт backend
ISSUE_STATUSES = [
    "new",
    "pending_analysis",
    "analyzed",
    "analysis_failed",
    "in_progress",
    "resolved",
    "rejected",
    "closed_unresolved",
    "pending_user_feedback",
    "closed",
]

STATUS_TRANSLATIONS = {
    "new": "Новая заявка",
    "pending_analysis": "Ожидает анализа",
    "analyzed": "Проанализировано",
    "analysis_failed": "Ошибка анализа",
    "in_progress": "В работе / Отправлено в ответственный орган",
    "resolved": "Решено / Рассмотрено",
    "rejected": "Отклонено",
    "closed_unresolved": "Закрыто (не решено)",
    "pending_user_feedback": "Ожидает вашего отзыва",
    "closed": "Закрыто",
}

# Начальный статус сразу после подачи обращения
SUBMISSION_STATUS_TRANSLATIONS = {
    "new": "Новое",
    "pending_analysis": "Передано на анализ",
    "analyzed": "Успешно проанализировано",
    "analysis_failed": "Ошибка при автоматическом анализе",
}

# Канонический порядок этапов (happy path)
MILESTONES = [
    {"key": "new", "label": "Новая заявка"},
    {"key": "pending_analysis", "label": "Анализ заявки"},
    {"key": "analyzed", "label": "Проанализировано"},
    {"key": "in_progress", "label": "В работе"},
    {"key": "resolved", "label": "Решено"},
    {"key": "pending_user_feedback", "label": "Оценка решения"},
    {"key": "closed", "label": "Закрыто"},
]

# Отклонения от happy path подсвечиваются красным
DEVIATION_STATUSES = {"analysis_failed", "rejected", "closed_unresolved"}

# Статусы, при которых показываем детали решения
RESOLUTION_STATUSES = {"resolved", "pending_user_feedback", "closed", "closed_unresolved"}

SUBMISSION_TYPES = {
    "жалоба": "Жалоба",
    "просьба": "Просьба/Предложение",
}

SUBMISSION_SOURCE = "web_form"
