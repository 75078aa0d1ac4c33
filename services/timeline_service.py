"""
Таймлайн рассмотрения обращения
Раскладывает текущий статус обращения по этапам MILESTONES
"""

from enum import Enum
from typing import Dict, List, Optional, Tuple
from data.statuses import MILESTONES, DEVIATION_STATUSES


class MilestoneState(Enum):
    """Состояние этапа на таймлайне"""
    COMPLETED = "completed"
    CURRENT = "current"
    FAILED = "failed"
    SKIPPED = "skipped"
    PENDING = "pending"


# Финальный этап показываем всегда, даже если он пропущен
TERMINAL_MILESTONE = "closed"


def _index_of(milestones: List[Dict], key: str) -> int:
    for idx, milestone in enumerate(milestones):
        if milestone["key"] == key:
            return idx
    return -1


def reached_index(status: str, milestones: Optional[List[Dict]] = None) -> Tuple[int, bool]:
    """
    Индекс этапа, до которого фактически дошло обращение

    Returns:
        (индекс или -1 для неизвестного статуса, флаг "ошибка на анализе")
    """
    milestones = MILESTONES if milestones is None else milestones

    if status == "analysis_failed":
        return _index_of(milestones, "analyzed"), True
    if status == "rejected":
        return _index_of(milestones, "in_progress"), False
    if status == "closed_unresolved":
        return _index_of(milestones, "resolved"), False
    return _index_of(milestones, status), False


def classify(current_status: str, milestone_key: str, milestones: Optional[List[Dict]] = None) -> MilestoneState:
    """Состояние одного этапа для текущего статуса обращения"""
    milestones = MILESTONES if milestones is None else milestones

    target = _index_of(milestones, milestone_key)
    if target == -1:
        raise ValueError(f"Unknown milestone: {milestone_key}")

    reached, failed_at_analysis = reached_index(current_status, milestones)

    if target < reached:
        return MilestoneState.COMPLETED

    if target == reached:
        if failed_at_analysis and milestone_key == "analyzed":
            return MilestoneState.FAILED
        return MilestoneState.CURRENT

    # target > reached
    if failed_at_analysis and target > _index_of(milestones, "analyzed"):
        return MilestoneState.SKIPPED
    if current_status == "rejected" and target > _index_of(milestones, "in_progress"):
        return MilestoneState.SKIPPED
    if current_status == "closed_unresolved" and target > _index_of(milestones, "resolved"):
        return MilestoneState.SKIPPED
    return MilestoneState.PENDING


def build_timeline(current_status: str, milestones: Optional[List[Dict]] = None) -> List[Dict]:
    """
    Этапы для отображения

    Пропущенные этапы не показываются, кроме финального "closed".
    """
    milestones = MILESTONES if milestones is None else milestones

    timeline = []
    for milestone in milestones:
        state = classify(current_status, milestone["key"], milestones)
        if state is MilestoneState.SKIPPED and milestone["key"] != TERMINAL_MILESTONE:
            continue
        timeline.append({
            "key": milestone["key"],
            "label": milestone["label"],
            "state": state.value
        })
    return timeline


def is_deviation(status: str) -> bool:
    return status in DEVIATION_STATUSES


def can_leave_feedback(issue: Dict) -> bool:
    """Отзыв можно оставить по решённому обращению, если его ещё нет"""
    return (
        issue.get("status") in ("resolved", "pending_user_feedback")
        and not issue.get("user_feedback_on_resolution")
    )
