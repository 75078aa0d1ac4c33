"""
Доступ к страницам портала сотрудников
Одна точка принятия решения вместо одинаковых проверок на каждой странице
"""
from enum import Enum
from typing import Optional
from urllib.parse import urlencode


class Area(Enum):
    """Зоны портала"""
    GUEST = "guest"          # /login, /portal: для тех, кто ещё не вошёл
    DASHBOARD = "dashboard"  # подтверждённые активные сотрудники
    ADMIN = "admin"          # администраторы


class AccessAction(Enum):
    WAIT = "wait"          # профиль ещё грузится, показываем заглушку
    ALLOW = "allow"
    REDIRECT = "redirect"
    LOGOUT = "logout"      # сначала выйти, потом перейти на location


LOGIN_PATH = "/login"
DASHBOARD_PATH = "/dashboard"
ADMIN_PATH = "/admin"

MSG_LOGIN_FOR_DASHBOARD = "Please login to access your dashboard."
MSG_NOT_ACTIVE = "Your account is not active or not confirmed. Please contact an administrator."
MSG_ADMIN_LOGIN = "Admin access required. Please login."
MSG_ADMIN_ONLY = "Access denied. Admin privileges required."
MSG_LOGGED_OUT = "You have been logged out."


class AccessDecision:
    """Результат проверки доступа"""

    def __init__(self, action: AccessAction, location: Optional[str] = None):
        self.action = action
        self.location = location

    @property
    def allowed(self) -> bool:
        return self.action is AccessAction.ALLOW

    def __eq__(self, other):
        if not isinstance(other, AccessDecision):
            return NotImplemented
        return self.action is other.action and self.location == other.location

    def __repr__(self):
        return f"AccessDecision({self.action.value!r}, {self.location!r})"


def with_message(path: str, message: str) -> str:
    return f"{path}?{urlencode({'message': message})}"


def is_active_worker(user) -> bool:
    return user.role == "worker" and bool(user.is_confirmed_by_admin) and bool(user.is_active)


def home_for(user) -> Optional[str]:
    """Куда отправить пользователя после входа (None, если никуда нельзя)"""
    if user is None:
        return None
    if user.role == "admin":
        return ADMIN_PATH
    if is_active_worker(user):
        return DASHBOARD_PATH
    return None


def check_access(area: Area, user, is_authenticated: bool, is_loading: bool) -> AccessDecision:
    """
    Решение для страницы зоны area

    Пока идёт загрузка профиля, никаких переходов не делаем.
    """
    if is_loading:
        return AccessDecision(AccessAction.WAIT)

    if area is Area.GUEST:
        target = home_for(user) if is_authenticated else None
        if target:
            return AccessDecision(AccessAction.REDIRECT, target)
        return AccessDecision(AccessAction.ALLOW)

    if area is Area.DASHBOARD:
        if not is_authenticated or user is None:
            return AccessDecision(AccessAction.REDIRECT, with_message(LOGIN_PATH, MSG_LOGIN_FOR_DASHBOARD))
        if user.role == "admin":
            return AccessDecision(AccessAction.REDIRECT, ADMIN_PATH)
        if not is_active_worker(user):
            return AccessDecision(AccessAction.LOGOUT, with_message(LOGIN_PATH, MSG_NOT_ACTIVE))
        return AccessDecision(AccessAction.ALLOW)

    if area is Area.ADMIN:
        if not is_authenticated or user is None:
            return AccessDecision(AccessAction.REDIRECT, with_message(LOGIN_PATH, MSG_ADMIN_LOGIN))
        if user.role != "admin":
            return AccessDecision(AccessAction.REDIRECT, with_message(DASHBOARD_PATH, MSG_ADMIN_ONLY))
        return AccessDecision(AccessAction.ALLOW)

    raise ValueError(f"Unknown area: {area}")
