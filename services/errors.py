"""
Ошибки сервисов и форматирование ошибок валидации backend
"""
from typing import Any, Optional


GENERIC_ERROR = "Произошла ошибка. Попробуйте ещё раз позже."
NETWORK_ERROR = "Не удалось связаться с сервером. Проверьте подключение и попробуйте снова."


class BackendError(Exception):
    """Ошибка ответа backend API (или сети, если status_code is None)"""

    def __init__(self, message: str, status_code: Optional[int] = None, detail: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail

    @property
    def is_auth_failure(self) -> bool:
        return self.status_code in (401, 403)

    @property
    def is_validation_error(self) -> bool:
        return isinstance(self.detail, list)


class InputError(Exception):
    """Ошибка ввода, пойманная до запроса к backend"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def _loc_parts(item: dict) -> list:
    return [str(part) for part in item.get("loc") or []]


def format_error_detail(detail: Any) -> Optional[str]:
    """
    Ошибки валидации в виде "body.text - field required; ..."

    Строковый detail возвращается как есть, иначе None.
    """
    if isinstance(detail, list):
        parts = []
        for item in detail:
            if isinstance(item, dict):
                parts.append(f"{'.'.join(_loc_parts(item))} - {item.get('msg', '')}")
            else:
                parts.append(str(item))
        return "; ".join(parts)
    if isinstance(detail, str):
        return detail
    return None


def format_field_errors(detail: Any) -> Optional[str]:
    """Ошибки формы регистрации в виде "Password: too short | ..." """
    if not isinstance(detail, list):
        return format_error_detail(detail)

    messages = []
    for item in detail:
        if not isinstance(item, dict):
            messages.append(str(item))
            continue
        loc = _loc_parts(item)
        field = loc[-1] if len(loc) > 1 else ".".join(loc)
        field = field[:1].upper() + field[1:]
        messages.append(f"{field}: {item.get('msg', '')}")
    return " | ".join(messages)
