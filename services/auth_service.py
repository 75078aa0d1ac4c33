"""
Сессия сотрудника: токен, профиль и роль
Единственный источник правды о том, кто вошёл в портал
"""
from typing import Dict, MutableMapping, Optional
from config import Config
from services.access import home_for, is_active_worker, with_message, LOGIN_PATH, MSG_LOGGED_OUT
from services.errors import BackendError, InputError


MIN_PASSWORD_LENGTH = 8


def register_worker(client, email: str, password: str, confirm_password: str,
                    full_name: Optional[str] = None) -> Dict:
    """
    Регистрация сотрудника

    После регистрации аккаунт ждёт подтверждения администратором.
    """
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise InputError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long.")
    if password != confirm_password:
        raise InputError("Passwords do not match.")
    return client.register(email.strip(), password, (full_name or "").strip() or None)


class User:
    """Профиль сотрудника (ответ /auth/users/me)"""

    def __init__(self, id: int, email: str, role: str, full_name: Optional[str] = None,
                 is_active: bool = False, is_confirmed_by_admin: bool = False):
        self.id = id
        self.email = email
        self.full_name = full_name
        self.is_active = is_active
        self.is_confirmed_by_admin = is_confirmed_by_admin
        self.role = role

    @classmethod
    def from_dict(cls, data: Dict) -> 'User':
        return cls(
            id=data.get("id"),
            email=data.get("email", ""),
            role=data.get("role", "worker"),
            full_name=data.get("full_name"),
            is_active=bool(data.get("is_active", False)),
            is_confirmed_by_admin=bool(data.get("is_confirmed_by_admin", False))
        )

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "email": self.email,
            "full_name": self.full_name,
            "is_active": self.is_active,
            "is_confirmed_by_admin": self.is_confirmed_by_admin,
            "role": self.role
        }

    @property
    def display_name(self) -> str:
        return self.full_name or self.email

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def is_active_worker(self) -> bool:
        return is_active_worker(self)


class AuthSession:
    """
    Состояние авторизации для одного запроса

    storage: постоянное хранилище браузерной сессии (flask.session),
    client: BackendClient, path: текущий маршрут.
    Переходы, которые запросили login/logout, записываются в redirect_to.
    """

    def __init__(self, storage: MutableMapping, client, path: str = "/"):
        self.storage = storage
        self.client = client
        self.path = path
        self.token: Optional[str] = None
        self.user: Optional[User] = None
        self.is_loading = True
        self.redirect_to: Optional[str] = None
        self.login_denied = False

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token) and self.user is not None

    def _stored_token(self) -> Optional[str]:
        return self.storage.get(Config.AUTH_TOKEN_KEY)

    def start(self) -> Optional[User]:
        """Начальная загрузка: если токен сохранён, подтягиваем профиль"""
        stored = self._stored_token()
        if stored:
            return self.fetch_user(stored)
        self.is_loading = False
        return None

    def fetch_user(self, token_override: Optional[str] = None) -> Optional[User]:
        """
        Загрузить профиль по токену

        Нет токена: это не ошибка, просто никто не вошёл.
        401/403 ведут к полному logout, прочие ошибки сбрасывают только профиль.
        """
        active_token = token_override or self._stored_token()

        if not active_token:
            self.user = None
            self.token = None
            self.is_loading = False
            return None

        self.token = active_token
        self.is_loading = True
        try:
            self.user = User.from_dict(self.client.get_current_user(active_token))
            return self.user
        except BackendError as e:
            print(f"AuthSession: Failed to fetch user data: {e.status_code} {e.message}")
            if e.is_auth_failure:
                self.logout()
            else:
                self.user = None
            return None
        finally:
            self.is_loading = False

    def login(self, token: str) -> Optional[str]:
        """
        Вход по полученному токену

        Returns:
            Куда перейти, или None (профиль не получен / переход не нужен)
        """
        self.storage[Config.AUTH_TOKEN_KEY] = token

        user = self.fetch_user(token)
        if user is None:
            print("AuthSession: Token received, but failed to fetch user data.")
            return None

        target = home_for(user)
        if target:
            self.redirect_to = target
            return target

        print(f"[WARN] AuthSession: user {user.id} is not allowed in (role={user.role}). Logging out.")
        self.login_denied = True
        return self.logout()

    def logout(self) -> Optional[str]:
        self.storage.pop(Config.AUTH_TOKEN_KEY, None)
        self.token = None
        self.user = None
        self.is_loading = False

        if self.path not in Config.PUBLIC_PATHS:
            self.redirect_to = with_message(LOGIN_PATH, MSG_LOGGED_OUT)
            return self.redirect_to
        return None
