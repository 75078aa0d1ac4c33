"""
Администрирование сотрудников
Списки пользователей и подтверждение новых сотрудников
"""
from typing import Dict, List
from config import Config
from services.auth_service import User


class AdminService:
    def __init__(self, client):
        self.client = client

    def load(self, token: str, skip: int = 0, limit: int = None) -> Dict[str, List[User]]:
        """Все пользователи и неподтверждённые сотрудники"""
        limit = limit or Config.ADMIN_PAGE_LIMIT
        users = self.client.list_users(token, skip=skip, limit=limit) or []
        unconfirmed = self.client.list_unconfirmed_workers(token, skip=skip, limit=limit) or []
        return {
            "users": [User.from_dict(u) for u in users],
            "unconfirmed_workers": [User.from_dict(u) for u in unconfirmed],
        }

    def confirm(self, token: str, user_id: int) -> User:
        confirmed = User.from_dict(self.client.confirm_worker(token, user_id))
        print(f"AdminService: worker {user_id} confirmed")
        return confirmed
