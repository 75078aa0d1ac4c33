"""
Конфигурация приложения
"""
import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    # Flask
    SECRET_KEY = os.getenv('SECRET_KEY', 'kopuro-secret-key-change-in-production')

    # Session (здесь же хранится токен сотрудника и тема)
    SESSION_TYPE = 'filesystem'
    SESSION_FILE_DIR = os.getenv('SESSION_FILE_DIR', './flask_session')
    SESSION_PERMANENT = False

    AUTH_TOKEN_KEY = 'authToken'
    THEME_KEY = 'theme'
    SENT_FEEDBACK_KEY = 'sent_feedback'

    # Страницы, с которых logout не уводит на /login
    PUBLIC_PATHS = ('/login', '/register', '/')

    # Backend API
    BACKEND_BASE_URL = os.getenv('BACKEND_BASE_URL', 'http://localhost:8000').rstrip('/')
    BACKEND_TIMEOUT = float(os.getenv('BACKEND_TIMEOUT', '30'))

    # Лимиты выборок
    ISSUES_LIMIT = 100
    ADMIN_PAGE_LIMIT = 100
    TOP_ADDRESSES_LIMIT = int(os.getenv('TOP_ADDRESSES_LIMIT', '10'))

    # Сколько ждём статистику для дашборда (секунды)
    STATS_TIMEOUT = float(os.getenv('STATS_TIMEOUT', '20'))

    # Rate limiting
    RATELIMIT_ENABLED = os.getenv('RATELIMIT_ENABLED', 'true').lower() == 'true'
    RATELIMIT_DEFAULT = "60 per minute"
    RATELIMIT_LOGIN = "10 per minute"
    RATELIMIT_SUBMIT = "5 per minute"
