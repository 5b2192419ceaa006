"""
Конфигурация бэкенда.
"""

from pathlib import Path
from typing import Mapping
from dotenv import load_dotenv
import os

from bbs.core.exceptions import ConfigError

load_dotenv()

# Корневая директория проекта и базовые настройки
BASE_DIR = Path(__file__).parent.parent  # backend/
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")


# ============= DATA =============
DATA_DIR = Path(os.getenv("DATA_DIR", BASE_DIR / "data"))
LOGS_DIR = Path(os.getenv("LOGS_DIR", BASE_DIR / "logs"))

DATA_DIR.mkdir(parents=True, exist_ok=True)
LOGS_DIR.mkdir(parents=True, exist_ok=True)


# ============= БАЗА ДАННЫХ =============
DB_REQUIRED_MYSQL = ("DB_HOST", "DB_PORT", "DB_USER", "DB_PASSWORD", "DB_NAME")


def build_database_url(env: Mapping[str, str] = os.environ) -> str:
    """
    Собирает URL подключения к БД из переменных окружения.

    :param env: Источник переменных (по умолчанию os.environ)
    :type env: Mapping[str, str]
    :return: SQLAlchemy URL
    :rtype: str
    :raises ConfigError: Не хватает обязательных параметров или неизвестный драйвер
    """
    if env.get("DATABASE_URL"):
        return env["DATABASE_URL"]

    driver = env.get("DB_DRIVER", "sqlite").lower()

    if driver == "sqlite":
        return f"sqlite:///{str(DATA_DIR / 'bbs.db')}"

    if driver == "mysql":
        missing = [key for key in DB_REQUIRED_MYSQL if not env.get(key)]
        if missing:
            raise ConfigError(f"Не заданы параметры БД: {', '.join(missing)}")

        charset = env.get("DB_CHARSET") or "utf8mb4"
        return (
            f"mysql+pymysql://{env['DB_USER']}:{env['DB_PASSWORD']}"
            f"@{env['DB_HOST']}:{env['DB_PORT']}/{env['DB_NAME']}?charset={charset}"
        )

    raise ConfigError(f"Неизвестный драйвер БД: {driver}")


DATABASE_URL = build_database_url()

DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "20"))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "80"))
DB_POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "1800"))  # секунды
DB_TIMEOUT = int(os.getenv("DB_TIMEOUT", "5"))  # секунды на один вызов БД
DB_ECHO = os.getenv("DB_ECHO", "false").lower() in ("1", "true", "yes")


# ============= ИДЕНТИФИКАТОРЫ =============
NODE_ID = int(os.getenv("NODE_ID", "0"))


# ============= API =============
API_HOST = os.getenv("API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("API_PORT", "8000"))
