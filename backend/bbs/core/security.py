"""
Функции безопасности: соль, хеширование и проверка паролей.
"""
import logging
import secrets

from passlib.context import CryptContext

from bbs.core.exceptions import EntropyUnavailableError, HashingFailedError

logger = logging.getLogger(__name__)

SALT_BYTES = 16        # 32 hex символа
BCRYPT_ROUNDS = 10     # cost factor, зашивается в сам хеш
BCRYPT_MAX_BYTES = 72  # bcrypt не принимает секрет длиннее

# Контекст для хеширования паролей
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)


def generate_salt() -> str:
    """Генерирует случайную соль из CSPRNG операционной системы"""
    try:
        return secrets.token_hex(SALT_BYTES)
    except (OSError, NotImplementedError) as e:
        logger.error("Источник случайности недоступен: %s", e)
        raise EntropyUnavailableError() from e


def _salted(password: str, salt: str) -> bytes:
    # Порядок важен: сначала пароль, потом соль
    return (password + salt).encode("utf-8")


def hash_password(password: str, salt: str) -> str:
    """
    Хеширует пароль с солью.

    Args:
        password: Пароль в открытом виде
        salt: Соль аккаунта из generate_salt()

    Returns:
        Строка вида $2b$10$..., содержит cost и внутреннюю соль bcrypt

    Raises:
        HashingFailedError: bcrypt отклонил вход (длиннее 72 байт, NUL и т.п.)
    """
    secret = _salted(password, salt)

    # Молча обрезать секрет нельзя
    if len(secret) > BCRYPT_MAX_BYTES:
        logger.warning("Пароль с солью длиннее %d байт", BCRYPT_MAX_BYTES)
        raise HashingFailedError()

    try:
        return pwd_context.hash(secret)
    except (ValueError, TypeError) as e:
        logger.warning("bcrypt отклонил пароль: %s", type(e).__name__)
        raise HashingFailedError() from e


def verify_password(password: str, salt: str, hashed_password: str) -> bool:
    """Проверяет пароль (сравнение в постоянное время внутри passlib)"""
    secret = _salted(password, salt)
    if len(secret) > BCRYPT_MAX_BYTES:
        return False

    try:
        return pwd_context.verify(secret, hashed_password)
    except (ValueError, TypeError) as e:
        logger.warning("Не удалось проверить хеш пароля: %s", type(e).__name__)
        return False
