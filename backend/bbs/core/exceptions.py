"""
Исключения приложения.

Каждое исключение знает свой HTTP статус и безопасное сообщение для клиента,
в HTTP ответ их превращают обработчики в main.py.
"""
from typing import Optional


class BBSError(Exception):
    """Базовое исключение BBS"""
    status_code = 500
    message = "Внутренняя ошибка сервера"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ConfigError(BBSError):
    """Ошибка конфигурации, обнаруживается при старте процесса"""
    message = "Некорректная конфигурация"


class ValidationError(BBSError):
    status_code = 400
    message = "Ошибка параметров"


class ConflictError(BBSError):
    """Username или email уже зарегистрированы"""
    status_code = 409

    MESSAGES = {
        "username": "Имя пользователя уже занято",
        "email": "Email уже зарегистрирован",
    }

    def __init__(self, field: str):
        self.field = field
        super().__init__(self.MESSAGES.get(field, "Аккаунт уже существует"))


class AuthenticationError(BBSError):
    status_code = 401
    message = "Неверное имя пользователя или пароль"


class EntropyUnavailableError(BBSError):
    message = "Не удалось сгенерировать соль"


class HashingFailedError(BBSError):
    message = "Не удалось захешировать пароль"


class StorageError(BBSError):
    message = "Ошибка хранилища"


class StorageUnavailableError(StorageError):
    """Таймаут или потеря соединения, клиент может повторить запрос"""
    status_code = 503
    message = "Хранилище временно недоступно, повторите запрос позже"


class DuplicateAccountError(StorageError):
    """Нарушение уникального индекса при вставке"""
    message = "Нарушено ограничение уникальности аккаунта"

    def __init__(self, field: Optional[str] = None):
        self.field = field
        super().__init__()
