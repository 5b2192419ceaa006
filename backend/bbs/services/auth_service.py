"""
Регистрация и проверка учётных данных.

Регистрация идёт линейно:
    валидация -> username свободен -> email свободен -> ID -> соль -> хеш -> запись
Любой шаг прерывает цепочку исключением, до записи в БД ничего не пишется.
"""
import logging

from pydantic import ValidationError as SchemaValidationError

from bbs.core.exceptions import AuthenticationError, ConflictError, DuplicateAccountError, ValidationError
from bbs.core.models import Account
from bbs.core.security import generate_salt, hash_password, pwd_context, verify_password
from bbs.core.snowflake import IdentityIssuer
from bbs.schemas import RegisterRequest
from bbs.services.account_store import AccountStore

logger = logging.getLogger(__name__)


def _describe(e: SchemaValidationError) -> str:
    parts = []
    for err in e.errors():
        field = ".".join(str(loc) for loc in err["loc"])
        parts.append(f"{field}: {err['msg']}")
    return "Ошибка параметров: " + "; ".join(parts)


class AuthService:
    """
    Оркестратор регистрации, зависимости передаются явно
    """

    def __init__(self, store: AccountStore, issuer: IdentityIssuer):
        self.store = store
        self.issuer = issuer

    def register(self, name: str, password: str, email: str) -> Account:
        """
        :param name: Имя пользователя (3-50 символов)
        :param password: Пароль (минимум 6 символов)
        :param email: Email
        :return: Сохранённый аккаунт
        :rtype: Account
        """
        try:
            request = RegisterRequest(name=name, password=password, email=email)
        except SchemaValidationError as e:
            raise ValidationError(_describe(e)) from e

        logger.info("Попытка регистрации: %s", request.name)

        if self.store.find_by_username(request.name) is not None:
            logger.warning("Username уже занят: %s", request.name)
            raise ConflictError("username")

        if self.store.find_by_email(request.email) is not None:
            logger.warning("Email уже зарегистрирован: %s", request.email)
            raise ConflictError("email")

        user_id = self.issuer.next_id()
        salt = generate_salt()
        hashed = hash_password(request.password, salt)

        account = Account(
            user_id=user_id,
            username=request.name,
            password=hashed,
            salt=salt,
            email=request.email,
            # avatar и homepage остаются пустыми
        )

        try:
            account = self.store.insert(account)
        except DuplicateAccountError as e:
            # Параллельная регистрация проскочила между проверкой и вставкой
            if e.field is None:
                raise
            raise ConflictError(e.field) from e

        logger.info(f"Пользователь зарегистрирован: {account.username} (id={account.user_id})")
        return account

    def authenticate(self, name: str, password: str) -> Account:
        """Проверяет имя и пароль, токены не выдаются"""
        account = self.store.find_by_username(name)
        if account is None:
            # Время ответа не должно выдавать, существует ли пользователь
            pwd_context.dummy_verify()

        if account is None or not verify_password(password, account.salt, account.password):
            logger.warning("Неудачная попытка входа: %s", name)
            raise AuthenticationError()

        logger.info(f"Учётные данные подтверждены: {account.username}")
        return account
