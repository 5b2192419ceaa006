import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from bbs.core.exceptions import DuplicateAccountError, StorageError, StorageUnavailableError
from bbs.core.models import Account, utcnow

logger = logging.getLogger(__name__)


class AccountStore:
    """
    Доступ к таблице аккаунтов, все выборки видят только неудалённые записи
    """

    def __init__(self, db: Session):
        self.db = db

    def _fail(self, e: Exception) -> StorageError:
        """Переводит ошибку SQLAlchemy в ошибку хранилища"""
        self.db.rollback()
        if isinstance(e, (OperationalError, PoolTimeoutError)):
            logger.error(f"БД недоступна: {e}")
            return StorageUnavailableError()
        logger.error("Ошибка БД: %s", str(e), exc_info=True)
        return StorageError()

    def _find_one(self, *criteria) -> Optional[Account]:
        try:
            return (
                self.db.query(Account)
                .filter(Account.deleted_at.is_(None), *criteria)
                .first()
            )
        except SQLAlchemyError as e:
            raise self._fail(e) from e

    def find_by_username(self, username: str) -> Optional[Account]:
        return self._find_one(Account.username == username)

    def find_by_email(self, email: str) -> Optional[Account]:
        return self._find_one(Account.email == email)

    def insert(self, account: Account) -> Account:
        """
        :param account: Новый аккаунт с уже выданным user_id
        :type account: Account
        :return: Сохранённый аккаунт
        :rtype: Account
        :raises DuplicateAccountError: Сработал уникальный индекс
        """
        try:
            self.db.add(account)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            field = self._conflicting_field(account)
            logger.warning(f"Нарушение уникальности при вставке: поле={field}")
            raise DuplicateAccountError(field) from e
        except SQLAlchemyError as e:
            raise self._fail(e) from e

        # Сессия не истекает после commit, все поля уже на объекте
        return account

    def _conflicting_field(self, account: Account) -> Optional[str]:
        # Индекс сработал, значит запись уже видна после отката
        if self._find_one(Account.username == account.username) is not None:
            return "username"
        if self._find_one(Account.email == account.email) is not None:
            return "email"
        return None

    def soft_delete(self, account: Account) -> Account:
        """Помечает аккаунт удалённым, запись остаётся в БД"""
        try:
            account.deleted_at = utcnow()
            account.is_active = None
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail(e) from e

        logger.info(f"Аккаунт помечен удалённым: {account.username}")
        return account

    def list_accounts(self, include_deleted: bool = False) -> List[Account]:
        query = self.db.query(Account)
        if not include_deleted:
            query = query.filter(Account.deleted_at.is_(None))
        try:
            return query.order_by(Account.user_id).all()
        except SQLAlchemyError as e:
            raise self._fail(e) from e
