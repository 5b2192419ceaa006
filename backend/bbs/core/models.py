# Класс аккаунта, данные после регистрации

from datetime import datetime, timezone

from sqlalchemy import BigInteger, Boolean, Column, DateTime, String, UniqueConstraint

from bbs.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Account(Base):
    """SQLAlchemy модель - структура таблицы в БД"""
    __tablename__ = "users"

    user_id = Column(BigInteger, primary_key=True, autoincrement=False)  # Snowflake ID
    username = Column(String(50), nullable=False)
    password = Column(String(255), nullable=False)  # bcrypt(password + salt), не plaintext
    salt = Column(String(64), nullable=False)
    avatar = Column(String(255))                     # URL аватара
    email = Column(String(100), nullable=False)
    homepage = Column(String(255))                   # Личная страница
    created_at = Column(DateTime, default=utcnow, nullable=False)
    deleted_at = Column(DateTime, nullable=True, index=True)  # Мягкое удаление
    # True у живого аккаунта, NULL у удалённого: NULL не участвует в уникальности
    is_active = Column(Boolean, nullable=True, default=True)

    __table_args__ = (
        # Уникальность только среди неудалённых аккаунтов, одинаково для SQLite, PostgreSQL и MySQL
        UniqueConstraint("username", "is_active", name="uq_users_username_active"),
        UniqueConstraint("email", "is_active", name="uq_users_email_active"),
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def __repr__(self):
        return f"<Account user_id={self.user_id} username={self.username!r}>"
