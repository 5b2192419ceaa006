"""
Настройка подключения к базе данных.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base, sessionmaker

from bbs import config


def _engine_options(url: str) -> dict:
    """Параметры пула и таймаутов под конкретный драйвер"""
    backend = make_url(url).get_backend_name()

    if backend == "sqlite":
        # SQLite: таймаут ожидания блокировки вместо пула соединений
        return {
            "connect_args": {"check_same_thread": False, "timeout": config.DB_TIMEOUT},
        }

    return {
        "pool_size": config.DB_POOL_SIZE,
        "max_overflow": config.DB_MAX_OVERFLOW,
        "pool_recycle": config.DB_POOL_RECYCLE,
        "pool_timeout": config.DB_TIMEOUT,
        "pool_pre_ping": True,
        "connect_args": {
            "connect_timeout": config.DB_TIMEOUT,
            "read_timeout": config.DB_TIMEOUT,
            "write_timeout": config.DB_TIMEOUT,
        },
    }


# Создаём движок БД
engine = create_engine(
    config.DATABASE_URL,
    echo=config.DB_ECHO,
    **_engine_options(config.DATABASE_URL),
)

# Сессия для работы с БД
SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)

# Базовый класс для моделей
Base = declarative_base()


def get_db():
    """
    Dependency для получения сессии БД в endpoint'ах.

    Использование:
        @app.post("/auth/register")
        def register(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
