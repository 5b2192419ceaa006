"""
BBS Auth API - главный файл приложения.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Depends, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bbs import config
from bbs.schemas import (
    RegisterRequest,
    RegisterResponse,
    LoginRequest,
    LoginResponse,
    AccountData,
    LoginData,
)
from bbs.core.database import engine, Base, get_db
from bbs.core.exceptions import BBSError
from bbs.core.logging_config import setup_logging
from bbs.core.snowflake import IdentityIssuer
from bbs.services.account_store import AccountStore
from bbs.services.auth_service import AuthService


# ===== НАСТРОЙКА ЛОГИРОВАНИЯ =====
setup_logging()
logger = logging.getLogger(__name__)


# ============= LIFESPAN EVENT =============

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Выполняется при запуске и остановке приложения.

    Код ДО yield - выполняется при старте (startup).
    Код ПОСЛЕ yield - выполняется при остановке (shutdown).
    """
    # ===== STARTUP =====
    logger.info("BBS Auth API запускается...")

    # Неверный NODE_ID должен уронить старт, а не запросы
    app.state.id_issuer = IdentityIssuer(node_id=config.NODE_ID)

    # Создание таблиц в БД
    Base.metadata.create_all(bind=engine)
    logger.info(f"База данных: {engine.url.render_as_string(hide_password=True)}")
    logger.info("API готов к работе!")

    yield  # Приложение работает

    # ===== SHUTDOWN =====
    logger.info("Остановка приложения...")
    engine.dispose()
    logger.info("Приложение остановлено")


# ============= СОЗДАНИЕ ПРИЛОЖЕНИЯ =============

app = FastAPI(
    title="BBS Auth API",
    description="Регистрация и проверка учётных данных форума",
    version="1.0.0",
    lifespan=lifespan
)


# ============= DEPENDENCIES =============

def get_id_issuer(request: Request) -> IdentityIssuer:
    return request.app.state.id_issuer


def get_auth_service(
    db: Session = Depends(get_db),
    issuer: IdentityIssuer = Depends(get_id_issuer),
) -> AuthService:
    return AuthService(AccountStore(db), issuer)


# ============= ОБРАБОТЧИКИ ОШИБОК =============

def envelope_error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"code": status_code, "message": message})


@app.exception_handler(BBSError)
async def bbs_error_handler(request: Request, exc: BBSError):
    if exc.status_code >= 500:
        logger.error("Ошибка при обработке %s: %s", request.url.path, exc.message, exc_info=exc)
    else:
        logger.warning("Запрос %s отклонён: %s", request.url.path, exc.message)
    return envelope_error(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # Только поле и текст ошибки: во входных данных может быть пароль
    details = "; ".join(
        f"{'.'.join(str(loc) for loc in err['loc'] if loc != 'body')}: {err['msg']}"
        for err in exc.errors()
    )
    logger.warning("Невалидный запрос %s: %s", request.url.path, details)
    return envelope_error(status.HTTP_400_BAD_REQUEST, f"Ошибка параметров: {details}")


# ============= HEALTH CHECK =============

@app.get("/", tags=["Health"])
async def root():
    """Проверка что API работает"""
    logger.debug("GET / вызван")
    return {
        "message": "BBS Auth API",
        "status": "healthy",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health", tags=["Health"])
def health(db: Session = Depends(get_db)):
    """Проверка состояния БД"""
    logger.debug("Health check вызван")
    try:
        db.execute(text("SELECT 1"))
        database = True
    except SQLAlchemyError as e:
        logger.error(f"Health check: БД недоступна: {e}")
        database = False

    return JSONResponse(
        status_code=status.HTTP_200_OK if database else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "ok" if database else "degraded", "services": {"database": database}},
    )


# ============= AUTH ENDPOINTS =============

@app.post("/auth/register", response_model=RegisterResponse, tags=["Authentication"])
def register(payload: RegisterRequest, service: AuthService = Depends(get_auth_service)):
    """Регистрация нового пользователя"""
    account = service.register(payload.name, payload.password, payload.email)

    return RegisterResponse(
        code=200,
        message="Регистрация прошла успешно",
        data=AccountData.model_validate(account),
    )


@app.post("/auth/login", response_model=LoginResponse, tags=["Authentication"])
def login(credentials: LoginRequest, service: AuthService = Depends(get_auth_service)):
    """Проверка имени и пароля (сессии и токены не выдаются)"""
    account = service.authenticate(credentials.name, credentials.password)

    return LoginResponse(
        code=200,
        message="Учётные данные подтверждены",
        data=LoginData.model_validate(account),
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("bbs.main:app", host=config.API_HOST, port=config.API_PORT)
