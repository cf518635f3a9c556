from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi_utils.tasks import repeat_every
from tripharmony.core.config import settings
from tripharmony.core.exceptions import ApiError, api_error_handler, validation_error_handler
from tripharmony.api.endpoints.login import router as login_router
from tripharmony.api.endpoints.user import router as user_router
from tripharmony.db.session import engine, get_db, init_models
from tripharmony.db.models.user import User  # noqa: F401 - регистрация таблиц
from tripharmony.db.models.personal_access_token import PersonalAccessToken  # noqa: F401
from tripharmony.tasks.cleanup import prune_expired_tokens
import logging

# Настройка логирования
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.PROJECT_NAME)
api_prefix = settings.API_PREFIX

app.add_exception_handler(ApiError, api_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)

# Register routers
app.include_router(login_router, prefix=f"{api_prefix}/login", tags=["login"])
app.include_router(user_router, prefix=api_prefix, tags=["user"])

@app.on_event("startup")
async def startup():
    await init_models(engine)
    logger.info("Startup event completed. Database tables created.")

# Отдельная регистрация повторяющейся задачи
@app.on_event("startup")
@repeat_every(seconds=settings.TOKEN_PRUNE_INTERVAL_SECONDS)
async def schedule_token_pruning():
    async for db in get_db():  # Используем get_db как генератор
        await prune_expired_tokens(db)
