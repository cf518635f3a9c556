from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from tripharmony.db.repositories.personal_access_token import PersonalAccessTokenRepository
import logging

logger = logging.getLogger(__name__)

async def prune_expired_tokens(db: AsyncSession, now: datetime | None = None) -> int:
    now = now or datetime.utcnow()
    logger.info("Начало очистки токенов, истёкших до %s", now)

    removed = await PersonalAccessTokenRepository(db).delete_expired(now)

    if not removed:
        logger.info("Нет истёкших токенов.")
    else:
        logger.info("Очистка завершена. Удалено токенов: %d", removed)
    return removed
