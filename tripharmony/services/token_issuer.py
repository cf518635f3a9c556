import logging
from datetime import datetime, timedelta
from typing import Protocol

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tripharmony.core.config import settings
from tripharmony.core.security import generate_token_secret, hash_token, split_plain_token
from tripharmony.db.models.personal_access_token import PersonalAccessToken
from tripharmony.db.models.user import User
from tripharmony.db.repositories.personal_access_token import PersonalAccessTokenRepository
from tripharmony.db.session import get_db

logger = logging.getLogger(__name__)


class TokenIssuer(Protocol):
    async def issue(self, user: User, label: str) -> str:
        ...


class DatabaseTokenIssuer:
    """
    Персональные токены доступа в БД.
    Клиент получает "<id>|<secret>", в таблице лежит только sha256 от secret.
    """

    def __init__(self, db: AsyncSession, expire_minutes: int | None = None):
        self.tokens = PersonalAccessTokenRepository(db)
        self.expire_minutes = expire_minutes

    async def issue(self, user: User, label: str) -> str:
        secret = generate_token_secret()
        expires_at = None
        if self.expire_minutes:
            expires_at = datetime.utcnow() + timedelta(minutes=self.expire_minutes)

        access_token = await self.tokens.create(user.id, label, hash_token(secret), expires_at)
        logger.info("Выдан токен id=%s пользователю id=%s", access_token.id, user.id)
        return f"{access_token.id}|{secret}"

    async def resolve(self, plain_token: str) -> PersonalAccessToken | None:
        """Находит действующий токен по строке из заголовка Authorization."""
        token_id, secret = split_plain_token(plain_token)
        if token_id is None or not secret:
            return None

        access_token = await self.tokens.get_valid(token_id, hash_token(secret))
        if access_token:
            await self.tokens.touch(access_token)
        return access_token

    async def revoke(self, access_token: PersonalAccessToken) -> None:
        await self.tokens.delete(access_token)
        logger.info("Токен id=%s отозван", access_token.id)


def get_token_issuer(db: AsyncSession = Depends(get_db)) -> DatabaseTokenIssuer:
    return DatabaseTokenIssuer(db, settings.ACCESS_TOKEN_EXPIRE_MINUTES)
