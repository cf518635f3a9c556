# tripharmony/db/repositories/personal_access_token.py

from datetime import datetime
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from tripharmony.db.models.personal_access_token import PersonalAccessToken

class PersonalAccessTokenRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        user_id: int,
        name: str,
        token_hash: str,
        expires_at: datetime | None = None
    ) -> PersonalAccessToken:
        access_token = PersonalAccessToken(
            user_id=user_id,
            name=name,
            token=token_hash,
            created_at=datetime.utcnow(),
            expires_at=expires_at
        )
        self.db.add(access_token)
        await self.db.commit()
        await self.db.refresh(access_token)
        return access_token

    async def get_valid(self, token_id: int, token_hash: str) -> PersonalAccessToken | None:
        """Ищет неистёкший токен по id и хешу секрета."""
        query = (
            select(PersonalAccessToken)
            .where(PersonalAccessToken.id == token_id)
            .where(PersonalAccessToken.token == token_hash)
        )
        result = await self.db.execute(query)
        access_token = result.scalars().first()
        if access_token and access_token.expires_at and access_token.expires_at <= datetime.utcnow():
            return None
        return access_token

    async def touch(self, access_token: PersonalAccessToken) -> None:
        access_token.last_used_at = datetime.utcnow()
        await self.db.commit()

    async def delete(self, access_token: PersonalAccessToken) -> None:
        await self.db.delete(access_token)
        await self.db.commit()

    async def delete_expired(self, now: datetime | None = None) -> int:
        now = now or datetime.utcnow()
        result = await self.db.execute(
            delete(PersonalAccessToken).where(PersonalAccessToken.expires_at <= now)
        )
        await self.db.commit()
        return result.rowcount
