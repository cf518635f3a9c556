# tripharmony/db/repositories/user.py

import logging
from datetime import datetime, timedelta
from sqlalchemy import update, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from tripharmony.db.models.user import User

logger = logging.getLogger(__name__)

class UserRepository:
    """Доступ к записям пользователей: поиск, создание и работа с кодом входа."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, user_id: int) -> User | None:
        return await self.db.get(User, user_id)

    async def get_by_phone(self, phone: str) -> User | None:
        result = await self.db.execute(select(User).filter(User.phone == phone))
        return result.scalars().first()

    async def first_or_create(self, phone: str) -> User:
        """
        Возвращает пользователя с таким телефоном или создаёт нового.
        Если параллельный запрос успел вставить тот же телефон, перечитываем запись.
        """
        user = await self.get_by_phone(phone)
        if user:
            return user

        user = User(phone=phone)
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            return await self.get_by_phone(phone)

        await self.db.refresh(user)
        logger.info("Создан пользователь id=%s для телефона %s", user.id, phone)
        return user

    async def set_login_code(self, user: User, code: int, ttl_minutes: int | None = None) -> User:
        """Сохраняет новый код, предыдущий неиспользованный код перезаписывается."""
        user.login_code = code
        if ttl_minutes:
            user.login_code_expires_at = datetime.utcnow() + timedelta(minutes=ttl_minutes)
        else:
            user.login_code_expires_at = None
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def consume_login_code(self, phone: str, code: int) -> User | None:
        """
        Атомарно сверяет и стирает код одним UPDATE.
        Из двух одновременных запросов с одним кодом успешен только один.
        """
        now = datetime.utcnow()
        result = await self.db.execute(
            update(User)
            .where(User.phone == phone)
            .where(User.login_code == code)
            .where(or_(User.login_code_expires_at.is_(None), User.login_code_expires_at > now))
            .values(login_code=None, login_code_expires_at=None, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()

        if result.rowcount != 1:
            return None

        user = await self.get_by_phone(phone)
        # Объект мог остаться в identity map со старым кодом
        await self.db.refresh(user)
        return user
