from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from tripharmony.core.exceptions import Unauthenticated
from tripharmony.db.models.personal_access_token import PersonalAccessToken
from tripharmony.db.repositories.user import UserRepository
from tripharmony.db.session import get_db
from tripharmony.services.token_issuer import DatabaseTokenIssuer, get_token_issuer

bearer_scheme = HTTPBearer(auto_error=False)

def get_user_repository(db: AsyncSession = Depends(get_db)) -> UserRepository:
    return UserRepository(db)

async def get_current_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    tokens: DatabaseTokenIssuer = Depends(get_token_issuer)
) -> PersonalAccessToken:
    """Проверяет Bearer-токен из заголовка Authorization."""
    if credentials is None:
        raise Unauthenticated()

    access_token = await tokens.resolve(credentials.credentials)
    if access_token is None:
        raise Unauthenticated()
    return access_token
