from fastapi import APIRouter, Depends
from tripharmony.api.deps import get_current_token, get_user_repository
from tripharmony.core.exceptions import Unauthenticated
from tripharmony.db.models.personal_access_token import PersonalAccessToken
from tripharmony.db.repositories.user import UserRepository
from tripharmony.schemas.login import MessageResponse
from tripharmony.schemas.user import UserRead
from tripharmony.services.token_issuer import DatabaseTokenIssuer, get_token_issuer

router = APIRouter()

@router.get("/user", response_model=UserRead)
async def read_current_user(
    access_token: PersonalAccessToken = Depends(get_current_token),
    users: UserRepository = Depends(get_user_repository)
):
    user = await users.get_by_id(access_token.user_id)
    if not user:
        raise Unauthenticated()
    return user

@router.post("/logout", response_model=MessageResponse)
async def logout(
    access_token: PersonalAccessToken = Depends(get_current_token),
    tokens: DatabaseTokenIssuer = Depends(get_token_issuer)
):
    """Отзывает токен, которым подписан запрос."""
    await tokens.revoke(access_token)
    return {"message": "Logged out."}
