import logging
from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from tripharmony.api.deps import get_user_repository
from tripharmony.core.config import settings
from tripharmony.core.exceptions import AuthenticationFailure
from tripharmony.core.security import generate_login_code
from tripharmony.db.repositories.user import UserRepository
from tripharmony.schemas.login import LoginRequestSchema, LoginVerifySchema, MessageResponse
from tripharmony.services.notifier import Notifier, get_notifier
from tripharmony.services.token_issuer import TokenIssuer, get_token_issuer

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/", response_model=MessageResponse)
async def submit(
    data: LoginRequestSchema,
    users: UserRepository = Depends(get_user_repository),
    notifier: Notifier = Depends(get_notifier)
):
    """
    Шаг 1: пользователь присылает телефон.
    - **phone**: номер телефона, только цифры и необязательный "+", не короче 10 символов
    - **Возвращает**: одно и то же сообщение и для нового, и для существующего пользователя
    """
    user = await users.first_or_create(data.phone)

    # Новый код заменяет предыдущий, если тот ещё не был использован
    code = generate_login_code()
    await users.set_login_code(user, code, settings.LOGIN_CODE_TTL_MINUTES)
    logger.info("Код входа выдан пользователю id=%s", user.id)

    await notifier.notify(user, code)

    return {"message": "A login code has been sent to your phone number."}


@router.post(
    "/verify",
    response_class=PlainTextResponse,
    responses={401: {"model": MessageResponse, "description": "Could not verify the login code."}}
)
async def verify(
    data: LoginVerifySchema,
    users: UserRepository = Depends(get_user_repository),
    tokens: TokenIssuer = Depends(get_token_issuer)
):
    """
    Шаг 2: телефон и код из SMS.
    Возвращает токен доступа строкой. При неудаче ответ одинаковый для
    неизвестного телефона, неверного и уже использованного кода.
    """
    user = await users.consume_login_code(data.phone, data.login_code)
    if not user:
        logger.info("Неудачная проверка кода для телефона %s", data.phone)
        raise AuthenticationFailure()

    token = await tokens.issue(user, settings.TOKEN_NAME)
    return PlainTextResponse(token)
