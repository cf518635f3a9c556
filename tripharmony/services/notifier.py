import logging
from typing import Protocol

import aiohttp

from tripharmony.core.config import settings
from tripharmony.core.exceptions import NotificationError
from tripharmony.db.models.user import User

logger = logging.getLogger(__name__)

TWILIO_API_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"


def login_code_message(code: int) -> str:
    return f"Your login code is {code}, don't share this with anyone!"


class Notifier(Protocol):
    async def notify(self, user: User, code: int) -> None:
        ...


class LogNotifier:
    """Для разработки: код не отправляется, а пишется в лог."""

    async def notify(self, user: User, code: int) -> None:
        logger.info("[SMS-LOG] %s: %s", user.phone, login_code_message(code))


class TwilioSmsNotifier:
    def __init__(self, account_sid: str, auth_token: str, from_number: str, timeout: float = 10.0):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.timeout = timeout

    @property
    def url(self) -> str:
        return TWILIO_API_URL.format(sid=self.account_sid)

    def build_payload(self, user: User, code: int) -> dict:
        return {"To": user.phone, "From": self.from_number, "Body": login_code_message(code)}

    async def notify(self, user: User, code: int) -> None:
        auth = aiohttp.BasicAuth(self.account_sid, self.auth_token)
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with aiohttp.ClientSession(auth=auth, timeout=timeout) as session:
                async with session.post(self.url, data=self.build_payload(user, code)) as resp:
                    if resp.status >= 400:
                        body = await resp.text()
                        logger.error("Twilio вернул %s для %s: %s", resp.status, user.phone, body)
                        raise NotificationError()
        except aiohttp.ClientError as e:
            logger.error("Не удалось отправить SMS на %s: %s", user.phone, e)
            raise NotificationError() from e

        logger.info("Код входа отправлен по SMS на %s", user.phone)


def get_notifier() -> Notifier:
    if settings.NOTIFIER == "twilio":
        if not (settings.TWILIO_ACCOUNT_SID and settings.TWILIO_AUTH_TOKEN and settings.TWILIO_FROM):
            raise RuntimeError("NOTIFIER=twilio requires TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN and TWILIO_FROM")
        return TwilioSmsNotifier(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN, settings.TWILIO_FROM)
    if settings.NOTIFIER == "log":
        return LogNotifier()
    raise RuntimeError(f"Unknown NOTIFIER: {settings.NOTIFIER}")
