import hashlib
import secrets
import string

LOGIN_CODE_MIN = 111111
LOGIN_CODE_MAX = 999999

TOKEN_LENGTH = 40
_TOKEN_ALPHABET = string.ascii_letters + string.digits

def generate_login_code() -> int:
    """Случайный шестизначный код в диапазоне 111111-999999 включительно."""
    return LOGIN_CODE_MIN + secrets.randbelow(LOGIN_CODE_MAX - LOGIN_CODE_MIN + 1)

def generate_token_secret(length: int = TOKEN_LENGTH) -> str:
    return "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(length))

def hash_token(secret: str) -> str:
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()

def split_plain_token(plain_token: str) -> tuple[int | None, str]:
    """
    Разбирает токен вида "<id>|<secret>".
    Если id не указан или не число, возвращает (None, secret).
    """
    token_id, sep, secret = plain_token.partition("|")
    if not sep:
        return None, plain_token
    if not token_id.isdigit():
        return None, secret
    return int(token_id), secret
