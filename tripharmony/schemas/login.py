import re
from pydantic import BaseModel, Field, field_validator
from tripharmony.core.security import LOGIN_CODE_MIN, LOGIN_CODE_MAX

# Только ASCII-цифры с необязательным "+" в начале, без нормализации кода страны
NUMERIC_PHONE = re.compile(r"\+?[0-9]+")

class LoginRequestSchema(BaseModel):
    phone: str = Field(..., min_length=10, examples=["+38763123456"])

    @field_validator("phone")
    @classmethod
    def phone_must_be_numeric(cls, value: str) -> str:
        if not NUMERIC_PHONE.fullmatch(value):
            raise ValueError("The phone must be a number.")
        return value

class LoginVerifySchema(LoginRequestSchema):
    login_code: int = Field(..., ge=LOGIN_CODE_MIN, le=LOGIN_CODE_MAX, examples=[123456])

class MessageResponse(BaseModel):
    message: str
