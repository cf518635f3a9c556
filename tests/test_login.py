import re

import pytest
from sqlalchemy.future import select

from tripharmony.core.config import settings
from tripharmony.core.exceptions import NotificationError
from tripharmony.db.models.user import User
from tripharmony.services.notifier import get_notifier
from tripharmony.main import app

PHONE = "+38763123456"
ACK = {"message": "A login code has been sent to your phone number."}
FAILED = {"message": "Could not verify the login code."}


async def users_with_phone(session_factory, phone):
    async with session_factory() as session:
        result = await session.execute(select(User).where(User.phone == phone))
        return result.scalars().all()


async def test_full_login_flow(client, notifier, session_factory):
    resp = await client.post("/api/login/", json={"phone": PHONE})
    assert resp.status_code == 200
    assert resp.json() == ACK

    [user] = await users_with_phone(session_factory, PHONE)
    assert notifier.sent == [(PHONE, user.login_code)]
    assert 111111 <= user.login_code <= 999999

    resp = await client.post("/api/login/verify", json={"phone": PHONE, "login_code": user.login_code})
    assert resp.status_code == 200
    assert re.fullmatch(r"\d+\|[A-Za-z0-9]{40}", resp.text)

    [user] = await users_with_phone(session_factory, PHONE)
    assert user.login_code is None

    # ÐÐ¾Ð²ÑÐ¾ÑÐ½Ð¾Ðµ Ð¸ÑÐ¿Ð¾Ð»ÑÐ·Ð¾Ð²Ð°Ð½Ð¸Ðµ ÑÐ¾Ð³Ð¾ Ð¶Ðµ ÐºÐ¾Ð´Ð°
    resp = await client.post("/api/login/verify", json={"phone": PHONE, "login_code": notifier.last_code})
    assert resp.status_code == 401
    assert resp.json() == FAILED


async def test_request_for_existing_phone_overwrites_code(client, notifier, session_factory, monkeypatch):
    codes = iter([222222, 333333])
    monkeypatch.setattr("tripharmony.api.endpoints.login.generate_login_code", lambda: next(codes))

    await client.post("/api/login/", json={"phone": PHONE})
    resp = await client.post("/api/login/", json={"phone": PHONE})
    assert resp.json() == ACK

    [user] = await users_with_phone(session_factory, PHONE)
    assert user.login_code == 333333
    assert [code for _, code in notifier.sent] == [222222, 333333]

    resp = await client.post("/api/login/verify", json={"phone": PHONE, "login_code": 222222})
    assert resp.status_code == 401

    resp = await client.post("/api/login/verify", json={"phone": PHONE, "login_code": 333333})
    assert resp.status_code == 200


async def test_failure_does_not_reveal_unknown_phone(client, notifier):
    await client.post("/api/login/", json={"phone": PHONE})
    wrong = 111111 if notifier.last_code != 111111 else 111112

    wrong_code = await client.post("/api/login/verify", json={"phone": PHONE, "login_code": wrong})
    unknown_phone = await client.post("/api/login/verify", json={"phone": "0000000000", "login_code": notifier.last_code})

    assert wrong_code.status_code == unknown_phone.status_code == 401
    assert wrong_code.content == unknown_phone.content


async def test_verify_without_requested_code_fails(client, session_factory):
    resp = await client.post("/api/login/verify", json={"phone": PHONE, "login_code": 123456})
    assert resp.status_code == 401
    assert resp.json() == FAILED
    assert await users_with_phone(session_factory, PHONE) == []


async def test_login_code_as_numeric_string_is_accepted(client, notifier):
    await client.post("/api/login/", json={"phone": PHONE})
    resp = await client.post("/api/login/verify", json={"phone": PHONE, "login_code": str(notifier.last_code)})
    assert resp.status_code == 200


@pytest.mark.parametrize("payload, field", [
    ({}, "phone"),
    ({"phone": "123456789"}, "phone"),
    ({"phone": "38763abc456"}, "phone"),
    ({"phone": "+387 63 123 456"}, "phone"),
    ({"phone": "٣٨٧٦٣١٢٣٤٥٦"}, "phone"),
    ({"phone": "３８７６３１２３４５６"}, "phone"),
    ({"phone": "38763123456\n"}, "phone"),
    ({"phone": "38763+123456"}, "phone"),
    ({"phone": 38763123456}, "phone"),
])
async def test_login_request_validation(client, notifier, session_factory, payload, field):
    resp = await client.post("/api/login/", json=payload)
    assert resp.status_code == 422
    body = resp.json()
    assert field in body["errors"]
    assert body["message"]
    assert notifier.sent == []
    assert await users_with_phone(session_factory, payload.get("phone")) == []


@pytest.mark.parametrize("payload, field", [
    ({"phone": PHONE}, "login_code"),
    ({"phone": PHONE, "login_code": 111110}, "login_code"),
    ({"phone": PHONE, "login_code": 1000000}, "login_code"),
    ({"phone": PHONE, "login_code": "abcdef"}, "login_code"),
    ({"phone": "12345", "login_code": 123456}, "phone"),
])
async def test_verify_validation(client, payload, field):
    resp = await client.post("/api/login/verify", json=payload)
    assert resp.status_code == 422
    assert field in resp.json()["errors"]


async def test_expired_code_is_rejected(client, notifier, session_factory, monkeypatch):
    monkeypatch.setattr(settings, "LOGIN_CODE_TTL_MINUTES", 5)
    await client.post("/api/login/", json={"phone": PHONE})

    async with session_factory() as session:
        result = await session.execute(select(User).where(User.phone == PHONE))
        user = result.scalars().one()
        assert user.login_code_expires_at is not None
        user.login_code_expires_at = user.login_code_expires_at.replace(year=2000)
        await session.commit()

    resp = await client.post("/api/login/verify", json={"phone": PHONE, "login_code": notifier.last_code})
    assert resp.status_code == 401


async def test_notification_failure_is_reported(client):
    class FailingNotifier:
        async def notify(self, user, code):
            raise NotificationError()

    app.dependency_overrides[get_notifier] = lambda: FailingNotifier()
    resp = await client.post("/api/login/", json={"phone": PHONE})
    assert resp.status_code == 502
    assert resp.json() == {"message": "Could not deliver the login code."}


@pytest.mark.parametrize("login_code", [111111, 999999])
async def test_code_range_bounds_are_inclusive(client, login_code):
    # Граничные коды проходят валидацию и доходят до поиска пользователя
    resp = await client.post("/api/login/verify", json={"phone": PHONE, "login_code": login_code})
    assert resp.status_code == 401
    assert resp.json() == FAILED


async def test_boundary_code_can_be_consumed(client, monkeypatch):
    monkeypatch.setattr("tripharmony.api.endpoints.login.generate_login_code", lambda: 999999)
    await client.post("/api/login/", json={"phone": PHONE})

    resp = await client.post("/api/login/verify", json={"phone": PHONE, "login_code": 999999})
    assert resp.status_code == 200
