import pytest
from httpx import ASGITransport, AsyncClient
from tripharmony.db.session import get_db, init_models, make_engine, make_session_factory
from tripharmony.main import app
from tripharmony.services.notifier import get_notifier


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    async def notify(self, user, code):
        self.sent.append((user.phone, code))

    @property
    def last_code(self):
        return self.sent[-1][1]


@pytest.fixture
async def session_factory(tmp_path):
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_models(engine)
    yield make_session_factory(engine)
    await engine.dispose()


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
async def client(session_factory, notifier):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def login(client, notifier):
    """Проходит оба шага входа и возвращает токен."""
    async def _login(phone="+38763123456"):
        await client.post("/api/login/", json={"phone": phone})
        resp = await client.post("/api/login/verify", json={"phone": phone, "login_code": notifier.last_code})
        assert resp.status_code == 200
        return resp.text
    return _login
