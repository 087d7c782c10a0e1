import os
import tempfile
import pytest
import pytest_asyncio

# Configure test environment (file backed sqlite so every session sees the same data)
os.environ.setdefault(
    'DATABASE_URL',
    'sqlite+aiosqlite:///' + os.path.join(tempfile.gettempdir(), 'private_messages_test.db'),
)

from private_messages.models import engine, init_models, drop_models  # noqa: E402
from private_messages.crud import create_user, send_message  # noqa: E402
from private_messages.auth import create_access_token  # noqa: E402


@pytest_asyncio.fixture(autouse=True)
async def db():
    await drop_models()
    await init_models()
    yield
    await drop_models()
    await engine.dispose()


@pytest_asyncio.fixture
async def alice():
    return await create_user('alice', 'Alice A')


@pytest_asyncio.fixture
async def bob():
    return await create_user('bob', 'Bob B')


@pytest_asyncio.fixture
async def carol():
    return await create_user('carol', 'Carol C')


@pytest_asyncio.fixture
async def message(alice, bob):
    """A fresh unread message from alice to bob."""
    return await send_message(alice.id, bob.id, 'hello bob')


@pytest.fixture
def auth_headers():
    def make(user):
        return {'Authorization': f"Bearer {create_access_token({'id': user.id, 'username': user.username})}"}
    return make
