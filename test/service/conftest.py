import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from asgi_lifespan import LifespanManager

from access import AccessSettings, UsageAccounting
from agent import ReplyGenerationError
from service import create_app


class FakeReplyGenerator:
    """Stands in for the upstream model"""

    def __init__(self, reply: str = "Try: 'Is your name Wi-Fi? Because I'm feeling a connection.'"):
        self.reply = reply
        self.calls = []
        self.sampling = []
        self.fail = False

    async def generate_reply(self, messages, **sampling):
        self.calls.append(messages)
        self.sampling.append(sampling)
        if self.fail:
            raise ReplyGenerationError("Model call failed: RuntimeError")
        return self.reply


@pytest.fixture
def reply_generator():
    return FakeReplyGenerator()


@pytest.fixture
def settings():
    return AccessSettings(
        daily_limit_seconds=60,
        usage_accounting=UsageAccounting.FLAT,
        flat_usage_cost_seconds=30,
        rate_limit="5/minute",
        unknown_bucket_capacity_multiplier=5,
    )


@pytest_asyncio.fixture
async def app(settings, reply_generator):
    app = create_app(settings=settings, reply_generator=reply_generator)
    async with LifespanManager(app):
        yield app


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost:5000") as client:
        yield client
