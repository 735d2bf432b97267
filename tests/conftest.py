"""Pytest configuration and fixtures."""

import os

import pytest
from fastapi.testclient import TestClient

from config import Settings


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Keep tests away from a developer's real .env credentials."""
    os.environ.setdefault("LINE_CHANNEL_ACCESS_TOKEN", "test-token")
    os.environ.setdefault("LINE_CHANNEL_SECRET", "test-secret")
    os.environ.setdefault("LOG_LEVEL", "WARNING")
    yield


class FakeMessenger:
    """Records reply/push calls instead of talking to LINE."""

    def __init__(self, fail_push: Exception | None = None, fail_reply: Exception | None = None):
        self.replies = []
        self.pushes = []
        self.fail_push = fail_push
        self.fail_reply = fail_reply

    async def reply_message(self, reply_token, messages):
        if self.fail_reply:
            raise self.fail_reply
        self.replies.append((reply_token, messages))

    async def push_message(self, to, messages):
        if self.fail_push:
            raise self.fail_push
        self.pushes.append((to, messages))


@pytest.fixture
def settings():
    return Settings(
        channel_access_token="test-token",
        channel_secret="test-secret",
        port=3000,
        base_url="https://bot.example.com",
        liff_id="1234-abcd",
    )


@pytest.fixture
def messenger():
    return FakeMessenger()


@pytest.fixture
def client(settings, messenger):
    from main import create_app

    return TestClient(create_app(settings, messenger))
