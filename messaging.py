import asyncio
import base64
import hashlib
import hmac
import logging
import random
from typing import Protocol

import httpx

logger = logging.getLogger(__name__)

LINE_API_BASE = "https://api.line.me/v2/bot/message"
MAX_MESSAGES_PER_CALL = 5
SIGNATURE_HEADER = "X-Line-Signature"


class MessagingError(RuntimeError):
    def __init__(self, status_code: int, body: str):
        super().__init__(f"LINE API returned {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class Messenger(Protocol):
    async def reply_message(self, reply_token: str, messages: dict | list[dict]) -> None: ...

    async def push_message(self, to: str, messages: dict | list[dict]) -> None: ...


def as_message_list(messages: dict | list[dict]) -> list[dict]:
    out = [messages] if isinstance(messages, dict) else list(messages)
    if not out or len(out) > MAX_MESSAGES_PER_CALL:
        raise ValueError(f"LINE accepts 1..{MAX_MESSAGES_PER_CALL} messages per call, got {len(out)}")
    return out


def verify_signature(body: bytes, signature: str | None, channel_secret: str) -> bool:
    if not signature:
        return False
    digest = hmac.new(channel_secret.encode("utf-8"), body, hashlib.sha256).digest()
    expected = base64.b64encode(digest).decode("ascii")
    return hmac.compare_digest(expected, signature)


class LineMessagingClient:
    """Messenger backed by the LINE Messaging API."""

    def __init__(self, channel_access_token: str, *, base_url: str = LINE_API_BASE,
                 transport: httpx.AsyncBaseTransport | None = None):
        self._token = channel_access_token
        self._base_url = base_url.rstrip("/")
        self._transport = transport
        self._session: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._session is None:
            timeout = httpx.Timeout(10.0, connect=5.0)
            self._session = httpx.AsyncClient(
                timeout=timeout,
                transport=self._transport,
                headers={"Authorization": f"Bearer {self._token}"},
            )
        return self._session

    async def _post(self, path: str, payload: dict) -> None:
        client = await self._get_client()
        resp = await client.post(f"{self._base_url}/{path}", json=payload)
        if resp.status_code >= 400:
            raise MessagingError(resp.status_code, resp.text)

    async def reply_message(self, reply_token: str, messages: dict | list[dict]) -> None:
        await self._post("reply", {"replyToken": reply_token, "messages": as_message_list(messages)})

    async def push_message(self, to: str, messages: dict | list[dict]) -> None:
        await self._post("push", {"to": to, "messages": as_message_list(messages)})

    async def aclose(self) -> None:
        if self._session is not None:
            await self._session.aclose()
            self._session = None


async def push_with_retry(messenger: Messenger, to: str, messages: dict | list[dict],
                          retries: int = 3, base: float = 0.2, max_sleep: float = 2.0) -> None:
    """Push with exponential backoff; the last error is re-raised once retries run out."""
    last = None
    for i in range(retries):
        try:
            return await messenger.push_message(to, messages)
        except (MessagingError, httpx.HTTPError) as e:
            last = e
            # 4xx other than rate limiting will not succeed on retry
            if isinstance(e, MessagingError) and 400 <= e.status_code < 500 and e.status_code != 429:
                break
            if i == retries - 1:
                break
            sleep = min(max_sleep, base * (2 ** i) + random.uniform(0, base))
            logger.warning("push to %s failed (attempt %d/%d): %s", to, i + 1, retries, e)
            await asyncio.sleep(sleep)
    raise last
