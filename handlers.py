import asyncio
import json
import logging
from functools import lru_cache
from pathlib import Path

from business_days import count_business_days
from classifier import Intent, classify, normalize_text
from config import Settings
from messaging import Messenger, push_with_retry

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
BALANCE_FLEX_PATH = BASE_DIR / "flex" / "balance.json"

REQUIRED_LEAVE_FIELDS = ("userId", "type", "startDate", "endDate")


# -----------------------
# Reply builders
# -----------------------
@lru_cache(maxsize=1)
def balance_bubble() -> dict:
    return json.loads(BALANCE_FLEX_PATH.read_text(encoding="utf-8"))


def balance_messages() -> list[dict]:
    return [
        {"type": "text", "text": "สรุปวันลาคงเหลือของคุณ (ตัวอย่าง):"},
        {"type": "flex", "altText": "สรุปวันลาคงเหลือ", "contents": balance_bubble()},
    ]


def leave_form_message(base_url: str) -> dict:
    return {
        "type": "template",
        "altText": "แบบฟอร์มยื่นลา",
        "template": {
            "type": "buttons",
            "title": "ยื่นลางาน",
            "text": "กรอกข้อมูลใน LIFF",
            "actions": [{"type": "uri", "label": "เปิดแบบฟอร์ม", "uri": f"{base_url}/liff/"}],
        },
    }


def echo_message(text: str) -> dict:
    return {"type": "text", "text": f"คุณพิมพ์: {text}"}


def leave_confirmation_text(leave_type: str, start: str, end: str, days: int, reason: str | None) -> str:
    return (
        "คำขอลาได้รับแล้ว\n"
        f"ประเภท: {leave_type}\n"
        f"ช่วง: {start} → {end} ({days} วันทำงาน)\n"
        f"เหตุผล: {reason or '-'}\n"
        "(ตัวอย่างเดโม)"
    )


# -----------------------
# Webhook events
# -----------------------
async def handle_event(event: dict, messenger: Messenger, settings: Settings) -> None:
    if event.get("type") == "message" and (event.get("message") or {}).get("type") == "text":
        text = normalize_text(event["message"].get("text"))
        reply_token = event.get("replyToken")
        intent = classify(text)

        if intent is Intent.BALANCE:
            return await messenger.reply_message(reply_token, balance_messages())
        if intent is Intent.LEAVE_REQUEST:
            return await messenger.reply_message(reply_token, leave_form_message(settings.base_url))
        return await messenger.reply_message(reply_token, echo_message(text))

    # postback: approve/reject workflow would go here
    return None


async def dispatch_events(events: list[dict], messenger: Messenger, settings: Settings) -> list:
    """Run every event handler concurrently and wait for all of them to settle."""
    results = await asyncio.gather(
        *(handle_event(ev, messenger, settings) for ev in events),
        return_exceptions=True,
    )
    for ev, res in zip(events, results):
        if isinstance(res, Exception):
            kind = ev.get("type") if isinstance(ev, dict) else type(ev).__name__
            logger.error("handler failed for %s event", kind, exc_info=res)
    return results


# -----------------------
# Leave submission
# -----------------------
async def submit_leave(payload: dict, messenger: Messenger, settings: Settings) -> tuple[int, dict]:
    if not isinstance(payload, dict) or not all(payload.get(f) for f in REQUIRED_LEAVE_FIELDS):
        return 400, {"ok": False, "error": "missing fields"}

    user_id = payload["userId"]
    start, end = payload["startDate"], payload["endDate"]
    days = count_business_days(start, end, settings.holidays)

    text = leave_confirmation_text(payload["type"], start, end, days, payload.get("reason"))
    try:
        await push_with_retry(messenger, user_id, {"type": "text", "text": text})
    except Exception:
        logger.exception("push failed for %s", user_id)

    return 200, {"ok": True, "days": days}
