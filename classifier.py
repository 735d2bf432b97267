import re
import unicodedata as ud
from enum import Enum

BALANCE_KEYWORD = "ยอดลา"  # leave balance
LEAVE_KEYWORD = "ลา"  # leave
REQUEST_LEAVE_KEYWORD = "ขอลา"  # request leave

LEAVE_WORD_RE = re.compile(rf"\b{LEAVE_KEYWORD}\b")


class Intent(str, Enum):
    BALANCE = "balance"
    LEAVE_REQUEST = "leave_request"
    ECHO = "echo"


def normalize_text(raw: str | None) -> str:
    return ud.normalize("NFC", raw or "").strip()


def classify(text: str) -> Intent:
    """Match normalized message text to an intent, first match wins."""
    if text.startswith(BALANCE_KEYWORD):
        return Intent.BALANCE
    if text == LEAVE_KEYWORD or REQUEST_LEAVE_KEYWORD in text or LEAVE_WORD_RE.search(text):
        return Intent.LEAVE_REQUEST
    return Intent.ECHO
