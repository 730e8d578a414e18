from __future__ import annotations

import re
from typing import Any, Optional

CLINICAL_FIELDS = ("symptoms", "history", "assessment", "medications", "plan")

SYSTEM_PROMPT = (
    "You are a clinical NLP engine. Convert the given transcript into structured clinical data. "
    "Extract symptoms, medical history, assessment, medications, and plan. Ignore non-medical conversation. "
    'Return ONLY valid JSON with this structure: '
    '{ "symptoms": [], "history": [], "assessment": [], "medications": [], "plan": [] }'
)

_FENCE_OPEN = re.compile(r"^```[a-zA-Z]*\s*")
_FENCE_CLOSE = re.compile(r"```\s*$")


def extract_text(content: Optional[list[Any]]) -> str:
    """Join the text parts of a chat message content list."""
    if not isinstance(content, list):
        return ""
    parts = []
    for part in content:
        if not isinstance(part, dict):
            continue
        text = (part.get("text") or "").strip()
        if text:
            parts.append(text)
    return " ".join(parts).strip()


def reply_text(data: dict[str, Any]) -> str:
    """Pick the assistant reply out of a chat response.

    Tries the structured message content, then the flat ``text`` field,
    then the last chatbot turn in ``chat_history``.
    """
    message = data.get("message")
    text = extract_text(message.get("content")) if isinstance(message, dict) else ""

    if not text and isinstance(data.get("text"), str):
        text = data["text"].strip()

    history = data.get("chat_history")
    if not text and isinstance(history, list):
        for entry in reversed(history):
            if not isinstance(entry, dict):
                continue
            if str(entry.get("role") or "").lower() == "chatbot":
                text = str(entry.get("message") or "").strip()
                break

    return strip_code_fence(text)


def strip_code_fence(text: str) -> str:
    fenced = text.strip()
    if fenced.startswith("```"):
        return _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", fenced, count=1)).strip()
    return fenced


def ensure_string_list(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, list):
        items = [str(item).strip() for item in value]
    else:
        items = [str(value).strip()]
    return [item for item in items if item]
