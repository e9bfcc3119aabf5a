"""
utils/telegram_utils.py

Purpose: Telegram message builders

- Constructs text and inline-keyboard payloads
- Abstracts Bot API formatting (HTML parse mode)
- Keeps callback data within Telegram's 64-byte limit
"""

from typing import List, Dict, Any
import html

MAX_CALLBACK_DATA_BYTES = 64
MAX_BUTTON_TEXT = 40


def escape(text: Any) -> str:
    """Escapes user or chain supplied text for HTML parse mode."""
    return html.escape(str(text), quote=False)


def create_text_message(text: str, disable_preview: bool = True) -> Dict[str, Any]:
    """
    Creates a simple text message response.

    Args:
        text: Message text (Telegram HTML subset)
        disable_preview: Whether to suppress link previews

    Returns:
        Message payload dict
    """
    return {
        "text": text,
        "parse_mode": "HTML",
        "disable_web_page_preview": disable_preview,
    }


def callback_button(title: str, data: str) -> Dict[str, str]:
    if len(data.encode("utf-8")) > MAX_CALLBACK_DATA_BYTES:
        raise ValueError(f"Callback data too long: {data}")
    return {"text": title[:MAX_BUTTON_TEXT], "callback_data": data}


def url_button(title: str, url: str) -> Dict[str, str]:
    return {"text": title[:MAX_BUTTON_TEXT], "url": url}


def create_keyboard_message(
    text: str,
    rows: List[List[Dict[str, str]]],
    disable_preview: bool = True
) -> Dict[str, Any]:
    """
    Creates a message with an inline keyboard.

    Args:
        text: Body text
        rows: Keyboard rows, each a list of buttons built with
              callback_button() or url_button()

    Returns:
        Message payload with reply_markup

    Example:
        rows = [
            [callback_button("Browse", "browse_groups")],
            [url_button("Link wallet", "https://example.org/auth-redirect/1")]
        ]
    """
    payload = create_text_message(text, disable_preview=disable_preview)
    rows = [row for row in rows if row]
    if rows:
        payload["reply_markup"] = {"inline_keyboard": rows}
    return payload

