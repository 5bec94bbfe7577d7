"""Thin wrappers around the Telegram Bot API."""

from __future__ import annotations

import json
from typing import Any, Dict, Optional, Union

import requests
from requests.exceptions import RequestException

from avantebot.config import load_bot_config

__all__ = [
    "TELEGRAM_API_URL",
    "TelegramApiError",
    "answer_callback_query",
    "build_inline_button",
    "get_telegram_webhook_info",
    "send_msg",
    "send_photo",
    "set_telegram_webhook",
]


TELEGRAM_API_URL = "https://api.telegram.org/bot{token}/{method}"
ChatId = Union[int, str]


class TelegramApiError(Exception):
    """Telegram refused a request or could not be reached."""

    def __init__(self, method: str, description: str, status_code: Optional[int] = None):
        super().__init__(f"{method} failed: {description}")
        self.method = method
        self.description = description
        self.status_code = status_code


def _api_url(method: str, token: Optional[str] = None) -> str:
    token = token or load_bot_config()["telegram_token"]
    return TELEGRAM_API_URL.format(token=token, method=method)


def build_inline_button(text: str, callback_data: str) -> Dict[str, Any]:
    return {"inline_keyboard": [[{"text": text, "callback_data": callback_data}]]}


def send_msg(
    chat_id: ChatId,
    msg: str,
    reply_markup: Optional[Dict[str, Any]] = None,
) -> Optional[int]:
    payload: Dict[str, Any] = {"chat_id": chat_id, "text": msg}
    if reply_markup is not None:
        payload["reply_markup"] = reply_markup

    try:
        response = requests.post(_api_url("sendMessage"), json=payload, timeout=5)
        response.raise_for_status()
        data = response.json()
        if data.get("ok") and isinstance(data.get("result"), dict):
            message_id = data["result"].get("message_id")
            if isinstance(message_id, int):
                return message_id
    except (RequestException, ValueError, KeyError) as exc:
        print(f"[TELEGRAM] sendMessage to {chat_id} failed: {exc}")
        return None

    return None


def send_photo(
    chat_id: ChatId,
    photo_url: str,
    caption: str = "",
    reply_markup: Optional[Dict[str, Any]] = None,
) -> int:
    """Send *photo_url* by reference; Telegram downloads the file itself.

    Raises :class:`TelegramApiError` when Telegram rejects the photo, which
    usually means a dead link or a file that is not really an image.
    """
    payload: Dict[str, Any] = {"chat_id": chat_id, "photo": photo_url}
    if caption:
        payload["caption"] = caption
    if reply_markup is not None:
        payload["reply_markup"] = reply_markup

    try:
        response = requests.post(_api_url("sendPhoto"), json=payload, timeout=15)
    except RequestException as exc:
        raise TelegramApiError("sendPhoto", str(exc)) from exc

    try:
        data = response.json()
    except ValueError:
        data = {}

    if response.status_code >= 400 or not data.get("ok"):
        description = data.get("description") or f"HTTP {response.status_code}"
        raise TelegramApiError("sendPhoto", description, response.status_code)

    result = data.get("result") or {}
    return int(result.get("message_id", 0))


def answer_callback_query(callback_query_id: str, text: Optional[str] = None) -> bool:
    payload: Dict[str, Any] = {"callback_query_id": callback_query_id}
    if text:
        payload["text"] = text
    try:
        response = requests.post(
            _api_url("answerCallbackQuery"), json=payload, timeout=5
        )
        response.raise_for_status()
    except RequestException as exc:
        print(f"[TELEGRAM] answerCallbackQuery {callback_query_id} failed: {exc}")
        return False
    return True


def get_telegram_webhook_info(token: str) -> Dict[str, Any]:
    try:
        telegram_response = requests.get(_api_url("getWebhookInfo", token), timeout=5)
        telegram_response.raise_for_status()
        return telegram_response.json()["result"]
    except (RequestException, ValueError, KeyError) as request_error:
        return {"error": str(request_error)}


def set_telegram_webhook(webhook_url: str) -> bool:
    token = load_bot_config()["telegram_token"]
    parameters = {
        "url": webhook_url,
        "allowed_updates": json.dumps(["message", "callback_query"]),
        "max_connections": 8,
    }
    try:
        telegram_response = requests.get(
            _api_url("setWebhook", token), params=parameters, timeout=5
        )
        telegram_response.raise_for_status()
        return bool(telegram_response.json().get("ok"))
    except (RequestException, ValueError) as exc:
        print(f"[TELEGRAM] setWebhook failed: {exc}")
        return False
