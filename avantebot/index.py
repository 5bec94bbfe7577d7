from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union
import re
import traceback

from flask import Flask, request

from avantebot.config import (
    ConfigError,
    configure as configure_app_config,
    load_bot_config,
)
from avantebot.services.image_search import build_providers, fetch_image_links
from avantebot.services.rotation import image_rotation
from avantebot.services.telegram import (
    TelegramApiError,
    answer_callback_query,
    build_inline_button,
    get_telegram_webhook_info,
    send_msg,
    send_photo,
    set_telegram_webhook,
)
from avantebot.services.wiki import get_wiki_summary
from avantebot.utils import (
    CAPTION_MAX_LENGTH,
    callback_data_fits,
    truncate_text,
    url_serves_image,
)


NEXT_IMAGE_PREFIX = "NEXT_IMAGE:"
MORE_IMAGES_LABEL = "🖼️ Mais Imagens"
WORKER_THREADS = 8

MSG_IMAGE_USAGE = "Por favor, especifique o que você quer buscar. Ex: /image gatos"
MSG_WIKI_USAGE = "Por favor, especifique o que você quer buscar. Ex: /wiki Brasil"
MSG_NO_IMAGES = "Nenhuma imagem encontrada para '{query}'."
MSG_ROTATION_RESET = "Você já viu todas as imagens! Resetando o ciclo para '{query}'."
MSG_PHOTO_REJECTED = (
    "Desculpe, não consegui enviar essa imagem. "
    "Pode ser um link inválido ou temporariamente indisponível."
)
MSG_PHOTO_UNEXPECTED = "Ocorreu um erro inesperado ao tentar enviar a imagem."

ChatId = Union[int, str]


def get_help() -> str:
    return """comandos disponíveis:

/image <termo> - busca uma imagem, use o botão "Mais Imagens" para ver outra
/wiki <termo> - resumo da Wikipédia sobre o termo
/teste <texto> - repete o texto
/help - mostra esta mensagem
"""


def admin_report(
    message: str,
    error: Optional[Exception] = None,
    extra_context: Optional[Dict] = None,
) -> None:
    """Admin reporting with optional error details and extra context"""
    try:
        admin_chat_id = load_bot_config().get("admin_chat_id")
    except ConfigError:
        admin_chat_id = None

    formatted_message = f"AvanteBot admin report: {message}"

    if extra_context:
        context_details = "\n\nAdditional Context:"
        for key, value in extra_context.items():
            context_details += f"\n{key}: {value}"
        formatted_message += context_details

    if error:
        error_details = f"\n\nError Type: {type(error).__name__}"
        error_details += f"\nError Message: {str(error)}"
        error_details += f"\n\nTraceback:\n{traceback.format_exc()}"
        formatted_message += error_details

    print(formatted_message)
    if admin_chat_id:
        send_msg(admin_chat_id, truncate_text(formatted_message))


configure_app_config(admin_reporter=admin_report)


def parse_command(message_text: str, bot_name: Optional[str] = None) -> Tuple[str, str]:
    """Parse command and argument text from input"""
    message_text = message_text.strip()
    if not message_text:
        return "", ""

    split_message = re.split(r"\s+", message_text, maxsplit=1)
    argument = split_message[1].strip() if len(split_message) > 1 else ""

    # "/image@SomeBot" in groups: only answer commands addressed to us
    command, _, addressee = split_message[0].lower().partition("@")
    if addressee and bot_name and addressee != bot_name.lstrip("@").lower():
        return "", argument

    return command, argument


def build_image_caption(query: str, username: Optional[str]) -> str:
    caption = f'Resultado para: "{query}"'
    if username:
        caption += f" pedido por @{username}"
    return truncate_text(caption, CAPTION_MAX_LENGTH)


def build_more_images_markup(query: str) -> Optional[Dict[str, Any]]:
    callback_data = f"{NEXT_IMAGE_PREFIX}{query}"
    if not callback_data_fits(callback_data):
        print(f"[IMAGE] query too long for a callback button, omitting it: '{query}'")
        return None
    return build_inline_button(MORE_IMAGES_LABEL, callback_data)


def send_next_image(chat_id: ChatId, query: str, username: Optional[str] = None) -> None:
    """Search images for *query* and send one the chat has not seen yet."""
    query = (query or "").strip()
    if not query:
        send_msg(chat_id, MSG_IMAGE_USAGE)
        return

    providers = build_providers(load_bot_config())
    pool = fetch_image_links(query, providers)
    if not pool:
        send_msg(chat_id, MSG_NO_IMAGES.format(query=query))
        return

    chosen_url, was_reset = image_rotation.select(query, pool)
    if was_reset:
        send_msg(chat_id, MSG_ROTATION_RESET.format(query=query))

    if not url_serves_image(chosen_url):
        send_msg(chat_id, MSG_PHOTO_REJECTED)
        return

    try:
        send_photo(
            chat_id,
            chosen_url,
            caption=build_image_caption(query, username),
            reply_markup=build_more_images_markup(query),
        )
    except TelegramApiError as api_error:
        print(
            f"[IMAGE] Telegram rejected photo for query '{query}'. "
            f"URL: {chosen_url} ({api_error.description})"
        )
        send_msg(chat_id, MSG_PHOTO_REJECTED)
    except Exception as e:
        admin_report(
            "Unexpected error while sending photo",
            e,
            {"query": query, "url": chosen_url},
        )
        send_msg(chat_id, MSG_PHOTO_UNEXPECTED)


def handle_image_command(message: Mapping[str, Any], argument: str) -> None:
    user = message.get("from") or {}
    send_next_image(message["chat"]["id"], argument, user.get("username"))


def handle_wiki_command(message: Mapping[str, Any], argument: str) -> None:
    chat_id = message["chat"]["id"]
    if not argument:
        send_msg(chat_id, MSG_WIKI_USAGE)
        return
    lang = load_bot_config().get("wiki_lang") or "pt"
    send_msg(chat_id, truncate_text(get_wiki_summary(argument, lang)))


def handle_echo_command(message: Mapping[str, Any], argument: str) -> None:
    user = message.get("from") or {}
    name = user.get("first_name") or user.get("username") or "Alguém"
    send_msg(
        message["chat"]["id"],
        truncate_text(f"{name} said: {argument}\nTry /image <term> to search for an image!"),
    )


def handle_help_command(message: Mapping[str, Any], argument: str) -> None:
    send_msg(message["chat"]["id"], get_help())


def initialize_commands() -> Dict[str, Callable[[Mapping[str, Any], str], None]]:
    """Map command name -> handler(message, argument)"""
    return {
        "/image": handle_image_command,
        "/wiki": handle_wiki_command,
        "/teste": handle_echo_command,
        "/start": handle_help_command,
        "/help": handle_help_command,
    }


def handle_msg(message: Mapping[str, Any]) -> str:
    text = message.get("text")
    if not isinstance(text, str) or not text.startswith("/"):
        return "ignored"

    command, argument = parse_command(text, load_bot_config().get("bot_username"))
    handler = initialize_commands().get(command)
    if handler is None:
        return "ignored"

    handler(message, argument)
    return "ok"


def handle_callback_query(callback_query: Mapping[str, Any]) -> str:
    callback_id = callback_query.get("id")
    if callback_id:
        answer_callback_query(str(callback_id))

    data = callback_query.get("data")
    if not isinstance(data, str) or not data.startswith(NEXT_IMAGE_PREFIX):
        return "ignored"

    query = data[len(NEXT_IMAGE_PREFIX):]
    user = callback_query.get("from") or {}
    chat = (callback_query.get("message") or {}).get("chat") or {}
    chat_id = chat.get("id", user.get("id"))
    if chat_id is None:
        print(f"[CALLBACK] no chat to reply to for callback {callback_id}")
        return "ignored"

    send_next_image(chat_id, query, user.get("username"))
    return "ok"


def handle_update(update: Mapping[str, Any]) -> str:
    """Process one Telegram update; never raises."""
    try:
        callback_query = update.get("callback_query")
        if isinstance(callback_query, Mapping):
            return handle_callback_query(callback_query)

        message = update.get("message")
        if isinstance(message, Mapping) and isinstance(message.get("text"), str):
            return handle_msg(message)

        kinds = [key for key in update.keys() if key != "update_id"]
        print(f"[WEBHOOK] unhandled update type: {kinds}")
        return "ignored"
    except Exception as e:
        admin_report(
            "Unhandled error while processing update",
            e,
            {"update_id": update.get("update_id")},
        )
        return "error"


_executor = ThreadPoolExecutor(max_workers=WORKER_THREADS, thread_name_prefix="update")


def dispatch_update(update: Mapping[str, Any]) -> Future:
    """Hand the update to a worker so the webhook can answer right away."""
    return _executor.submit(handle_update, update)


def verify_webhook() -> bool:
    config = load_bot_config()
    webhook_info = get_telegram_webhook_info(config["telegram_token"])
    if "error" in webhook_info:
        return False
    return webhook_info.get("url") == config["webhook_url"]


def create_app() -> Flask:
    """Build the Flask app; raises ConfigError when mandatory settings are missing."""
    config = load_bot_config()

    app = Flask(__name__)

    @app.route("/", methods=["GET"])
    def health() -> Tuple[str, int]:
        return "AvanteBot is online!", 200

    @app.route("/bot/setWebhook", methods=["GET"])
    def update_webhook() -> Tuple[str, int]:
        webhook_url = config["webhook_url"]
        if set_telegram_webhook(webhook_url):
            print(f"[WEBHOOK] set to {webhook_url}")
            return f"Webhook set to {webhook_url}", 200
        admin_report("Failed to set webhook", None, {"webhook_url": webhook_url})
        return "Failed to set webhook.", 500

    @app.route("/bot/checkWebhook", methods=["GET"])
    def check_webhook() -> Tuple[str, int]:
        if verify_webhook():
            return "Webhook checked", 200
        return "Webhook check error", 400

    @app.route("/bot", methods=["POST"])
    def webhook() -> Tuple[str, int]:
        update = request.get_json(silent=True)
        if not isinstance(update, dict):
            return "Invalid JSON", 400

        try:
            dispatch_update(update)
        except Exception as e:
            admin_report(
                "Could not dispatch update",
                e,
                {"update_id": update.get("update_id")},
            )
        return "Ok", 200

    return app
