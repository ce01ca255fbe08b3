"""GramBot -- facade over the Telegram Bot API.

Inbound, it keeps the update being served (from a webhook body or a polled
batch) in an :class:`~grambot.store.UpdateStore` and exposes it through
:mod:`grambot.accessors`.  Outbound, every remote method funnels through
:meth:`GramBot.call`, which delegates the HTTP round trip to
:class:`~grambot.transport.TransportClient` and decodes the JSON reply.

Nothing on the request path raises: transport failures and undecodable
replies come back as values (``{"ok": False, ...}`` and ``{}``).
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from core.error_sink import ErrorSink
from core.logger import GrambotLogger
from grambot.accessors import UpdateView
from grambot.exceptions import ConfigurationError
from grambot.models import InputFile, ProxyConfig
from grambot.store import UpdateStore
from grambot.transport import TransportClient

logger = GrambotLogger.get_logger()

API_URL = "https://api.telegram.org"

_TOKEN_FORMAT = re.compile(r"\d+:[A-Za-z0-9_-]+")


class GramBot:
    """Client for one bot token.

    An instance owns its update store and is meant for a single caller at a
    time; it does no locking.  Use one instance per thread, or synchronise
    externally.
    """

    def __init__(
        self,
        bot_token: str,
        log_errors: bool = True,
        proxy: Union[ProxyConfig, Mapping[str, Any], None] = None,
        verify_tls: bool = True,
        error_sink: Optional[ErrorSink] = None,
        update: Optional[Dict[str, Any]] = None,
        timeout: int = TransportClient._DEFAULT_TIMEOUT,
    ) -> None:
        """Create a client bound to *bot_token*.

        Args:
            bot_token: Token issued by @BotFather (``<bot id>:<secret>``).
            log_errors: Report API replies to *error_sink*.
            proxy: Proxy settings as a :class:`ProxyConfig` or a mapping with
                ``url``, ``port``, ``type`` and ``auth`` keys.
            verify_tls: Verify server certificates; ``False`` opts into
                insecure connections.
            error_sink: Where failed replies are reported.
            update: Update to serve initially, e.g. an already-decoded webhook body.
            timeout: Default HTTP timeout in seconds.

        Raises:
            ConfigurationError: If the token or proxy settings are unusable.
        """
        if not bot_token or not isinstance(bot_token, str):
            raise ConfigurationError("bot_token", "a bot token is required")
        if not _TOKEN_FORMAT.fullmatch(bot_token):
            raise ConfigurationError("bot_token", "expected '<bot id>:<secret>'")

        self._bot_token = bot_token
        self._base_url = f"{API_URL}/bot{bot_token}"
        self._file_url = f"{API_URL}/file/bot{bot_token}"
        self._proxy = _build_proxy(proxy)
        self._transport = TransportClient(
            proxy=self._proxy,
            verify_tls=verify_tls,
            log_errors=log_errors,
            error_sink=error_sink,
            timeout=timeout,
        )
        self.store = UpdateStore(update)

    @property
    def proxy(self) -> Optional[ProxyConfig]:
        return self._proxy

    # ------------------------------------------------------------------
    #  Generic dispatch
    # ------------------------------------------------------------------

    def call(
        self,
        endpoint: str,
        params: Optional[Mapping[str, Any]] = None,
        uses_body: bool = True,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Invoke a remote method and return the decoded reply.

        With ``uses_body=False`` a parameter-less GET is sent.  A reply that is
        not a JSON object decodes to ``{}``.
        """
        url = f"{self._base_url}/{endpoint.lstrip('/')}"
        raw = self._transport.send(
            url,
            params if uses_body else {},
            is_post=uses_body,
            current_update=self.store.data or None,
            timeout=timeout,
        )
        try:
            decoded = json.loads(raw)
        except ValueError:
            logger.warning("Telegram API reply is not JSON", extra={"api_endpoint": endpoint})
            return {}
        return decoded if isinstance(decoded, dict) else {}

    endpoint = call

    # ------------------------------------------------------------------
    #  Long polling
    # ------------------------------------------------------------------

    def poll(self, offset: int = 0, limit: int = 100, timeout: int = 0, advance: bool = True) -> Dict[str, Any]:
        """Fetch pending updates with ``getUpdates``.

        The decoded envelope is kept in the store for :meth:`select_update`.
        With *advance*, a follow-up ``getUpdates`` at ``max(update_id) + 1``
        acknowledges the batch so it is not delivered again; its reply is
        discarded.  Without it the same batch can be fetched again.
        """
        content = {"offset": offset, "limit": limit, "timeout": timeout}
        read_timeout = timeout + self._transport.timeout
        self.store.updates = self.call("getUpdates", content, timeout=read_timeout)

        batch = self.store.batch
        if advance and batch:
            ids = [u["update_id"] for u in batch if isinstance(u, dict) and "update_id" in u]
            if ids:
                next_offset = max(ids) + 1
                self.call(
                    "getUpdates",
                    {"offset": next_offset, "limit": 1, "timeout": timeout},
                    timeout=read_timeout,
                )
                self.store.offset = next_offset
                logger.debug("Acknowledged updates", extra={"count": len(batch), "offset": next_offset})

        return self.store.updates

    get_updates = poll

    def select_update(self, index: int) -> Dict[str, Any]:
        """Serve update *index* of the last polled batch.

        Raises:
            IndexError: If *index* is outside the batch.
        """
        return self.store.select(index)

    serve_update = select_update

    def update_count(self) -> int:
        return self.store.count()

    # ------------------------------------------------------------------
    #  Current update
    # ------------------------------------------------------------------

    def load_update(self, body: Union[bytes, str, Dict[str, Any], None]) -> Dict[str, Any]:
        """Decode a webhook request body and serve it."""
        return self.store.load(body)

    def get_data(self) -> Dict[str, Any]:
        return self.store.data

    def set_data(self, data: Dict[str, Any]) -> None:
        self.store.data = data

    @property
    def current_update(self) -> Dict[str, Any]:
        return self.store.data

    def view(self) -> UpdateView:
        """Classify the current update and wrap it for field access."""
        return UpdateView.of(self.store.data)

    @staticmethod
    def respond_success() -> Tuple[str, int]:
        """Body and status code to acknowledge a webhook delivery."""
        return json.dumps({"status": "success"}), 200

    # ------------------------------------------------------------------
    #  Files and webhooks
    # ------------------------------------------------------------------

    def get_file(self, file_id: str) -> Dict[str, Any]:
        """Get basic info about a file and prepare it for downloading."""
        return self.call("getFile", {"file_id": file_id})

    def download_file(self, telegram_file_path: str, local_file_path: str) -> None:
        """Download a file from the Telegram file servers to *local_file_path*.

        Args:
            telegram_file_path: The ``file_path`` returned by :meth:`get_file`.
            local_file_path: Destination on the local filesystem.

        Raises:
            requests.HTTPError: If the HTTP response status is not 2xx.
            requests.RequestException: On transport-level failures.
        """
        url = f"{self._file_url}/{telegram_file_path.lstrip('/')}"
        logger.info("Downloading file", extra={"file_path": telegram_file_path, "local_path": local_file_path})
        self._transport.download(url, local_file_path)

    def set_webhook(self, url: str, certificate: Optional[InputFile] = None) -> Dict[str, Any]:
        """Specify a url to receive incoming updates via an outgoing webhook."""
        content: Dict[str, Any] = {"url": url}
        if certificate is not None:
            content["certificate"] = certificate
        return self.call("setWebhook", content)

    def delete_webhook(self) -> Dict[str, Any]:
        """Remove webhook integration to switch back to :meth:`poll`."""
        return self.call("deleteWebhook", uses_body=False)

    def get_me(self) -> Dict[str, Any]:
        """Test the bot's auth token; returns the bot's User object."""
        return self.call("getMe", uses_body=False)

    # ------------------------------------------------------------------
    #  Messages and media
    # ------------------------------------------------------------------

    def send_message(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        """Send a text message."""
        return self.call("sendMessage", content)

    def forward_message(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("forwardMessage", content)

    def send_photo(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("sendPhoto", content)

    def send_audio(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("sendAudio", content)

    def send_document(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("sendDocument", content)

    def send_animation(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        """Send a GIF or H.264/MPEG-4 AVC video without sound."""
        return self.call("sendAnimation", content)

    def send_sticker(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("sendSticker", content)

    def send_video(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("sendVideo", content)

    def send_voice(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("sendVoice", content)

    def send_video_note(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("sendVideoNote", content)

    def send_location(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("sendLocation", content)

    def edit_message_live_location(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("editMessageLiveLocation", content)

    def stop_message_live_location(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("stopMessageLiveLocation", content)

    def send_media_group(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        """Send a group of photos or videos as an album."""
        return self.call("sendMediaGroup", content)

    def send_venue(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("sendVenue", content)

    def send_contact(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("sendContact", content)

    def send_chat_action(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        """Tell the user something is happening on the bot's side (typing, uploading...)."""
        return self.call("sendChatAction", content)

    def edit_message_text(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("editMessageText", content)

    def edit_message_caption(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("editMessageCaption", content)

    def edit_message_reply_markup(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("editMessageReplyMarkup", content)

    def delete_message(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("deleteMessage", content)

    # ------------------------------------------------------------------
    #  Chat administration
    # ------------------------------------------------------------------

    def kick_chat_member(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("kickChatMember", content)

    def leave_chat(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("leaveChat", content)

    def unban_chat_member(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("unbanChatMember", content)

    def get_chat(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("getChat", content)

    def get_chat_administrators(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("getChatAdministrators", content)

    def get_chat_members_count(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("getChatMembersCount", content)

    def get_chat_member(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("getChatMember", content)

    def restrict_chat_member(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("restrictChatMember", content)

    def promote_chat_member(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("promoteChatMember", content)

    def export_chat_invite_link(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("exportChatInviteLink", content)

    def set_chat_photo(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("setChatPhoto", content)

    def delete_chat_photo(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("deleteChatPhoto", content)

    def set_chat_title(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("setChatTitle", content)

    def set_chat_description(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("setChatDescription", content)

    def pin_chat_message(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("pinChatMessage", content)

    def unpin_chat_message(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("unpinChatMessage", content)

    def set_chat_sticker_set(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("setChatStickerSet", content)

    def delete_chat_sticker_set(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("deleteChatStickerSet", content)

    # ------------------------------------------------------------------
    #  Users, inline mode, games
    # ------------------------------------------------------------------

    def get_user_profile_photos(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("getUserProfilePhotos", content)

    def answer_inline_query(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("answerInlineQuery", content)

    def answer_callback_query(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        """Acknowledge a callback query so the spinner disappears for the user."""
        return self.call("answerCallbackQuery", content)

    def set_game_score(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("setGameScore", content)

    # ------------------------------------------------------------------
    #  Stickers
    # ------------------------------------------------------------------

    def get_sticker_set(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("getStickerSet", content)

    def upload_sticker_file(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("uploadStickerFile", content)

    def create_new_sticker_set(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("createNewStickerSet", content)

    def add_sticker_to_set(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("addStickerToSet", content)

    def set_sticker_position_in_set(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("setStickerPositionInSet", content)

    def delete_sticker_from_set(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("deleteStickerFromSet", content)

    # ------------------------------------------------------------------
    #  Payments
    # ------------------------------------------------------------------

    def send_invoice(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("sendInvoice", content)

    def answer_shipping_query(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("answerShippingQuery", content)

    def answer_pre_checkout_query(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        return self.call("answerPreCheckoutQuery", content)


def _build_proxy(proxy: Union[ProxyConfig, Mapping[str, Any], None]) -> Optional[ProxyConfig]:
    """Validate proxy settings, turning model errors into :class:`ConfigurationError`."""
    if proxy is None or isinstance(proxy, ProxyConfig):
        return proxy
    if not proxy:
        return None
    try:
        return ProxyConfig.model_validate(dict(proxy))
    except ValidationError as exc:
        raise ConfigurationError("proxy", str(exc)) from exc
