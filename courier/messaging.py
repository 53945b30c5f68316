"""Channel operations shared by every message-bearing channel.

These functions only validate their own arguments and build the action. Any
permission gating belongs to the channel type that calls them.
"""

from __future__ import annotations

import os
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from .action import AuditableAction, DeferredAction, decode_none
from .composer import MessageComposer
from .embeds import Embed
from .errors import InvalidArgument
from .files import File
from .http import Response
from .models import Message
from .routes import Messages
from .utils import is_blank


class MessageHistory:
    def __init__(self, channel_id: str, messages: Optional[List[Message]] = None) -> None:
        self.channel_id = channel_id
        self._history: Dict[str, Message] = {}
        for message in messages or []:
            self._history[message.id] = message

    def __repr__(self) -> str:
        return f"<MessageHistory channel_id={self.channel_id} size={self.size}>"

    def __len__(self) -> int:
        return len(self._history)

    def __iter__(self):
        return iter(self._history.values())

    @property
    def size(self) -> int:
        return len(self._history)

    @property
    def retrieved_history(self) -> List[Message]:
        return list(self._history.values())

    def get_message_by_id(self, message_id: str) -> Optional[Message]:
        return self._history.get(str(message_id))


def _check_id(value: Optional[str], name: str) -> None:
    if is_blank(value):
        raise InvalidArgument(f"{name} may not be blank")


def _encode_emoji(emoji: Any) -> str:
    emoji_id = getattr(emoji, "id", None)
    if emoji_id:
        name = getattr(emoji, "name", None) or "emoji"
        return quote(f"{name}:{emoji_id}", safe="")
    return quote(str(getattr(emoji, "name", None) or emoji), safe="")


def _compose(composer: MessageComposer, content: Any, embed: Any, tts: bool, nonce: Optional[str]) -> MessageComposer:
    if isinstance(content, Message):
        composer.apply_fields(content)
    else:
        composer.set_content(content)
    if embed is not None:
        composer.set_embed(embed)
    if tts:
        composer.set_tts(True)
    if nonce is not None:
        composer.set_nonce(nonce)
    return composer


def send_message(
    client: Any,
    channel_id: str,
    content: Optional[str | Message] = None,
    *,
    embed: Optional[Embed] = None,
    tts: bool = False,
    nonce: Optional[str] = None,
) -> MessageComposer:
    route = Messages.SEND_MESSAGE.compile(channel_id)
    return _compose(MessageComposer(client, route), content, embed, tts, nonce)


def send_file(
    client: Any,
    channel_id: str,
    data: Any,
    filename: Optional[str] = None,
    message: Optional[Message] = None,
) -> MessageComposer:
    route = Messages.SEND_MESSAGE.compile(channel_id)
    composer = MessageComposer(client, route)
    if filename is None and hasattr(data, "read") and not isinstance(data, File):
        filename = os.path.basename(getattr(data, "name", "") or "") or None
    composer.add_attachment(data, filename)
    return composer.apply_fields(message)


def edit_message_by_id(
    client: Any,
    channel_id: str,
    message_id: str,
    new_content: Optional[str | Message] = None,
    *,
    embed: Optional[Embed] = None,
) -> MessageComposer:
    _check_id(message_id, "Message ID")
    route = Messages.EDIT_MESSAGE.compile(channel_id, message_id)
    return _compose(MessageComposer(client, route), new_content, embed, False, None)


def get_message_by_id(client: Any, channel_id: str, message_id: str) -> DeferredAction[Message]:
    _check_id(message_id, "Message ID")
    route = Messages.GET_MESSAGE.compile(channel_id, message_id)
    return DeferredAction(
        client,
        route,
        decoder=lambda response: client.entity_builder.create_message(response.as_object()),
    )


def delete_message_by_id(client: Any, channel_id: str, message_id: str) -> AuditableAction[None]:
    _check_id(message_id, "Message ID")
    route = Messages.DELETE_MESSAGE.compile(channel_id, message_id)
    return AuditableAction(client, route, decoder=decode_none)


def get_history_around(client: Any, channel_id: str, message_id: str, limit: int) -> DeferredAction[MessageHistory]:
    _check_id(message_id, "Message ID")
    if limit < 1 or limit > 100:
        raise InvalidArgument("Provided limit was out of bounds. Minimum: 1, Max: 100. Provided: %d" % limit)

    route = Messages.GET_MESSAGE_HISTORY.compile(channel_id).with_query(around=message_id, limit=limit)

    def decode(response: Response) -> MessageHistory:
        builder = client.entity_builder
        return MessageHistory(channel_id, [builder.create_message(item) for item in response.as_array()])

    return DeferredAction(client, route, decoder=decode)


def pin_message_by_id(client: Any, channel_id: str, message_id: str) -> DeferredAction[None]:
    _check_id(message_id, "Message ID")
    return DeferredAction(client, Messages.ADD_PINNED_MESSAGE.compile(channel_id, message_id))


def unpin_message_by_id(client: Any, channel_id: str, message_id: str) -> DeferredAction[None]:
    _check_id(message_id, "Message ID")
    return DeferredAction(client, Messages.REMOVE_PINNED_MESSAGE.compile(channel_id, message_id))


def get_pinned_messages(client: Any, channel_id: str) -> DeferredAction[List[Message]]:
    route = Messages.GET_PINNED_MESSAGES.compile(channel_id)
    return DeferredAction(
        client,
        route,
        decoder=lambda response: [client.entity_builder.create_message(item) for item in response.as_array()],
    )


def add_reaction_by_id(client: Any, channel_id: str, message_id: str, emoji: Any) -> DeferredAction[None]:
    _check_id(message_id, "Message ID")
    if emoji is None or (isinstance(emoji, str) and is_blank(emoji)):
        raise InvalidArgument("Emoji may not be blank")
    route = Messages.ADD_REACTION.compile(channel_id, message_id, _encode_emoji(emoji))
    return DeferredAction(client, route)
