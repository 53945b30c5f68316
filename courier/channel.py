from __future__ import annotations

import functools
from datetime import timedelta
from typing import TYPE_CHECKING, Any, Collection, Dict, List, Optional

from . import messaging
from .abc import MessageChannel, Snowflake
from .action import AuditableAction, DeferredAction, decode_none
from .composer import MessageComposer
from .embeds import Embed
from .enums import ChannelType
from .errors import InvalidArgument, InvalidState, MissingPermissions, VerificationLevelError
from .http import Response
from .messaging import MessageHistory
from .models import Member, Message, Webhook
from .permissions import PermissionOverwrite
from .routes import Channels, Messages, Webhooks
from .utils import is_blank, parse_snowflake, time_snowflake

if TYPE_CHECKING:
    from .models import Guild


BULK_DELETE_MIN = 2
BULK_DELETE_MAX = 100
BULK_DELETE_MAX_AGE_DAYS = 14


class GuildChannel(Snowflake):
    def __init__(self, id: str, guild: "Guild") -> None:
        self._id = str(id)
        self.guild = guild
        self.name: Optional[str] = None
        self.position_raw = 0
        self.overwrites: Dict[str, PermissionOverwrite] = {}
        self.disposed = False

    @property
    def id(self) -> str:
        return self._id

    @property
    def _client(self) -> Any:
        return self.guild.client

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, type(self)):
            return NotImplemented
        return self is other or self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def check_permission(self, *names: str, message: Optional[str] = None) -> None:
        self._client.permission_checker.check(self.guild.self_member, self, *names, message=message)

    def check_verification(self) -> None:
        if not self.guild.check_verification():
            raise VerificationLevelError(self.guild.verification_level)

    def set_name(self, name: Optional[str]) -> "GuildChannel":
        self.name = name
        return self

    def set_position(self, position: int) -> "GuildChannel":
        self.position_raw = int(position)
        return self

    def dispose(self) -> bool:
        self.overwrites.clear()
        self.disposed = True
        return True


@functools.total_ordering
class TextChannel(GuildChannel, MessageChannel):
    """A guild text channel.

    Every request-building method checks the client's permissions in this
    channel first and raises before any action is constructed.
    """

    def __init__(self, id: str, guild: "Guild") -> None:
        super().__init__(id, guild)
        self.topic: Optional[str] = None
        self.last_message_id: Optional[str] = None

    def __repr__(self) -> str:
        return f"<TextChannel id={self.id} name={self.name!r}>"

    def __str__(self) -> str:
        return f"TC:{self.name}({self.id})"

    @property
    def type(self) -> ChannelType:
        return ChannelType.text

    @property
    def mention(self) -> str:
        return f"<#{self.id}>"

    @property
    def is_nsfw(self) -> bool:
        name = self.name or ""
        return name == "nsfw" or name.startswith("nsfw-")

    @property
    def members(self) -> List[Member]:
        return [m for m in self.guild.members.values() if m.has_permission(self, "view_channel")]

    @property
    def position(self) -> int:
        for index, channel in enumerate(self.guild.text_channels):
            if channel is self:
                return index
        raise AssertionError(f"{self} is missing from the text channels of {self.guild}")

    @property
    def latest_message_id(self) -> str:
        if self.last_message_id is None:
            raise InvalidState("No last message id found.")
        return self.last_message_id

    @property
    def has_latest_message(self) -> bool:
        return self.last_message_id is not None

    # -- setters used by the entity builder --

    def set_topic(self, topic: Optional[str]) -> "TextChannel":
        self.topic = topic
        return self

    def set_last_message_id(self, message_id: Optional[str]) -> "TextChannel":
        self.last_message_id = str(message_id) if message_id is not None else None
        return self

    # -- ordering --

    def compare_to(self, other: "TextChannel") -> int:
        if self is other:
            return 0
        if self.guild != other.guild:
            raise InvalidArgument("Cannot compare TextChannels that aren't from the same guild!")
        if self.position_raw != other.position_raw:
            return other.position_raw - self.position_raw
        # At equal positions the older channel ranks first.
        mine = parse_snowflake(self.id)
        theirs = parse_snowflake(other.id)
        return (mine > theirs) - (mine < theirs)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, TextChannel):
            return NotImplemented
        return self.compare_to(other) < 0

    # -- channel commands --

    def can_talk(self, member: Optional[Member] = None) -> bool:
        if member is None:
            member = self.guild.self_member
        if member.guild != self.guild:
            raise InvalidArgument("Provided Member is not from the Guild that this TextChannel is part of.")
        return member.has_permission(self, "view_channel", "send_messages")

    def get_webhooks(self) -> DeferredAction[List[Webhook]]:
        self.check_permission("manage_webhooks")

        route = Channels.GET_WEBHOOKS.compile(self.id)
        builder = self._client.entity_builder

        def decode(response: Response) -> List[Webhook]:
            return builder.create_webhooks(response.as_array())

        return DeferredAction(self._client, route, decoder=decode)

    def delete_webhook_by_id(self, webhook_id: str) -> AuditableAction[None]:
        if is_blank(webhook_id):
            raise InvalidArgument("webhook id may not be blank")
        if not self.guild.self_member.has_permission(self, "manage_webhooks"):
            raise MissingPermissions("manage_webhooks")

        route = Webhooks.DELETE_WEBHOOK.compile(webhook_id)
        return AuditableAction(self._client, route, decoder=decode_none)

    def delete_messages(self, messages: Collection[Message]) -> DeferredAction[None]:
        if not messages:
            raise InvalidArgument("Messages collection may not be empty")
        return self.delete_messages_by_ids([message.id for message in messages])

    def delete_messages_by_ids(self, message_ids: Collection[str]) -> DeferredAction[None]:
        self.check_permission(
            "manage_messages",
            message="Must have manage_messages in order to bulk delete messages in this channel regardless of author.",
        )
        ids = [str(message_id) if message_id is not None else None for message_id in message_ids]
        if len(ids) < BULK_DELETE_MIN or len(ids) > BULK_DELETE_MAX:
            raise InvalidArgument(
                f"Must provide at least {BULK_DELETE_MIN} or at most {BULK_DELETE_MAX} messages to be deleted."
            )

        now = self._client.clock()
        two_weeks_ago = time_snowflake(now - timedelta(days=BULK_DELETE_MAX_AGE_DAYS))
        for message_id in ids:
            if is_blank(message_id):
                raise InvalidArgument("Message id in message_ids may not be blank")
            if parse_snowflake(message_id) <= two_weeks_ago:
                raise InvalidArgument(f"Message Id provided was older than 2 weeks. Id: {message_id}")

        route = Messages.DELETE_MESSAGES.compile(self.id)
        return DeferredAction(self._client, route, {"messages": ids}, decoder=decode_none)

    def clear_reactions_by_id(self, message_id: str) -> DeferredAction[None]:
        if is_blank(message_id):
            raise InvalidArgument("Message ID may not be blank")
        self.check_permission("manage_messages")

        route = Messages.REMOVE_ALL_REACTIONS.compile(self.id, message_id)
        return DeferredAction(self._client, route, decoder=decode_none)

    # -- gated message-channel operations --

    def _check_embed_links(self, content: Any, embed: Optional[Embed]) -> None:
        if isinstance(content, Message):
            if not content.content and content.embeds:
                self.check_permission("embed_links")
        elif not content and embed is not None:
            self.check_permission("embed_links")

    def send_message(
        self,
        content: Optional[str | Message] = None,
        *,
        embed: Optional[Embed] = None,
        tts: bool = False,
        nonce: Optional[str] = None,
    ) -> MessageComposer:
        self.check_verification()
        self.check_permission("view_channel")
        self.check_permission("send_messages")
        self._check_embed_links(content, embed)
        return messaging.send_message(self._client, self.id, content, embed=embed, tts=tts, nonce=nonce)

    def send_file(self, data: Any, filename: Optional[str] = None, message: Optional[Message] = None) -> MessageComposer:
        self.check_verification()
        self.check_permission("view_channel")
        self.check_permission("send_messages")
        self.check_permission("attach_files")
        return messaging.send_file(self._client, self.id, data, filename, message)

    def get_message_by_id(self, message_id: str) -> DeferredAction[Message]:
        self.check_permission("view_channel")
        self.check_permission("read_message_history")
        return messaging.get_message_by_id(self._client, self.id, message_id)

    def delete_message_by_id(self, message_id: str) -> AuditableAction[None]:
        if is_blank(message_id):
            raise InvalidArgument("messageId may not be blank")
        self.check_permission("view_channel")
        return messaging.delete_message_by_id(self._client, self.id, message_id)

    def get_history_around(self, message_id: str, limit: int) -> DeferredAction[MessageHistory]:
        self.check_permission("view_channel")
        self.check_permission("read_message_history")
        return messaging.get_history_around(self._client, self.id, message_id, limit)

    def pin_message_by_id(self, message_id: str) -> DeferredAction[None]:
        self.check_permission("view_channel", message="You cannot pin a message in a channel you can't access.")
        self.check_permission("manage_messages", message="You need manage_messages to pin or unpin messages.")
        return messaging.pin_message_by_id(self._client, self.id, message_id)

    def unpin_message_by_id(self, message_id: str) -> DeferredAction[None]:
        self.check_permission("view_channel", message="You cannot unpin a message in a channel you can't access.")
        self.check_permission("manage_messages", message="You need manage_messages to pin or unpin messages.")
        return messaging.unpin_message_by_id(self._client, self.id, message_id)

    def get_pinned_messages(self) -> DeferredAction[List[Message]]:
        self.check_permission(
            "view_channel",
            message="Cannot get the pinned message of a channel without view_channel access.",
        )
        return messaging.get_pinned_messages(self._client, self.id)

    def add_reaction_by_id(self, message_id: str, emoji: Any) -> DeferredAction[None]:
        self.check_permission("add_reactions")
        self.check_permission("read_message_history")
        return messaging.add_reaction_by_id(self._client, self.id, message_id, emoji)

    def edit_message_by_id(
        self,
        message_id: str,
        new_content: Optional[str | Message] = None,
        *,
        embed: Optional[Embed] = None,
    ) -> MessageComposer:
        if new_content is None and embed is None:
            raise InvalidArgument("Message may not be None")
        self.check_permission("view_channel")
        self.check_permission("send_messages")
        self._check_embed_links(new_content, embed)
        return messaging.edit_message_by_id(self._client, self.id, message_id, new_content, embed=embed)

    def dispose(self) -> bool:
        self.guild.text_channel_map.pop(self.id, None)
        return super().dispose()
