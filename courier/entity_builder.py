from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List

from .channel import TextChannel
from .embeds import Embed
from .enums import VerificationLevel
from .models import Attachment, Guild, Member, Message, Role, User, Webhook
from .permissions import PermissionOverwrite, Permissions
from .utils import parse_time


LOGGER = logging.getLogger("courier")


class EntityBuilder:
    """Turns decoded JSON payloads into entities bound to a client."""

    def __init__(self, client: Any) -> None:
        self._client = client

    def create_user(self, data: Dict[str, Any]) -> User:
        return User.from_dict(data)

    def create_role(self, guild: Guild, data: Dict[str, Any]) -> Role:
        role = Role.from_dict(data)
        guild.roles[role.id] = role
        return role

    def create_member(self, guild: Guild, data: Dict[str, Any]) -> Member:
        user = self.create_user(data["user"])
        roles = [guild.roles[str(role_id)] for role_id in data.get("roles") or [] if str(role_id) in guild.roles]
        member = Member(
            user=user,
            guild=guild,
            roles=roles,
            nick=data.get("nick"),
            joined_at=parse_time(data.get("joined_at")),
            raw=data,
            _client=self._client,
        )
        guild.members[member.id] = member
        return member

    def create_guild(self, data: Dict[str, Any]) -> Guild:
        guild = Guild(
            self._client,
            data["id"],
            name=data.get("name"),
            owner_id=str(data["owner_id"]) if data.get("owner_id") is not None else None,
        )
        guild.verification_level = VerificationLevel(data.get("verification_level") or 0)
        for item in data.get("roles") or []:
            self.create_role(guild, item)
        for item in data.get("members") or []:
            self.create_member(guild, item)
        for item in data.get("channels") or []:
            if item.get("type", 0) == 0:
                self.create_text_channel(guild, item)
        self._client._guilds[guild.id] = guild
        return guild

    def create_text_channel(self, guild: Guild, data: Dict[str, Any]) -> TextChannel:
        channel_id = str(data["id"])
        channel = guild.text_channel_map.get(channel_id)
        if channel is None:
            channel = TextChannel(channel_id, guild)
            guild.text_channel_map[channel_id] = channel

        channel.set_name(data.get("name"))
        channel.set_position(data.get("position") or 0)
        channel.set_topic(data.get("topic"))
        channel.set_last_message_id(data.get("last_message_id"))

        channel.overwrites.clear()
        for item in data.get("permission_overwrites") or []:
            channel.overwrites[str(item["id"])] = PermissionOverwrite.from_pair(
                Permissions(int(item.get("allow") or 0)),
                Permissions(int(item.get("deny") or 0)),
            )
        return channel

    def create_message(self, data: Dict[str, Any]) -> Message:
        return Message(
            id=str(data["id"]),
            channel_id=str(data["channel_id"]) if data.get("channel_id") is not None else None,
            content=data.get("content") or "",
            tts=bool(data.get("tts")),
            pinned=bool(data.get("pinned")),
            author=self.create_user(data["author"]) if data.get("author") else None,
            embeds=[Embed.from_dict(item) for item in data.get("embeds") or []],
            attachments=[Attachment.from_dict(item, client=self._client) for item in data.get("attachments") or []],
            raw=data,
            _client=self._client,
        )

    def create_webhook(self, data: Dict[str, Any]) -> Webhook:
        return Webhook(
            id=str(data["id"]),
            type=data.get("type"),
            guild_id=data.get("guild_id"),
            channel_id=data.get("channel_id"),
            name=data.get("name"),
            avatar=data.get("avatar"),
            token=data.get("token"),
            user=self.create_user(data["user"]) if data.get("user") else None,
            raw=data,
        )

    def create_webhooks(self, array: Iterable[Any]) -> List[Webhook]:
        webhooks: List[Webhook] = []
        for item in array:
            try:
                webhooks.append(self.create_webhook(item))
            except (KeyError, TypeError, AttributeError, ValueError):
                LOGGER.exception("Skipping webhook that failed to decode: %r", item)
        return webhooks
