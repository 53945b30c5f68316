from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Optional

from .errors import MissingPermissions

if TYPE_CHECKING:
    from .channel import GuildChannel
    from .models import Member


PERMISSIONS: Dict[str, int] = {
    "create_instant_invite": 1 << 0,
    "kick_members": 1 << 1,
    "ban_members": 1 << 2,
    "administrator": 1 << 3,
    "manage_channels": 1 << 4,
    "manage_guild": 1 << 5,
    "add_reactions": 1 << 6,
    "view_audit_log": 1 << 7,
    "view_channel": 1 << 10,
    "send_messages": 1 << 11,
    "send_tts_messages": 1 << 12,
    "manage_messages": 1 << 13,
    "embed_links": 1 << 14,
    "attach_files": 1 << 15,
    "read_message_history": 1 << 16,
    "mention_everyone": 1 << 17,
    "use_external_emojis": 1 << 18,
    "connect": 1 << 20,
    "speak": 1 << 21,
    "mute_members": 1 << 22,
    "deafen_members": 1 << 23,
    "move_members": 1 << 24,
    "use_vad": 1 << 25,
    "change_nickname": 1 << 26,
    "manage_nicknames": 1 << 27,
    "manage_roles": 1 << 28,
    "manage_webhooks": 1 << 29,
    "manage_emojis": 1 << 30,
}

_ALL_PERMISSIONS = 0
for _bit in PERMISSIONS.values():
    _ALL_PERMISSIONS |= _bit


class Permissions:
    __slots__ = ("value",)

    def __init__(self, value: int = 0, **kwargs: bool) -> None:
        object.__setattr__(self, "value", int(value))
        if kwargs:
            self.update(**kwargs)

    def __repr__(self) -> str:
        return f"<Permissions value={self.value}>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Permissions):
            return NotImplemented
        return self.value == other.value

    def __hash__(self) -> int:
        return hash(self.value)

    def __int__(self) -> int:
        return int(self.value)

    def __getattr__(self, name: str) -> bool:
        if name in PERMISSIONS:
            return bool(self.value & PERMISSIONS[name])
        raise AttributeError(name)

    def __setattr__(self, name: str, value: bool) -> None:
        if name in PERMISSIONS:
            self._set(name, value)
            return
        object.__setattr__(self, name, value)

    def _set(self, name: str, enabled: bool) -> None:
        bit = PERMISSIONS.get(name)
        if bit is None:
            raise AttributeError(name)
        if enabled:
            object.__setattr__(self, "value", int(self.value) | bit)
        else:
            object.__setattr__(self, "value", int(self.value) & ~bit)

    def update(self, **kwargs: bool) -> None:
        for name, enabled in kwargs.items():
            if name not in PERMISSIONS:
                raise AttributeError(name)
            self._set(name, bool(enabled))

    def has(self, *names: str) -> bool:
        for name in names:
            if name not in PERMISSIONS:
                raise AttributeError(name)
            if not self.value & PERMISSIONS[name]:
                return False
        return True

    def apply(self, allow: "Permissions", deny: "Permissions") -> "Permissions":
        return Permissions((self.value & ~deny.value) | allow.value)

    @classmethod
    def none(cls) -> "Permissions":
        return cls(0)

    @classmethod
    def all(cls) -> "Permissions":
        return cls(_ALL_PERMISSIONS)


@dataclass
class PermissionOverwrite:
    allow: Permissions
    deny: Permissions

    def __init__(self, **kwargs: bool | None) -> None:
        object.__setattr__(self, "allow", Permissions.none())
        object.__setattr__(self, "deny", Permissions.none())
        for name, value in kwargs.items():
            self._set(name, value)

    def _set(self, name: str, value: bool | None) -> None:
        if name not in PERMISSIONS:
            raise AttributeError(name)
        if value is None:
            self.allow._set(name, False)
            self.deny._set(name, False)
        elif value:
            self.allow._set(name, True)
            self.deny._set(name, False)
        else:
            self.allow._set(name, False)
            self.deny._set(name, True)

    def is_empty(self) -> bool:
        return int(self.allow.value) == 0 and int(self.deny.value) == 0

    @classmethod
    def from_pair(cls, allow: Permissions, deny: Permissions) -> "PermissionOverwrite":
        overwrite = cls()
        object.__setattr__(overwrite, "allow", Permissions(int(allow.value)))
        object.__setattr__(overwrite, "deny", Permissions(int(deny.value)))
        return overwrite


class PermissionChecker:
    """Resolves what a member may do in a guild channel."""

    def compute(self, member: "Member", channel: "GuildChannel") -> Permissions:
        guild = channel.guild
        if guild.owner_id is not None and member.id == guild.owner_id:
            return Permissions.all()

        base = 0
        everyone = guild.roles.get(guild.id)
        if everyone is not None:
            base |= everyone.permissions.value
        for role in member.roles:
            base |= role.permissions.value
        if base & PERMISSIONS["administrator"]:
            return Permissions.all()

        resolved = Permissions(base)
        overwrites = channel.overwrites

        everyone_overwrite = overwrites.get(guild.id)
        if everyone_overwrite is not None:
            resolved = resolved.apply(everyone_overwrite.allow, everyone_overwrite.deny)

        allow = deny = 0
        for role in member.roles:
            overwrite = overwrites.get(role.id)
            if overwrite is not None:
                allow |= overwrite.allow.value
                deny |= overwrite.deny.value
        resolved = resolved.apply(Permissions(allow), Permissions(deny))

        member_overwrite = overwrites.get(member.id)
        if member_overwrite is not None:
            resolved = resolved.apply(member_overwrite.allow, member_overwrite.deny)
        return resolved

    def has(self, member: "Member", channel: "GuildChannel", *names: str) -> bool:
        return self.compute(member, channel).has(*names)

    def check(
        self,
        member: "Member",
        channel: "GuildChannel",
        *names: str,
        message: Optional[str] = None,
    ) -> None:
        resolved = self.compute(member, channel)
        for name in names:
            if not resolved.has(name):
                raise MissingPermissions(name, message)
