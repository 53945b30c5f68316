from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from .embeds import Embed
from .enums import AccountType, VerificationLevel
from .errors import InvalidState
from .permissions import Permissions
from .utils import snowflake_time

if TYPE_CHECKING:
    from .channel import GuildChannel, TextChannel


@dataclass
class User:
    id: str
    username: Optional[str] = None
    discriminator: Optional[str] = None
    bot: bool = False
    verified: bool = False
    phone: Optional[str] = None
    raw: Dict[str, Any] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        if data is None:
            return cls(id="0", raw={})
        return cls(
            id=str(data.get("id")),
            username=data.get("username"),
            discriminator=data.get("discriminator"),
            bot=bool(data.get("bot") or False),
            verified=bool(data.get("verified") or False),
            phone=data.get("phone"),
            raw=data,
        )

    @property
    def mention(self) -> str:
        return f"<@{self.id}>"

    @property
    def created_at(self):
        return snowflake_time(self.id)

    def __str__(self) -> str:
        if self.discriminator:
            return f"{self.username}#{self.discriminator}"
        return self.username or self.id


@dataclass
class Role:
    id: str
    name: Optional[str] = None
    permissions: Permissions = field(default_factory=Permissions.none)
    position: int = 0
    raw: Dict[str, Any] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Role":
        perms = data.get("permissions")
        try:
            perms_value = int(perms) if perms is not None else 0
        except (TypeError, ValueError):
            perms_value = 0
        return cls(
            id=str(data.get("id")),
            name=data.get("name"),
            permissions=Permissions(perms_value),
            position=data.get("position") or 0,
            raw=data,
        )

    @property
    def mention(self) -> str:
        return f"<@&{self.id}>"


@dataclass
class Member:
    user: User
    guild: "Guild"
    roles: List[Role] = field(default_factory=list)
    nick: Optional[str] = None
    joined_at: Optional[datetime] = None
    raw: Dict[str, Any] = None
    _client: Any = field(default=None, repr=False)

    @property
    def id(self) -> str:
        return self.user.id

    def permissions_in(self, channel: "GuildChannel") -> Permissions:
        return self._client.permission_checker.compute(self, channel)

    def has_permission(self, channel: "GuildChannel", *names: str) -> bool:
        return self._client.permission_checker.has(self, channel, *names)


class Guild:
    def __init__(self, client: Any, id: str, name: Optional[str] = None, owner_id: Optional[str] = None) -> None:
        self._client = client
        self.id = str(id)
        self.name = name
        self.owner_id = owner_id
        self.verification_level = VerificationLevel.none
        self.roles: Dict[str, Role] = {}
        self.members: Dict[str, Member] = {}
        self.text_channel_map: Dict[str, "TextChannel"] = {}

    def __repr__(self) -> str:
        return f"<Guild id={self.id} name={self.name!r}>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Guild):
            return NotImplemented
        return self is other or self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def client(self) -> Any:
        return self._client

    @property
    def self_member(self) -> Member:
        user = self._client.user
        member = self.members.get(user.id) if user is not None else None
        if member is None:
            raise InvalidState(f"Client user is not a member of guild {self.id}")
        return member

    @property
    def text_channels(self) -> List["TextChannel"]:
        return sorted(self.text_channel_map.values())

    def check_verification(self) -> bool:
        """Whether the client account meets this guild's verification level.

        Bot accounts are exempt, as are accounts with a verified phone number.
        """
        client = self._client
        if client.account_type == AccountType.bot:
            return True
        user = client.user
        if user is None:
            return False
        if user.phone:
            return True

        level = self.verification_level
        if level >= VerificationLevel.very_high:
            return False
        now = client.clock()
        if level >= VerificationLevel.high:
            joined_at = self.self_member.joined_at
            if joined_at is None or now - joined_at < timedelta(minutes=10):
                return False
        if level >= VerificationLevel.medium:
            created_at = user.created_at
            if created_at is None or now - created_at < timedelta(minutes=5):
                return False
        if level >= VerificationLevel.low and not user.verified:
            return False
        return True

    def get_member(self, user_id: str) -> Optional[Member]:
        return self.members.get(str(user_id))

    def get_text_channel(self, channel_id: str) -> Optional["TextChannel"]:
        return self.text_channel_map.get(str(channel_id))


@dataclass
class Attachment:
    id: str
    filename: Optional[str] = None
    content_type: Optional[str] = None
    size: Optional[int] = None
    url: Optional[str] = None
    proxy_url: Optional[str] = None
    raw: Dict[str, Any] = None
    _client: Any = field(default=None, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], client: Any = None) -> "Attachment":
        return cls(
            id=str(data.get("id")),
            filename=data.get("filename"),
            content_type=data.get("content_type"),
            size=data.get("size"),
            url=data.get("url"),
            proxy_url=data.get("proxy_url"),
            raw=data,
            _client=client,
        )

    async def read(self) -> bytes:
        if not self._client:
            raise RuntimeError("Attachment has no client attached")
        if not self.url:
            raise InvalidState(f"Attachment {self.id} has no url")
        return await self._client.http.download(self.url)


@dataclass
class Message:
    id: str
    channel_id: Optional[str] = None
    content: str = ""
    tts: bool = False
    pinned: bool = False
    author: Optional[User] = None
    embeds: List[Embed] = field(default_factory=list)
    attachments: List[Attachment] = field(default_factory=list)
    raw: Dict[str, Any] = None
    _client: Any = field(default=None, repr=False)

    @property
    def created_at(self):
        return snowflake_time(self.id)


@dataclass
class Webhook:
    id: str
    type: Optional[int] = None
    guild_id: Optional[str] = None
    channel_id: Optional[str] = None
    name: Optional[str] = None
    avatar: Optional[str] = None
    token: Optional[str] = None
    user: Optional[User] = None
    raw: Dict[str, Any] = None
