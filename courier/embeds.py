from __future__ import annotations

from typing import Any, Dict, List, Optional

from .enums import AccountType


EMBED_MAX_LENGTH_BOT = 6000
EMBED_MAX_LENGTH_CLIENT = 2000


def max_length_for(account_type: AccountType) -> int:
    if account_type == AccountType.bot:
        return EMBED_MAX_LENGTH_BOT
    return EMBED_MAX_LENGTH_CLIENT


class Embed:
    def __init__(
        self,
        *,
        title: Optional[str] = None,
        description: Optional[str] = None,
        url: Optional[str] = None,
        color: Optional[int] = None,
        timestamp: Optional[str] = None,
    ) -> None:
        self.title = title
        self.description = description
        self.url = url
        self.color = color
        self.timestamp = timestamp
        self._footer: Dict[str, Any] = {}
        self._image: Dict[str, Any] = {}
        self._thumbnail: Dict[str, Any] = {}
        self._author: Dict[str, Any] = {}
        self._fields: List[Dict[str, Any]] = []

    def __repr__(self) -> str:
        return f"<Embed title={self.title!r} length={self.length}>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Embed):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def set_footer(self, *, text: Optional[str] = None, icon_url: Optional[str] = None) -> "Embed":
        if text is not None:
            self._footer["text"] = text
        if icon_url is not None:
            self._footer["icon_url"] = icon_url
        return self

    def set_image(self, *, url: str) -> "Embed":
        self._image["url"] = url
        return self

    def set_thumbnail(self, *, url: str) -> "Embed":
        self._thumbnail["url"] = url
        return self

    def set_author(
        self,
        *,
        name: str,
        url: Optional[str] = None,
        icon_url: Optional[str] = None,
    ) -> "Embed":
        self._author["name"] = name
        if url is not None:
            self._author["url"] = url
        if icon_url is not None:
            self._author["icon_url"] = icon_url
        return self

    def add_field(self, *, name: str, value: str, inline: bool = False) -> "Embed":
        self._fields.append({"name": name, "value": value, "inline": inline})
        return self

    @property
    def fields(self) -> List[Dict[str, Any]]:
        return list(self._fields)

    @property
    def length(self) -> int:
        """Number of user-visible characters counted against the embed cap."""
        total = len(self.title or "") + len(self.description or "")
        for item in self._fields:
            total += len(item.get("name") or "") + len(item.get("value") or "")
        total += len(self._footer.get("text") or "")
        total += len(self._author.get("name") or "")
        return total

    def is_empty(self) -> bool:
        return self.length == 0

    def is_sendable(self, account_type: AccountType) -> bool:
        return self.length <= max_length_for(account_type)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if self.title is not None:
            payload["title"] = self.title
        if self.description is not None:
            payload["description"] = self.description
        if self.url is not None:
            payload["url"] = self.url
        if self.color is not None:
            payload["color"] = self.color
        if self.timestamp is not None:
            payload["timestamp"] = self.timestamp
        if self._footer:
            payload["footer"] = dict(self._footer)
        if self._image:
            payload["image"] = dict(self._image)
        if self._thumbnail:
            payload["thumbnail"] = dict(self._thumbnail)
        if self._author:
            payload["author"] = dict(self._author)
        if self._fields:
            payload["fields"] = [dict(item) for item in self._fields]
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Embed":
        embed = cls(
            title=data.get("title"),
            description=data.get("description"),
            url=data.get("url"),
            color=data.get("color"),
            timestamp=data.get("timestamp"),
        )
        if "footer" in data:
            embed._footer = dict(data.get("footer") or {})
        if "image" in data:
            embed._image = dict(data.get("image") or {})
        if "thumbnail" in data:
            embed._thumbnail = dict(data.get("thumbnail") or {})
        if "author" in data:
            embed._author = dict(data.get("author") or {})
        if "fields" in data:
            embed._fields = list(data.get("fields") or [])
        return embed
