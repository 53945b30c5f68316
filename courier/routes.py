from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Tuple
from urllib.parse import urlencode

from .errors import InvalidArgument


@dataclass(frozen=True)
class Route:
    method: str
    path: str

    @property
    def path_params(self) -> tuple[str, ...]:
        return tuple(re.findall(r"{(\w+)}", self.path))

    def compile(self, *params: str) -> "CompiledRoute":
        names = self.path_params
        if len(params) != len(names):
            raise InvalidArgument(
                f"Route {self.method} {self.path} expects {len(names)} params, got {len(params)}"
            )
        values = tuple(str(p) for p in params)
        return CompiledRoute(self, values, self.path.format(**dict(zip(names, values))))


@dataclass(frozen=True)
class CompiledRoute:
    route: Route
    params: Tuple[str, ...]
    path: str

    @property
    def method(self) -> str:
        return self.route.method

    @property
    def template(self) -> str:
        return self.route.path

    def with_query(self, **query: Any) -> "CompiledRoute":
        separator = "&" if "?" in self.path else "?"
        return CompiledRoute(self.route, self.params, f"{self.path}{separator}{urlencode(query)}")

    def __str__(self) -> str:
        return f"{self.method} {self.path}"


class Channels:
    GET_WEBHOOKS = Route("GET", "/channels/{channel_id}/webhooks")


class Messages:
    SEND_MESSAGE = Route("POST", "/channels/{channel_id}/messages")
    EDIT_MESSAGE = Route("PATCH", "/channels/{channel_id}/messages/{message_id}")
    GET_MESSAGE = Route("GET", "/channels/{channel_id}/messages/{message_id}")
    DELETE_MESSAGE = Route("DELETE", "/channels/{channel_id}/messages/{message_id}")
    DELETE_MESSAGES = Route("POST", "/channels/{channel_id}/messages/bulk-delete")
    GET_MESSAGE_HISTORY = Route("GET", "/channels/{channel_id}/messages")
    GET_PINNED_MESSAGES = Route("GET", "/channels/{channel_id}/pins")
    ADD_PINNED_MESSAGE = Route("PUT", "/channels/{channel_id}/pins/{message_id}")
    REMOVE_PINNED_MESSAGE = Route("DELETE", "/channels/{channel_id}/pins/{message_id}")
    ADD_REACTION = Route("PUT", "/channels/{channel_id}/messages/{message_id}/reactions/{emoji}/@me")
    REMOVE_ALL_REACTIONS = Route("DELETE", "/channels/{channel_id}/messages/{message_id}/reactions")


class Webhooks:
    DELETE_WEBHOOK = Route("DELETE", "/webhooks/{webhook_id}")
