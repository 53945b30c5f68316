"""Shared fixtures: a fake transport, a client, and a guild with one text channel."""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from courier import Client, Permissions, Response
from courier.utils import time_snowflake


NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
GUILD_ID = str(time_snowflake(NOW - timedelta(days=900)))
SELF_ID = str(time_snowflake(NOW - timedelta(days=800)))
OTHER_ID = str(time_snowflake(NOW - timedelta(days=700)))
CHANNEL_ID = str(time_snowflake(NOW - timedelta(days=600)))

TEXT_PERMISSIONS = Permissions(
    view_channel=True,
    send_messages=True,
    manage_messages=True,
    embed_links=True,
    attach_files=True,
    read_message_history=True,
    add_reactions=True,
    manage_webhooks=True,
)


def snowflake_at(delta: timedelta) -> str:
    """Snowflake created ``delta`` before NOW."""
    return str(time_snowflake(NOW - delta))


class FakeTransport:
    """Records every submission and replays queued responses."""

    def __init__(self):
        self.calls = []
        self.responses = []
        self.downloads = {}
        self.started = False

    def queue(self, status=200, data=None, reason="OK"):
        self.responses.append(Response(status, reason, data))

    async def submit(self, route, body=None, *, reason=None):
        self.calls.append(SimpleNamespace(route=route, body=body, reason=reason))
        if self.responses:
            result = self.responses.pop(0)
            if isinstance(result, Exception):
                raise result
            return result
        return Response(204, "No Content", None)

    async def download(self, url):
        result = self.downloads[url]
        if isinstance(result, Exception):
            raise result
        return result

    def set_token(self, token):
        self.token = token

    async def start(self):
        self.started = True

    async def close(self):
        self.started = False


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def client(transport):
    client = Client("token", http=transport, clock=lambda: NOW)
    client.set_user({"id": SELF_ID, "username": "courier", "bot": True})
    return client


@pytest.fixture
def guild(client):
    return client.entity_builder.create_guild(
        {
            "id": GUILD_ID,
            "name": "guild",
            "owner_id": OTHER_ID,
            "roles": [
                {"id": GUILD_ID, "name": "@everyone", "permissions": str(TEXT_PERMISSIONS.value)},
            ],
            "members": [
                {"user": {"id": SELF_ID, "username": "courier", "bot": True}, "roles": []},
                {"user": {"id": OTHER_ID, "username": "owner"}, "roles": []},
            ],
            "channels": [
                {
                    "id": CHANNEL_ID,
                    "type": 0,
                    "name": "general",
                    "position": 0,
                    "topic": "talk here",
                    "last_message_id": None,
                },
            ],
        }
    )


@pytest.fixture
def channel(guild):
    return guild.get_text_channel(CHANNEL_ID)


def deny(channel, *names):
    """Deny ``names`` to @everyone in ``channel``."""
    from courier import PermissionOverwrite

    channel.overwrites[channel.guild.id] = PermissionOverwrite(**{name: False for name in names})


def message_payload(message_id="1", **overrides):
    data = {
        "id": message_id,
        "channel_id": CHANNEL_ID,
        "content": "hi",
        "tts": False,
        "author": {"id": OTHER_ID, "username": "owner"},
        "embeds": [],
        "attachments": [],
    }
    data.update(overrides)
    return data
