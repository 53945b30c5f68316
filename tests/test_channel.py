import logging
from datetime import timedelta

import pytest

from courier import (
    AccountType,
    Client,
    Embed,
    InvalidArgument,
    InvalidState,
    JSONBody,
    MessageComposer,
    MessageHistory,
    MissingPermissions,
    TextChannel,
    VerificationLevel,
    VerificationLevelError,
)
from tests.conftest import (
    CHANNEL_ID,
    GUILD_ID,
    NOW,
    OTHER_ID,
    SELF_ID,
    TEXT_PERMISSIONS,
    FakeTransport,
    deny,
    message_payload,
    snowflake_at,
)


def fresh_ids(count):
    return [snowflake_at(timedelta(minutes=i + 1)) for i in range(count)]


class TestWebhooks:
    async def test_get_webhooks_skips_malformed_entries(self, channel, transport, caplog):
        transport.queue(200, [{"id": "1", "name": "a"}, {"name": "no id"}, None, {"id": "2", "name": "b"}])

        with caplog.at_level(logging.ERROR, logger="courier"):
            webhooks = await channel.get_webhooks()

        assert [hook.id for hook in webhooks] == ["1", "2"]
        assert transport.calls[0].route.path == f"/channels/{CHANNEL_ID}/webhooks"
        assert caplog.text.count("Skipping webhook") == 2

    def test_get_webhooks_requires_manage_webhooks(self, channel, transport):
        deny(channel, "manage_webhooks")

        with pytest.raises(MissingPermissions) as excinfo:
            channel.get_webhooks()

        assert excinfo.value.permission == "manage_webhooks"

    async def test_delete_webhook(self, channel, transport):
        await channel.delete_webhook_by_id("77").reason("spam")

        call = transport.calls[0]
        assert call.route.method == "DELETE"
        assert call.route.path == "/webhooks/77"
        assert call.reason == "spam"

    def test_delete_webhook_checks_member_directly(self, channel, transport):
        deny(channel, "manage_webhooks")

        with pytest.raises(MissingPermissions):
            channel.delete_webhook_by_id("77")
        assert transport.calls == []

    def test_delete_webhook_rejects_blank_id(self, channel):
        with pytest.raises(InvalidArgument):
            channel.delete_webhook_by_id(" ")


class TestBulkDelete:
    @pytest.mark.parametrize("count", [0, 1, 101])
    def test_rejects_counts_outside_bounds(self, channel, count):
        with pytest.raises(InvalidArgument):
            channel.delete_messages_by_ids(fresh_ids(count))

    @pytest.mark.parametrize("count", [2, 100])
    async def test_accepts_counts_within_bounds(self, channel, transport, count):
        ids = fresh_ids(count)

        await channel.delete_messages_by_ids(ids)

        call = transport.calls[0]
        assert call.route.method == "POST"
        assert call.route.path == f"/channels/{CHANNEL_ID}/messages/bulk-delete"
        assert call.body == JSONBody({"messages": ids})

    def test_rejects_ids_older_than_two_weeks(self, channel, transport):
        stale = snowflake_at(timedelta(days=14, minutes=1))

        with pytest.raises(InvalidArgument, match=stale):
            channel.delete_messages_by_ids([fresh_ids(1)[0], stale])
        assert transport.calls == []

    def test_accepts_ids_just_inside_two_weeks(self, channel):
        ids = [snowflake_at(timedelta(days=13, hours=23)), snowflake_at(timedelta(seconds=5))]

        assert channel.delete_messages_by_ids(ids).data == {"messages": ids}

    @pytest.mark.parametrize("bad", ["", "abc", "-5"])
    def test_rejects_unparseable_ids(self, channel, bad):
        with pytest.raises(InvalidArgument):
            channel.delete_messages_by_ids([fresh_ids(1)[0], bad])

    def test_requires_manage_messages(self, channel):
        deny(channel, "manage_messages")

        with pytest.raises(MissingPermissions, match="bulk delete"):
            channel.delete_messages_by_ids(fresh_ids(2))

    def test_delete_messages_maps_to_ids(self, client, channel):
        messages = [client.entity_builder.create_message(message_payload(i)) for i in fresh_ids(3)]

        action = channel.delete_messages(messages)

        assert action.data == {"messages": [m.id for m in messages]}

    def test_delete_messages_rejects_empty(self, channel):
        with pytest.raises(InvalidArgument):
            channel.delete_messages([])


class TestReactions:
    async def test_clear_reactions(self, channel, transport):
        await channel.clear_reactions_by_id("55")

        assert str(transport.calls[0].route) == f"DELETE /channels/{CHANNEL_ID}/messages/55/reactions"

    def test_clear_reactions_rejects_blank_id(self, channel):
        with pytest.raises(InvalidArgument):
            channel.clear_reactions_by_id("")

    def test_clear_reactions_requires_manage_messages(self, channel):
        deny(channel, "manage_messages")

        with pytest.raises(MissingPermissions):
            channel.clear_reactions_by_id("55")

    async def test_add_reaction_encodes_emoji(self, channel, transport):
        await channel.add_reaction_by_id("55", "👍")

        assert transport.calls[0].route.path == f"/channels/{CHANNEL_ID}/messages/55/reactions/%F0%9F%91%8D/@me"

    def test_add_reaction_requires_history(self, channel):
        deny(channel, "read_message_history")

        with pytest.raises(MissingPermissions):
            channel.add_reaction_by_id("55", "👍")


class TestMessageOperations:
    def test_send_message_returns_unexecuted_composer(self, channel, transport):
        action = channel.send_message("hello")

        assert isinstance(action, MessageComposer)
        assert action.content == "hello"
        assert transport.calls == []

    async def test_send_message_decodes_message(self, channel, transport):
        transport.queue(200, message_payload("9", content="hello"))

        message = await channel.send_message("hello", nonce="n")

        assert message.id == "9"
        assert transport.calls[0].body == JSONBody({"content": "hello", "nonce": "n", "tts": False})

    def test_send_message_requires_write(self, channel):
        deny(channel, "send_messages")

        with pytest.raises(MissingPermissions) as excinfo:
            channel.send_message("hello")

        assert excinfo.value.permission == "send_messages"

    def test_embed_only_message_requires_embed_links(self, channel):
        deny(channel, "embed_links")

        with pytest.raises(MissingPermissions):
            channel.send_message(embed=Embed(title="t"))
        assert channel.send_message("text", embed=Embed(title="t")).embed.title == "t"

    def test_send_message_from_message_value(self, client, channel):
        source = client.entity_builder.create_message(message_payload("3", content="copy", tts=True))

        composer = channel.send_message(source)

        assert composer.content == "copy"
        assert composer.tts is True

    def test_send_file(self, channel):
        composer = channel.send_file(b"data", "a.txt")

        assert list(composer.attachments) == ["a.txt"]
        assert composer.finalize_body().names == ["file0"]

    def test_send_file_requires_attach_files(self, channel):
        deny(channel, "attach_files")

        with pytest.raises(MissingPermissions):
            channel.send_file(b"data", "a.txt")

    def test_edit_message_uses_patch_and_refuses_files(self, channel):
        composer = channel.edit_message_by_id("12", "new text")

        assert composer.route.method == "PATCH"
        assert composer.is_edit()
        with pytest.raises(InvalidState):
            composer.add_attachment(b"x", "x.txt")

    async def test_get_message(self, channel, transport):
        transport.queue(200, message_payload("12"))

        message = await channel.get_message_by_id("12")

        assert message.id == "12"
        assert transport.calls[0].route.path == f"/channels/{CHANNEL_ID}/messages/12"

    def test_get_message_requires_history(self, channel):
        deny(channel, "read_message_history")

        with pytest.raises(MissingPermissions):
            channel.get_message_by_id("12")

    async def test_delete_message(self, channel, transport):
        await channel.delete_message_by_id("12")

        assert str(transport.calls[0].route) == f"DELETE /channels/{CHANNEL_ID}/messages/12"

    def test_delete_message_rejects_blank_id(self, channel):
        with pytest.raises(InvalidArgument):
            channel.delete_message_by_id("")

    async def test_history_around(self, channel, transport):
        transport.queue(200, [message_payload("13"), message_payload("12"), message_payload("11")])

        history = await channel.get_history_around("12", 3)

        assert isinstance(history, MessageHistory)
        assert history.size == 3
        assert history.get_message_by_id("11").id == "11"
        assert transport.calls[0].route.path == f"/channels/{CHANNEL_ID}/messages?around=12&limit=3"

    @pytest.mark.parametrize("limit", [0, 101])
    def test_history_limit_bounds(self, channel, limit):
        with pytest.raises(InvalidArgument):
            channel.get_history_around("12", limit)

    async def test_pin_and_unpin(self, channel, transport):
        await channel.pin_message_by_id("12")
        await channel.unpin_message_by_id("12")

        assert [str(call.route) for call in transport.calls] == [
            f"PUT /channels/{CHANNEL_ID}/pins/12",
            f"DELETE /channels/{CHANNEL_ID}/pins/12",
        ]

    def test_pin_requires_manage_messages(self, channel):
        deny(channel, "manage_messages")

        with pytest.raises(MissingPermissions, match="pin or unpin"):
            channel.pin_message_by_id("12")

    async def test_pinned_messages(self, channel, transport):
        transport.queue(200, [message_payload("12", pinned=True)])

        pinned = await channel.get_pinned_messages()

        assert [m.id for m in pinned] == ["12"]
        assert pinned[0].pinned

    def test_read_is_required_everywhere(self, channel):
        deny(channel, "view_channel")

        for call in (
            lambda: channel.send_message("x"),
            lambda: channel.get_message_by_id("1"),
            lambda: channel.delete_message_by_id("1"),
            lambda: channel.get_history_around("1", 5),
            lambda: channel.get_pinned_messages(),
            lambda: channel.edit_message_by_id("1", "x"),
        ):
            with pytest.raises(MissingPermissions):
                call()


class TestCanTalk:
    def test_self_member_can_talk(self, channel):
        assert channel.can_talk()

    def test_denied_write_cannot_talk(self, channel):
        deny(channel, "send_messages")

        assert not channel.can_talk()

    def test_guild_owner_can_always_talk(self, channel, guild):
        deny(channel, "send_messages", "view_channel")

        assert channel.can_talk(guild.get_member(OTHER_ID))

    def test_member_from_other_guild_is_rejected(self, client, channel):
        other = client.entity_builder.create_guild(
            {"id": "1", "members": [{"user": {"id": SELF_ID}, "roles": []}]}
        )

        with pytest.raises(InvalidArgument):
            channel.can_talk(other.get_member(SELF_ID))


class TestOrdering:
    def _channel(self, client, guild, age, position):
        return client.entity_builder.create_text_channel(
            guild, {"id": snowflake_at(age), "name": f"c{position}", "position": position}
        )

    def test_older_channel_sorts_first_at_equal_position(self, client, guild):
        newer = self._channel(client, guild, timedelta(days=1), 1)
        older = self._channel(client, guild, timedelta(days=2), 1)

        assert not newer < older
        assert older < newer
        assert newer.compare_to(older) > 0

    def test_higher_position_sorts_first(self, client, guild):
        high = self._channel(client, guild, timedelta(days=1), 2)
        low = self._channel(client, guild, timedelta(days=2), 1)

        assert high < low
        assert sorted([low, high]) == [high, low]

    def test_compare_to_self_is_zero(self, channel):
        assert channel.compare_to(channel) == 0

    def test_channels_from_other_guilds_cannot_be_compared(self, client, channel):
        other_guild = client.entity_builder.create_guild({"id": "1"})
        stranger = client.entity_builder.create_text_channel(other_guild, {"id": "2"})

        with pytest.raises(InvalidArgument):
            channel.compare_to(stranger)

    def test_position_is_index_in_sorted_channels(self, client, guild, channel):
        top = self._channel(client, guild, timedelta(days=1), 5)

        assert top.position == 0
        assert channel.position == 1


class TestChannelState:
    def test_builder_fields(self, channel):
        assert channel.topic == "talk here"
        assert channel.mention == f"<#{CHANNEL_ID}>"
        assert str(channel) == f"TC:general({CHANNEL_ID})"
        assert isinstance(channel, TextChannel)

    def test_latest_message_id_unknown(self, channel):
        assert not channel.has_latest_message
        with pytest.raises(InvalidState):
            channel.latest_message_id

    def test_latest_message_id_known(self, channel):
        channel.set_last_message_id(42)

        assert channel.has_latest_message
        assert channel.latest_message_id == "42"

    def test_nsfw_by_name(self, channel):
        assert not channel.is_nsfw
        channel.set_name("nsfw-memes")
        assert channel.is_nsfw

    def test_members_with_read_access(self, channel, guild):
        assert {m.id for m in channel.members} == {SELF_ID, OTHER_ID}

        deny(channel, "view_channel")

        assert {m.id for m in channel.members} == {OTHER_ID}

    def test_dispose_removes_from_guild_index(self, channel, guild):
        deny(channel, "send_messages")

        assert channel.dispose() is True
        assert guild.get_text_channel(CHANNEL_ID) is None
        assert channel.overwrites == {}
        assert channel.disposed

    def test_created_at_follows_snowflake(self, channel):
        assert channel.created_at.year == 2025


def user_account_channel(level, *, user_id=SELF_ID, verified=True, phone=None, joined=timedelta(days=30)):
    client = Client("token", account_type=AccountType.client, http=FakeTransport(), clock=lambda: NOW)
    client.set_user({"id": user_id, "username": "me", "verified": verified, "phone": phone})
    guild = client.entity_builder.create_guild(
        {
            "id": GUILD_ID,
            "owner_id": OTHER_ID,
            "verification_level": int(level),
            "roles": [{"id": GUILD_ID, "permissions": str(TEXT_PERMISSIONS.value)}],
            "members": [{"user": {"id": user_id}, "roles": [], "joined_at": (NOW - joined).isoformat()}],
            "channels": [{"id": CHANNEL_ID, "type": 0, "name": "general"}],
        }
    )
    return guild.get_text_channel(CHANNEL_ID)


class TestVerification:
    def test_bot_accounts_are_exempt(self, channel):
        channel.guild.verification_level = VerificationLevel.very_high

        assert isinstance(channel.send_message("hi"), MessageComposer)

    @pytest.mark.parametrize(
        "level, kwargs",
        [
            (VerificationLevel.none, {"verified": False}),
            (VerificationLevel.low, {}),
            (VerificationLevel.medium, {}),
            (VerificationLevel.high, {}),
            (VerificationLevel.very_high, {"phone": "+15550100"}),
        ],
    )
    def test_eligible_accounts_can_send(self, level, kwargs):
        channel = user_account_channel(level, **kwargs)

        channel.send_message("hi")
        channel.send_file(b"x", "a.txt")

    @pytest.mark.parametrize(
        "level, kwargs",
        [
            (VerificationLevel.low, {"verified": False}),
            (VerificationLevel.medium, {"user_id": snowflake_at(timedelta(minutes=2))}),
            (VerificationLevel.high, {"joined": timedelta(minutes=5)}),
            (VerificationLevel.very_high, {}),
        ],
    )
    def test_ineligible_accounts_cannot_send(self, level, kwargs):
        channel = user_account_channel(level, **kwargs)

        with pytest.raises(VerificationLevelError) as excinfo:
            channel.send_message("hi")
        with pytest.raises(VerificationLevelError):
            channel.send_file(b"x", "a.txt")

        assert excinfo.value.level == level

    def test_verification_runs_before_permission_checks(self):
        channel = user_account_channel(VerificationLevel.very_high)
        deny(channel, "send_messages")

        with pytest.raises(VerificationLevelError):
            channel.send_message("hi")

    def test_editing_is_not_gated(self):
        channel = user_account_channel(VerificationLevel.very_high)

        assert channel.edit_message_by_id("1", "new").is_edit()
