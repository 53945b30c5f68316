from __future__ import annotations

import dataclasses
import io
import json
import logging
import os
from typing import Any, Dict, Optional

from .action import Callback, DeferredAction
from .embeds import Embed, max_length_for
from .errors import HTTPException, InvalidArgument, InvalidState, PreconditionError, TransportError
from .files import File
from .http import Body, Response
from .models import Message
from .payload import JSONBody, MultipartBody
from .routes import CompiledRoute
from .utils import is_blank


LOGGER = logging.getLogger("courier")


class MessageComposer(DeferredAction[Message]):
    """Builds a message body and sends it when executed.

    State accumulates through chained setters and is only read when the body is
    finalized, at the start of every :meth:`execute`. A composer has a single
    owner; it does no locking of its own.

    Routes compiled with PATCH are edits: they cannot carry new attachments.
    """

    def __init__(
        self,
        client: Any,
        route: CompiledRoute,
        *,
        success: Optional[Callback] = None,
        failure: Optional[Callback] = None,
    ) -> None:
        super().__init__(
            client,
            route,
            decoder=self._decode_message,
            success=success,
            failure=failure,
        )
        self._content = io.StringIO()
        self.embed: Optional[Embed] = None
        self.attachments: Dict[str, File] = {}
        self.nonce: Optional[str] = None
        self.tts = False
        self.override = False

    def _decode_message(self, response: Response) -> Message:
        return self._client.entity_builder.create_message(response.as_object())

    @property
    def content(self) -> str:
        return self._content.getvalue()

    def is_empty(self) -> bool:
        return self._content.tell() == 0 and (self.embed is None or self.embed.length == 0)

    # -- content --

    def set_content(self, content: Optional[str]) -> "MessageComposer":
        self._content.seek(0)
        self._content.truncate(0)
        if content:
            self._content.write(content)
        return self

    def append(self, text: str, start: Optional[int] = None, end: Optional[int] = None) -> "MessageComposer":
        text = str(text)
        start = 0 if start is None else start
        end = len(text) if end is None else end
        if start < 0 or end > len(text) or start > end:
            raise InvalidArgument(f"Invalid range [{start}, {end}) for text of length {len(text)}")
        self._content.write(text[start:end])
        return self

    def append_char(self, char: str) -> "MessageComposer":
        if not isinstance(char, str) or len(char) != 1:
            raise InvalidArgument(f"Expected a single character, got {char!r}")
        self._content.write(char)
        return self

    def append_format(self, template: str, *args: Any, **kwargs: Any) -> "MessageComposer":
        self._content.write(template.format(*args, **kwargs))
        return self

    # -- flags --

    def set_embed(self, embed: Optional[Embed | Dict[str, Any]]) -> "MessageComposer":
        if isinstance(embed, dict):
            embed = Embed.from_dict(embed)
        if embed is not None:
            account_type = self._client.account_type
            if not embed.is_sendable(account_type):
                raise InvalidArgument(
                    "Provided Message contains an embed with a length greater than "
                    f"{max_length_for(account_type)} characters, which is the max for "
                    f"{account_type.value} accounts!"
                )
        self.embed = embed
        return self

    def set_tts(self, tts: bool) -> "MessageComposer":
        self.tts = bool(tts)
        return self

    def set_nonce(self, nonce: Optional[str]) -> "MessageComposer":
        self.nonce = nonce
        return self

    def set_override(self, override: bool) -> "MessageComposer":
        self.override = bool(override)
        return self

    def reset(self) -> "MessageComposer":
        return (
            self.set_content(None)
            .set_nonce(None)
            .set_embed(None)
            .set_tts(False)
            .set_override(False)
            .clear_attachments()
        )

    # -- attachments --

    def _check_edit(self) -> None:
        if self.is_edit():
            raise PreconditionError(
                "Cannot add files to an existing message! Edit-Message does not support this operation!"
            )

    def add_attachment(self, source: Any, name: Optional[str] = None) -> "MessageComposer":
        self._check_edit()
        if source is None:
            raise InvalidArgument("Data may not be None")

        if isinstance(source, File):
            file = source
            if name is not None:
                if is_blank(name):
                    raise InvalidArgument("Name may not be blank")
                file = dataclasses.replace(source, filename=name)
        elif isinstance(source, (str, os.PathLike)):
            if name is not None and is_blank(name):
                raise InvalidArgument("File Name may not be blank")
            file = File.from_path(source, filename=name)
        else:
            if is_blank(name):
                raise InvalidArgument("Name may not be blank")
            if isinstance(source, (bytes, bytearray, memoryview)):
                file = File.from_bytes(source, name)
            else:
                file = File.from_stream(source, name)

        self.attachments[file.filename] = file
        return self

    def clear_attachments(self) -> "MessageComposer":
        self.attachments.clear()
        return self

    # -- seeding --

    def apply_fields(self, message: Optional[Message]) -> "MessageComposer":
        if message is None:
            return self
        self.set_content(message.content).set_tts(message.tts)
        if message.embeds:
            self.embed = message.embeds[0]
        return self

    async def apply_from(self, message: Optional[Message]) -> "MessageComposer":
        """Seed from ``message``, downloading its attachments again.

        Only the first embed is kept. An attachment that cannot be fetched is
        logged and left out.
        """
        if message is None:
            return self
        if message.attachments:
            self._check_edit()
        self.apply_fields(message)
        for attachment in message.attachments:
            try:
                data = await attachment.read()
            except (TransportError, HTTPException):
                LOGGER.exception("Could not re-upload attachment %s (%s)", attachment.filename, attachment.id)
                continue
            self.add_attachment(data, attachment.filename)
        return self

    # -- encoding --

    def to_json(self) -> Dict[str, Any]:
        content = self.content
        payload: Dict[str, Any] = {}
        if self.override:
            payload["embed"] = self.embed.to_dict() if self.embed is not None else None
            payload["content"] = content or None
            payload["nonce"] = self.nonce
        else:
            if self.embed is not None:
                payload["embed"] = self.embed.to_dict()
            if content:
                payload["content"] = content
            if self.nonce is not None:
                payload["nonce"] = self.nonce
        payload["tts"] = self.tts
        return payload

    def finalize_body(self) -> Body:
        if self.attachments:
            body = MultipartBody()
            for index, file in enumerate(self.attachments.values()):
                file.to_part(body, index)
            if not self.is_empty():
                body.add("payload_json", json.dumps(self.to_json()), content_type="application/json")
            return body
        if not self.is_empty():
            return JSONBody(self.to_json())
        raise InvalidState("Cannot build a message without content!")
