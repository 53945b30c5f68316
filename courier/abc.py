from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

from .utils import snowflake_time


class Snowflake(ABC):
    @property
    @abstractmethod
    def id(self) -> str:
        raise NotImplementedError

    @property
    def created_at(self):
        return snowflake_time(self.id)


class MessageChannel(Snowflake, ABC):
    """Operations every message-bearing channel offers.

    Implementations run their own precondition gate and then hand off to the
    shared functions in :mod:`courier.messaging`.
    """

    @abstractmethod
    def send_message(self, content: Optional[Any] = None, **kwargs: Any):
        raise NotImplementedError

    @abstractmethod
    def send_file(self, data: Any, filename: Optional[str] = None, message: Optional[Any] = None):
        raise NotImplementedError

    @abstractmethod
    def get_message_by_id(self, message_id: str):
        raise NotImplementedError

    @abstractmethod
    def delete_message_by_id(self, message_id: str):
        raise NotImplementedError

    @abstractmethod
    def get_history_around(self, message_id: str, limit: int):
        raise NotImplementedError

    @abstractmethod
    def pin_message_by_id(self, message_id: str):
        raise NotImplementedError

    @abstractmethod
    def unpin_message_by_id(self, message_id: str):
        raise NotImplementedError

    @abstractmethod
    def get_pinned_messages(self):
        raise NotImplementedError

    @abstractmethod
    def add_reaction_by_id(self, message_id: str, emoji: Any):
        raise NotImplementedError

    @abstractmethod
    def edit_message_by_id(self, message_id: str, new_content: Optional[Any] = None, **kwargs: Any):
        raise NotImplementedError

    @property
    @abstractmethod
    def latest_message_id(self) -> str:
        raise NotImplementedError

    @property
    @abstractmethod
    def has_latest_message(self) -> bool:
        raise NotImplementedError
