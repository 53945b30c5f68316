import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from .channel import TextChannel
from .entity_builder import EntityBuilder
from .enums import AccountType
from .errors import CourierError
from .http import RESTClient
from .models import Guild, User
from .permissions import PermissionChecker
from .utils import utcnow


LOGGER = logging.getLogger("courier")


class Client:
    def __init__(
        self,
        token: Optional[str] = None,
        *,
        account_type: AccountType = AccountType.bot,
        base_url: str = "https://discord.com/api",
        api_version: str = "6",
        token_prefix: Optional[str] = None,
        clock: Callable[[], datetime] = utcnow,
        http: Optional[Any] = None,
    ) -> None:
        self.token = token
        self.account_type = AccountType(account_type)
        self.clock = clock
        if token_prefix is None:
            token_prefix = "Bot " if self.account_type == AccountType.bot else ""

        self.http = http or RESTClient(
            token=token,
            base_url=base_url,
            api_version=api_version,
            token_prefix=token_prefix,
        )
        self.entity_builder = EntityBuilder(self)
        self.permission_checker = PermissionChecker()

        self.user: Optional[User] = None
        self._guilds: Dict[str, Guild] = {}

    async def __aenter__(self) -> "Client":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def set_user(self, user_payload: Any) -> None:
        if isinstance(user_payload, dict):
            self.user = self.entity_builder.create_user(user_payload)
        else:
            self.user = None

    def get_guild(self, guild_id: str) -> Optional[Guild]:
        return self._guilds.get(str(guild_id))

    def get_text_channel(self, channel_id: str) -> Optional[TextChannel]:
        for guild in self._guilds.values():
            channel = guild.get_text_channel(channel_id)
            if channel is not None:
                return channel
        return None

    async def start(self, token: Optional[str] = None) -> None:
        if token:
            self.token = token
            self.http.set_token(token)

        if not self.token:
            raise CourierError("Token is required to start the client")

        # Accept tokens with common prefixes.
        lowered = self.token.lower()
        if lowered.startswith("bot "):
            self.token = self.token[4:]
            self.http.set_token(self.token)
        elif lowered.startswith("bearer "):
            self.token = self.token[7:]
            self.http.set_token(self.token)

        LOGGER.info("Starting courier client (%s account)", self.account_type.value)
        await self.http.start()

    async def close(self) -> None:
        LOGGER.info("Closing courier client")
        await self.http.close()
