from enum import Enum, IntEnum


class AccountType(str, Enum):
    bot = "bot"
    client = "client"


class ChannelType(IntEnum):
    text = 0
    dm = 1
    voice = 2
    group_dm = 3
    category = 4


class VerificationLevel(IntEnum):
    none = 0
    low = 1
    medium = 2
    high = 3
    very_high = 4
