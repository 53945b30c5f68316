from .abc import MessageChannel, Snowflake
from .action import AuditableAction, DeferredAction, decode_none
from .channel import GuildChannel, TextChannel
from .client import Client
from .composer import MessageComposer
from .embeds import EMBED_MAX_LENGTH_BOT, EMBED_MAX_LENGTH_CLIENT, Embed
from .entity_builder import EntityBuilder
from .enums import AccountType, ChannelType, VerificationLevel
from .errors import (
    CourierError,
    Forbidden,
    HTTPException,
    InvalidArgument,
    InvalidState,
    MissingPermissions,
    NotFound,
    PreconditionError,
    TransportError,
    VerificationLevelError,
)
from .files import MAX_FILE_SIZE, File
from .http import FailureInfo, Response, RESTClient
from .messaging import MessageHistory
from .models import Attachment, Guild, Member, Message, Role, User, Webhook
from .payload import JSONBody, MultipartBody, Part
from .permissions import PermissionChecker, PermissionOverwrite, Permissions
from .routes import CompiledRoute, Route
from .utils import parse_snowflake, parse_time, snowflake_time, time_snowflake, utcnow

__version__ = "0.1.0"
