from uuid import UUID as UUID

from msgspec import Struct as Struct
from msgspec import field as field

from .binder import Binder as Binder
from .config import BinderConfig as BinderConfig
from .config import config_from_file as config_from_file
from .context import Context as Context
from .errors import ApibindError as ApibindError
from .errors import NoIdentityError as NoIdentityError
from .errors import SignatureError as SignatureError
from .handler import BoundHandler as BoundHandler
from .identity import ClaimsIdentityResolver as ClaimsIdentityResolver
from .identity import ContextIdentityResolver as ContextIdentityResolver
from .identity import StaticFeatureFlags as StaticFeatureFlags
from .interface import Payload as Payload
from .problems import APIError as APIError
from .signature import FuncSignature as FuncSignature
from .vendors import Request as Request

VERSION = "0.1.0"
__version__ = VERSION
