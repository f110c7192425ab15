from typing import Any, Mapping, Protocol
from uuid import NAMESPACE_URL, UUID, uuid5

from apibind.config import BinderConfig
from apibind.context import Context
from apibind.errors import InvalidIdentityError, NoIdentityError
from apibind.interface import Record

IDENTITY_TYPE = UUID


class IIdentityResolver(Protocol):
    async def resolve(self, ctx: Context) -> UUID: ...


class IFeatureFlags(Protocol):
    def is_enabled(self, flag: str) -> bool: ...


class StaticFeatureFlags(Record):
    enabled: frozenset[str] = frozenset()

    def is_enabled(self, flag: str) -> bool:
        return flag in self.enabled


def as_identity(value: Any) -> UUID:
    if isinstance(value, UUID):
        return value
    if isinstance(value, str):
        try:
            return UUID(value)
        except ValueError:
            raise InvalidIdentityError(value) from None
    raise InvalidIdentityError(value)


class ContextIdentityResolver:
    "read the identity id an authentication middleware stored in request state"

    def __init__(self, key: str = "identity_id"):
        self.key = key

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(key={self.key!r})"

    async def resolve(self, ctx: Context) -> UUID:
        value = ctx.value(self.key)
        if value is None:
            raise NoIdentityError()
        return as_identity(value)


class ClaimsIdentityResolver:
    """
    derive the identity from the subject claim of verified token claims,
    subjects that are not uuids are mapped with uuid5 under `namespace`
    """

    def __init__(
        self, key: str = "claims", claim: str = "sub", namespace: UUID = NAMESPACE_URL
    ):
        self.key = key
        self.claim = claim
        self.namespace = namespace

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(key={self.key!r}, claim={self.claim!r})"

    async def resolve(self, ctx: Context) -> UUID:
        claims: Mapping[str, Any] | None = ctx.value(self.key)
        if not claims:
            raise NoIdentityError()
        subject = claims.get(self.claim)
        if subject is None:
            raise NoIdentityError(f"no {self.claim!r} claim in context")
        if isinstance(subject, UUID):
            return subject
        if not isinstance(subject, str) or not subject:
            raise InvalidIdentityError(subject)
        try:
            return UUID(subject)
        except ValueError:
            return uuid5(self.namespace, subject)


def select_identity_resolver(
    flags: IFeatureFlags, config: BinderConfig
) -> IIdentityResolver:
    "pick the resolution strategy once, when the binder is built"
    if flags.is_enabled(config.identity_flag):
        return ClaimsIdentityResolver(key=config.claims_key)
    return ContextIdentityResolver(key=config.identity_key)
