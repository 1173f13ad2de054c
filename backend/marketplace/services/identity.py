"""Owner identity resolution and the per-request session context.

The session is an explicit value handed to whoever needs it (submission
controller, catalog view) rather than module-level state. Listeners attach
with ``subscribe`` and must detach with ``Subscription.unsubscribe`` when the
owning view goes away.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

from marketplace.services.baas_client import BaaSClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    user_id: str
    email: Optional[str] = None
    access_token: Optional[str] = None


Listener = Callable[[Optional[Identity]], None]


class Subscription:
    """Handle returned by ``SessionContext.subscribe``."""

    def __init__(self, context: "SessionContext", listener: Listener):
        self._context = context
        self._listener = listener
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._context._listeners.remove(self._listener)
            self.active = False


class SessionContext:
    """Holds the current (nullable) identity and notifies listeners on change."""

    def __init__(self, identity: Optional[Identity] = None):
        self._identity = identity
        self._listeners: list[Listener] = []

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    @property
    def is_authenticated(self) -> bool:
        return self._identity is not None

    def set_identity(self, identity: Optional[Identity]) -> None:
        if identity == self._identity:
            return
        self._identity = identity
        for listener in list(self._listeners):
            listener(identity)

    def sign_out(self) -> None:
        self.set_identity(None)

    def subscribe(self, listener: Listener) -> Subscription:
        self._listeners.append(listener)
        return Subscription(self, listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)


class IdentityProvider(ABC):
    """Resolves a bearer token to the identity it belongs to."""

    @abstractmethod
    async def resolve(self, token: Optional[str]) -> Optional[Identity]:
        ...

    async def session_for(self, token: Optional[str]) -> SessionContext:
        return SessionContext(await self.resolve(token))


class StaticTokenIdentityProvider(IdentityProvider):
    """Dev-mode provider with a fixed token -> user id table."""

    def __init__(self, tokens: dict[str, str]):
        self.tokens = dict(tokens)

    @classmethod
    def from_setting(cls, raw: str) -> "StaticTokenIdentityProvider":
        """Parse ``"token-a:user-a,token-b:user-b"``."""
        tokens = {}
        for pair in raw.split(","):
            token, sep, user_id = pair.strip().partition(":")
            if sep and token.strip() and user_id.strip():
                tokens[token.strip()] = user_id.strip()
        return cls(tokens)

    async def resolve(self, token: Optional[str]) -> Optional[Identity]:
        if not token:
            return None
        user_id = self.tokens.get(token)
        if user_id is None:
            logger.info("Rejected unknown local auth token")
            return None
        return Identity(user_id=user_id, access_token=token)


class RemoteIdentityProvider(IdentityProvider):
    """Looks the token up against the hosted backend's auth service."""

    def __init__(self, client: BaaSClient):
        self.client = client

    async def resolve(self, token: Optional[str]) -> Optional[Identity]:
        if not token:
            return None
        user = await self.client.get_user(token)
        if not user or not user.get("id"):
            return None
        return Identity(user_id=user["id"], email=user.get("email"), access_token=token)


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
