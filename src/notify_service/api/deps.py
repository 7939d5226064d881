"""FastAPI dependency injection helpers."""
from __future__ import annotations

from typing import Annotated, AsyncIterator

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from notify_service.application.dto.principal import Principal
from notify_service.application.exceptions import AuthenticationError
from notify_service.application.ports.auth import TokenVerifier
from notify_service.application.ports.bus import EventPublisher
from notify_service.config import settings
from notify_service.infrastructure.auth.hs256_verifier import HS256Verifier
from notify_service.infrastructure.auth.jwks_verifier import JWKSVerifier
from notify_service.infrastructure.db.session import AsyncSessionLocal
from notify_service.infrastructure.db.uow import SqlAlchemyUoW
from notify_service.infrastructure.realtime.publisher import RegistryPublisher
from notify_service.infrastructure.realtime.registry import ChannelRegistry, get_registry

_bearer_scheme = HTTPBearer(auto_error=False)


async def get_uow() -> AsyncIterator[SqlAlchemyUoW]:
    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUoW(session)
        try:
            yield uow
        finally:
            await session.close()


UoWDep = Annotated[SqlAlchemyUoW, Depends(get_uow)]


def _get_verifier() -> TokenVerifier:
    if settings.JWT_VERIFY_MODE == "jwks":
        assert settings.JWKS_URL, "JWKS_URL must be set when JWT_VERIFY_MODE=jwks"
        return JWKSVerifier(settings.JWKS_URL)
    return HS256Verifier(settings.JWT_SECRET, settings.JWT_ALGORITHM)


_verifier: TokenVerifier | None = None


def get_verifier() -> TokenVerifier:
    global _verifier  # noqa: PLW0603
    if _verifier is None:
        _verifier = _get_verifier()
    return _verifier


async def _authenticate(token: str | None) -> Principal:
    if not token:
        raise AuthenticationError("Not authenticated")
    verifier = get_verifier()
    try:
        return await verifier.verify(token)
    except Exception as exc:
        raise AuthenticationError(str(exc)) from exc


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)],
) -> Principal:
    return await _authenticate(credentials.credentials if credentials else None)


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]


async def get_stream_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)],
    token: str | None = Query(None),
) -> Principal:
    """Browsers' EventSource cannot set headers, so a ``token`` query param is accepted too."""
    return await _authenticate(credentials.credentials if credentials else token)


StreamPrincipal = Annotated[Principal, Depends(get_stream_principal)]


def get_channel_registry() -> ChannelRegistry:
    return get_registry()


RegistryDep = Annotated[ChannelRegistry, Depends(get_channel_registry)]


def get_publisher(request: Request) -> EventPublisher:
    publisher = getattr(request.app.state, "publisher", None)
    if publisher is None:
        publisher = RegistryPublisher(get_registry())
    return publisher


PublisherDep = Annotated[EventPublisher, Depends(get_publisher)]
