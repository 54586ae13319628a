from __future__ import annotations

import structlog
from fastapi import Depends, Request

from shellff.api.errors import ApiError
from shellff.core.config import get_settings
from shellff.db.database import Database
from shellff.services.identity import extract_session_token, read_session_email, resolve_identity
from shellff.unlock.service import UnlockCodeService
from shellff.unlock.types import Identity

logger = structlog.get_logger(__name__)


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_unlock_service(database: Database = Depends(get_database)) -> UnlockCodeService:
    return UnlockCodeService(database, batch_max=get_settings().unlock_code_batch_max)


async def require_identity(
    request: Request,
    database: Database = Depends(get_database),
) -> Identity:
    settings = get_settings()
    token = extract_session_token(request, cookie_name=settings.session_cookie_name)
    email = read_session_email(token, secret=settings.session_secret)
    if email is None:
        raise ApiError(401, "Authentication required")

    try:
        async with database.session() as session:
            identity = await resolve_identity(session, email=email)
    except Exception as exc:
        logger.exception("identity_resolution_failed")
        raise ApiError(500, "Failed to resolve user") from exc

    if identity is None:
        raise ApiError(404, "User not found")

    structlog.contextvars.bind_contextvars(user_id=identity.user_id)
    return identity
