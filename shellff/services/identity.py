"""Session-token verification and caller identity resolution.

Sessions are issued by the external auth provider, which shares ``SESSION_SECRET``
with this service. A token is ``<urlsafe-b64(email)>.<hex HMAC-SHA256(payload)>``
and is accepted from an ``Authorization: Bearer`` header or the session cookie.
"""

from __future__ import annotations

import base64
import hashlib
import hmac

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from shellff.db.repo.users_repo import UsersRepo
from shellff.unlock.types import Identity


def _sign(payload: str, *, secret: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256)
    return digest.hexdigest()


def build_session_token(*, email: str, secret: str) -> str:
    payload = base64.urlsafe_b64encode(email.encode("utf-8")).decode("ascii").rstrip("=")
    return f"{payload}.{_sign(payload, secret=secret)}"


def read_session_email(token: str | None, *, secret: str) -> str | None:
    if not token or not secret:
        return None

    payload, separator, signature = token.rpartition(".")
    if not separator or not payload or not signature:
        return None
    if not signature.isascii():
        return None
    expected = _sign(payload, secret=secret)
    if not hmac.compare_digest(expected.encode("ascii"), signature.encode("ascii")):
        return None

    padded = payload + "=" * (-len(payload) % 4)
    try:
        email = base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8")
    except ValueError:
        return None

    email = email.strip()
    return email or None


def extract_session_token(request: Request, *, cookie_name: str) -> str | None:
    authorization = request.headers.get("Authorization")
    if authorization:
        scheme, _, value = authorization.partition(" ")
        if scheme.lower() == "bearer" and value.strip():
            return value.strip()

    return request.cookies.get(cookie_name)


async def resolve_identity(session: AsyncSession, *, email: str) -> Identity | None:
    user = await UsersRepo.get_by_email(session, email)
    if user is None or user.status != "ACTIVE":
        return None
    return Identity(user_id=user.id, public_id=user.public_id, email=user.email)
