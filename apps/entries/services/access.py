from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Iterable, Optional, Union

from django.conf import settings
from django.contrib.auth import authenticate, login, logout
from django.db import DatabaseError

logger = logging.getLogger('entries')

INVALID_CREDENTIALS = 'Invalid login credentials'


@dataclass(frozen=True)
class Authorized:
    user: Any


@dataclass(frozen=True)
class Unauthorized:
    email: str


@dataclass(frozen=True)
class AuthFailed:
    reason: str = ''


AuthResult = Union[Authorized, Unauthorized, AuthFailed]


def get_admin_allowlist() -> frozenset[str]:
    return frozenset(getattr(settings, 'ADMIN_EMAILS', frozenset()))


def is_admin(user, allowlist: Optional[Iterable[str]] = None) -> bool:
    """An empty allowlist lets every signed-in user through."""
    if user is None or not getattr(user, 'is_authenticated', False):
        return False
    allowed = get_admin_allowlist() if allowlist is None else frozenset(allowlist)
    if not allowed:
        return True
    email = getattr(user, 'email', '') or ''
    return bool(email) and email in allowed


def check_existing_session(request) -> bool:
    return is_admin(getattr(request, 'user', None))


def authenticate_and_authorize(request, email: str, password: str) -> AuthResult:
    """Check credentials and the allowlist before any session exists.

    Only an ``Authorized`` result logs the user in. An unauthorized account
    also drops whatever session the request already carried.
    """
    try:
        user = authenticate(request, username=email, password=password)
    except DatabaseError as exc:
        logger.error('Error authenticating %s: %s', email, exc)
        return AuthFailed(str(exc))

    if user is None:
        logger.info('Rejected credentials for %s', email)
        return AuthFailed(INVALID_CREDENTIALS)

    if not is_admin(user):
        logout(request)
        logger.warning('Signed-in account %s is not on the admin allowlist', user.email or email)
        return Unauthorized(user.email or '')

    login(request, user)
    logger.info('Admin %s signed in', user.email)
    return Authorized(user)
