import logging
import re
from typing import Generator, Optional
from urllib.parse import unquote

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from starlette.datastructures import State

from app.core import security
from app.core.config import settings
from app.core.constants import SUPER_ADMIN_ROLE
from app.db import session as db_session
from app.models.user.profile_model import Profile

log = logging.getLogger(__name__)


def _get_state_container(request: Request | None) -> Optional[State]:
    if request is None:
        return None

    state = getattr(request, "state", None)
    if state is None:
        state = State()
        setattr(request, "state", state)
    return state


def get_db(request: Request = None) -> Generator[Session, None, None]:  # type: ignore[assignment]
    """Provide one SQLAlchemy session per request.

    The route handler and ``get_current_profile`` both depend on ``get_db``; the
    session is cached on ``request.state`` with a reference counter so the
    profile loaded during authentication stays attached until the handler is
    done with it.
    """

    if request is None:
        db = db_session.SessionLocal()
        try:
            yield db
        finally:
            db.close()
        return

    state = _get_state_container(request)
    db = getattr(state, "_db_session", None)
    if db is None:
        db = db_session.SessionLocal()
        setattr(state, "_db_session", db)
        setattr(state, "_db_refcount", 0)

    setattr(state, "_db_refcount", getattr(state, "_db_refcount", 0) + 1)

    try:
        yield db
    finally:
        refcount = getattr(state, "_db_refcount", 1) - 1
        if refcount <= 0:
            try:
                db.close()
            finally:
                for attr in ("_db_session", "_db_refcount"):
                    if hasattr(state, attr):
                        delattr(state, attr)
        else:
            setattr(state, "_db_refcount", refcount)


def _normalize_token_value(raw_token: str | None) -> str | None:
    """Return a clean JWT from a header or cookie value.

    Accepts ``Bearer <jwt>`` (any case), percent-encoded values such as
    ``Bearer%20<jwt>`` and quoted strings.
    """

    if raw_token is None:
        return None

    token = unquote(raw_token.strip().strip('"').strip("'"))
    if not token:
        return None

    match = re.match(r"^(bearer|token)[\s,:]+(.+)$", token, flags=re.IGNORECASE)
    if match:
        token = match.group(2)

    token = token.strip()
    return token or None


def is_super_admin(profile: Profile | None) -> bool:
    if profile is None:
        return False
    if profile.role == SUPER_ADMIN_ROLE:
        return True
    return (profile.email or "").strip().lower() in settings.SUPER_ADMIN_EMAILS


def get_current_profile(request: Request, db: Session = Depends(get_db)) -> Optional[Profile]:
    """Profile of the bearer of the request's access token, or ``None``."""

    token_sources = (
        request.headers.get("Authorization"),
        request.cookies.get("access_token"),
    )

    for candidate in token_sources:
        token = _normalize_token_value(candidate)
        if not token:
            continue

        profile_id = security.decode_access_token(token)
        if profile_id is None:
            continue

        profile = db.get(Profile, profile_id)
        if profile is None:
            log.warning("Token subject %s has no profile", profile_id)
            continue
        return profile

    return None


def require_profile(profile: Optional[Profile] = Depends(get_current_profile)) -> Profile:
    if profile is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="not_authenticated")
    return profile


def require_super_admin(profile: Profile = Depends(require_profile)) -> Profile:
    if not is_super_admin(profile):
        log.info("Profile %s denied access to super-admin route", profile.id)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="forbidden")
    return profile
