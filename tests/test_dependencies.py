from __future__ import annotations

from datetime import timedelta

import pytest
from fastapi import HTTPException
from starlette.requests import Request

from app.api.v2.dependencies import (
    _normalize_token_value,
    get_current_profile,
    is_super_admin,
    require_profile,
    require_super_admin,
)
from app.core.security import create_access_token
from tests.utils import create_profile


def _request(headers: dict[str, str] | None = None) -> Request:
    raw = [(key.lower().encode(), value.encode()) for key, value in (headers or {}).items()]
    return Request({"type": "http", "headers": raw})


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Bearer abc.def", "abc.def"),
        ("bearer   abc.def", "abc.def"),
        ("Bearer%20abc.def", "abc.def"),
        ('"abc.def"', "abc.def"),
        ("token: abc.def", "abc.def"),
        ("   ", None),
        (None, None),
    ],
)
def test_normalize_token_value(raw, expected):
    assert _normalize_token_value(raw) == expected


def test_super_admin_by_role_or_allow_list(db_session):
    by_role = create_profile(db_session, email="staff@example.com", role="super_admin")
    by_email = create_profile(db_session, email="Owner@Example.com")
    regular = create_profile(db_session, email="learner@example.com")

    assert is_super_admin(by_role) is True
    assert is_super_admin(by_email) is True
    assert is_super_admin(regular) is False
    assert is_super_admin(None) is False


def test_profile_from_authorization_header(db_session):
    profile = create_profile(db_session)
    token = create_access_token(profile.id)

    found = get_current_profile(_request({"Authorization": f"Bearer {token}"}), db=db_session)
    assert found is not None
    assert found.id == profile.id


def test_profile_from_cookie_when_header_is_invalid(db_session):
    profile = create_profile(db_session)
    token = create_access_token(profile.id)

    request = _request({"Authorization": "Bearer not-a-jwt", "Cookie": f"access_token={token}"})
    found = get_current_profile(request, db=db_session)
    assert found is not None
    assert found.id == profile.id


def test_expired_or_unknown_tokens_give_no_profile(db_session):
    profile = create_profile(db_session)
    expired = create_access_token(profile.id, expires_delta=timedelta(minutes=-5))
    orphan = create_access_token("no-such-profile")

    assert get_current_profile(_request({"Authorization": f"Bearer {expired}"}), db=db_session) is None
    assert get_current_profile(_request({"Authorization": f"Bearer {orphan}"}), db=db_session) is None
    assert get_current_profile(_request(), db=db_session) is None


def test_require_profile_rejects_anonymous():
    with pytest.raises(HTTPException) as exc:
        require_profile(None)
    assert exc.value.status_code == 401
    assert exc.value.detail == "not_authenticated"


def test_require_super_admin(db_session):
    admin = create_profile(db_session, email="owner@example.com")
    regular = create_profile(db_session, email="learner@example.com")

    assert require_super_admin(admin) is admin
    with pytest.raises(HTTPException) as exc:
        require_super_admin(regular)
    assert exc.value.status_code == 403
    assert exc.value.detail == "forbidden"
