"""CLI helper to validate required environment variables.

Usage::

    python -m scripts.check_env

Imports :mod:`app.core.config`, reports validation errors and exits with
status 1 when something is missing. Secrets are masked in the listing.
"""

from __future__ import annotations

import sys

from pydantic import ValidationError

_SECRET_MARKERS = ("key", "secret", "password")


def _display(name: str, value: object) -> str:
    if value and any(marker in name.lower() for marker in _SECRET_MARKERS):
        return "<hidden>"
    return str(value)


def main() -> int:
    try:
        from app.core.config import settings
    except ValidationError:
        # The settings module already printed the details.
        print("Environment validation failed, see details above.", file=sys.stderr)
        return 1

    print("Environment variables OK.")
    for name, value in settings.model_dump().items():
        print(f"- {name}: {_display(name, value)}")

    if not (settings.SUPABASE_URL and settings.SUPABASE_SERVICE_ROLE_KEY):
        print("Warning: storage is not configured, curriculum cover uploads will fail.")
    if not settings.SUPER_ADMIN_EMAILS:
        print("Warning: SUPER_ADMIN_EMAILS is empty, only profiles with the super_admin role can manage AI settings.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
