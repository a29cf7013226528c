from __future__ import annotations

import secrets

from fastapi import Depends, Header, Request

from urlshortener.core.config import Settings
from urlshortener.core.errors import Unauthorized


def app_settings(request: Request) -> Settings:
    return request.app.state.settings


def require_admin_token(
    settings: Settings = Depends(app_settings),
    x_admin_token: str | None = Header(default=None, alias="x-admin-token"),
) -> None:
    """
    Gates the admin listing behind ADMIN_TOKEN.

    No configured token means the endpoint is open; a warning is logged
    about it at startup.
    """
    expected = settings.admin_token
    if not expected:
        return

    supplied = x_admin_token or ""
    # compare_digest needs equal types; bytes also handles non-ASCII tokens
    if not secrets.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8")):
        raise Unauthorized("Unauthorized")
