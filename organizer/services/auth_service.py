from __future__ import annotations

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from organizer.core.config import Settings, get_settings
from organizer.schemas.auth import CurrentUserResponse
from organizer.services.access_tokens import verify_access_token

_HTTP_BEARER = HTTPBearer(auto_error=False)


class AuthService:
    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    def get_current_user_from_token(self, access_token: str) -> CurrentUserResponse:
        claims = verify_access_token(access_token, self.settings.auth_secret_key)
        if not claims:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token",
            )
        return CurrentUserResponse(id=claims.subject, email=claims.email, role=claims.role)


def require_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_HTTP_BEARER),
) -> CurrentUserResponse:
    if not credentials or credentials.scheme.lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No valid authorization header",
        )
    service = AuthService()
    return service.get_current_user_from_token(credentials.credentials)


def require_google_access_token(
    x_google_access_token: str | None = Header(default=None),
) -> str:
    token = (x_google_access_token or "").strip()
    if not token:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No Google access token found. Please re-authenticate with Google.",
        )
    return token
