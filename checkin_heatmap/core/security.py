import secrets

from fastapi import HTTPException
from fastapi import Request
from fastapi import Security
from fastapi.security import HTTPAuthorizationCredentials
from fastapi.security import HTTPBearer


bearer_scheme = HTTPBearer(auto_error=False)


def require_reload_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
) -> None:
    """Guard CSV reloads with the configured `RELOAD_TOKEN`.

    With no token configured every reload is refused.

    Raises:
        HTTPException: 401 if the bearer token is absent or does not match.
    """

    presented = credentials.credentials.strip() if credentials else ""
    if not presented:
        raise HTTPException(
            status_code=401,
            detail="Authorization Bearer token is required",
        )

    expected = request.app.state.settings.reload_token
    if not expected or not secrets.compare_digest(presented, expected):
        raise HTTPException(status_code=401, detail="Reload token is invalid")
