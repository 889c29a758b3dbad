import secrets

from fastapi import Header, HTTPException, status

from config import settings


async def require_scheduler_token(
    authorization: str | None = Header(default=None, convert_underscores=False),
) -> None:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing auth token"
        )
    token = authorization.split(" ", 1)[1]
    if not secrets.compare_digest(token, settings.scheduler_api_token):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid auth token"
        )
