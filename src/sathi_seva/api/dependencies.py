"""Request dependencies for the API routes."""

from fastapi import HTTPException, Request, status

from sathi_seva.config import settings
from sathi_seva.container import Marketplace


def get_marketplace(request: Request) -> Marketplace:
    """Services created during application startup."""
    marketplace = getattr(request.app.state, "marketplace", None)
    if marketplace is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Marketplace not initialized")
    return marketplace


async def get_current_user(request: Request) -> str:
    """User id forwarded by the upstream authentication proxy."""
    user_id = request.headers.get(settings.user_id_header)
    if not user_id or not user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing {settings.user_id_header} header"
        )
    return user_id.strip()
