"""Caller identification for the admin API.

Requests carry a bearer access token; the dependency here resolves it to the
caller's user ID. Issuing tokens and managing users live outside this service.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from src import auth_utils


security = HTTPBearer()


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> int:
    """
    Dependency to get the ID of the authenticated caller from a JWT token.

    Raises HTTPException if the token is invalid.
    """
    try:
        return auth_utils.get_token_user_id(credentials.credentials)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"}
        )
