# /marksheet-backend/app/core/deps.py

"""
FastAPI dependencies shared by the authenticated routers.

Authentication itself is owned by an external identity service; this backend
only needs a yes/no answer before any import or marksheet operation runs.
The admin UI forwards a bearer token which is compared against the configured
`ADMIN_API_TOKEN`.
"""

import secrets
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core import config

bearer_scheme = HTTPBearer(auto_error=False)


def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """
    Rejects the request with 401 unless a valid admin bearer token is present.
    Returns the accepted token so dependants can log who called them.
    """
    expected_token = config.ADMIN_API_TOKEN
    if not credentials or not expected_token or not secrets.compare_digest(credentials.credentials, expected_token):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials
