"""FastAPI dependencies that resolve the caller from the Authorization header."""

from fastapi import Depends, Header

from storefront.identity.tokens import Identity, verify_token
from storefront.shared.errors import Forbidden, Unauthorized
from storefront.utils.logging import bind_request_context


async def current_identity(authorization: str = Header(default="")) -> Identity:
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthorized("Authentication required")

    identity = verify_token(token.strip())
    bind_request_context(user_id=identity.user_id)
    return identity


async def require_admin(identity: Identity = Depends(current_identity)) -> Identity:
    if not identity.is_admin:
        raise Forbidden("Admin access required")
    return identity
