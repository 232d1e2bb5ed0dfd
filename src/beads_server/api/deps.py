"""Request dependencies shared by the API routers"""

from typing import Optional

from fastapi import Header, HTTPException, Request

from ..storage.bead_store import BeadStore

BEARER = "bearer"


def bearer_token(authorization: Optional[str]) -> str:
    """Token from an ``Authorization: Bearer <token>`` header, or empty"""
    if not authorization:
        return ""
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != BEARER:
        return ""
    return token.strip()


def get_store(request: Request, authorization: Optional[str] = Header(None)) -> BeadStore:
    """Route the request to the store owning its bearer token"""
    token = bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=401, detail="missing or malformed Authorization header")
    store = request.app.state.registry.resolve(token)
    if store is None:
        raise HTTPException(status_code=401, detail="unknown token")
    return store
