"""
FastAPI dependencies wiring the shared session store, identity provider and
rate limiter into per-request verification services
"""
from typing import Optional
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from .db import get_db
from .services.identity import IdentityProvider, get_identity_provider
from .services.rate_limit import RateLimitService, get_rate_limit_service
from .services.session_store import OTPSessionStore
from .services.verification_service import VerificationService


def get_session_store(request: Request) -> OTPSessionStore:
    """The store created by the application lifespan"""
    return request.app.state.session_store


def get_verification_service(
    db: Session = Depends(get_db),
    store: OTPSessionStore = Depends(get_session_store),
    provider: IdentityProvider = Depends(get_identity_provider),
    rate_limiter: Optional[RateLimitService] = Depends(get_rate_limit_service),
) -> VerificationService:
    return VerificationService(db=db, store=store, provider=provider, rate_limiter=rate_limiter)
