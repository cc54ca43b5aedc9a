import logging
import time
from typing import Optional

from fastapi import Depends, HTTPException, Request
from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from boutique.config import settings
from boutique.database import get_session
from boutique.models.rate_limit import RateLimitCounter

logger = logging.getLogger(__name__)


def _window_start(now: float, window_seconds: int) -> int:
    return int(now // window_seconds) * window_seconds


def hit(
    session: Session,
    key: str,
    window_seconds: int,
    now: Optional[float] = None,
) -> int:
    """Count one request for ``key`` in the current fixed window and return the new count."""
    now = time.time() if now is None else now
    window_start = _window_start(now, window_seconds)

    for _ in range(2):
        result = session.execute(
            update(RateLimitCounter)
            .where(RateLimitCounter.key == key)
            .where(RateLimitCounter.window_start == window_start)
            .values(count=RateLimitCounter.count + 1)
        )
        if result.rowcount:
            session.commit()
            break

        # first request in this window; another instance may race us to it
        session.add(RateLimitCounter(
            key=key,
            window_start=window_start,
            expires_at=window_start + window_seconds,
            count=1,
        ))
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            continue

        # drop finished windows of every client, not only this one
        session.execute(
            delete(RateLimitCounter).where(RateLimitCounter.expires_at <= now)
        )
        session.commit()
        break

    counter = session.exec(
        select(RateLimitCounter)
        .where(RateLimitCounter.key == key)
        .where(RateLimitCounter.window_start == window_start)
    ).one()
    return counter.count


def client_identity(request: Request) -> str:
    """
    Address of the client that reached the outermost trusted proxy.

    With ``TRUSTED_PROXY_HOPS = 0`` the socket peer is used and any
    ``X-Forwarded-For`` header is ignored. Otherwise the header is read from
    the right, since every hop before the trusted ones is client controlled.
    """
    peer = request.client.host if request.client else "unknown"
    hops = settings.TRUSTED_PROXY_HOPS
    if hops <= 0:
        return peer

    forwarded = request.headers.get("x-forwarded-for")
    if not forwarded:
        return peer
    parts = [p.strip() for p in forwarded.split(",") if p.strip()]
    if len(parts) < hops:
        return peer
    return parts[-hops]


def check_rate_limit(
    session: Session,
    scope: str,
    request: Request,
    limit: int,
    window_seconds: int,
):
    key = f"{scope}:{client_identity(request)}"
    count = hit(session, key, window_seconds)
    if count > limit:
        logger.warning(f"Rate limit exceeded for {key} ({count}/{limit})")
        raise HTTPException(429, "Too many requests. Please try again later.")


def limit_order_creation(request: Request, session: Session = Depends(get_session)):
    check_rate_limit(
        session,
        "create-order",
        request,
        limit=settings.ORDER_RATE_LIMIT,
        window_seconds=settings.ORDER_RATE_WINDOW_SECONDS,
    )
