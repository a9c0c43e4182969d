import logging
import re
from typing import Generator, Optional
from urllib.parse import unquote

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from app.core import security
from app.db import session as db_session
from app.models.user.user_model import User
from app.services.path_generator import PathGenerator
from app.services.resource_fetcher import ResourceFetcher

log = logging.getLogger(__name__)


def get_db() -> Generator[Session, None, None]:
    db = db_session.SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_resource_fetcher() -> ResourceFetcher:
    return ResourceFetcher()


def get_path_generator(fetcher: ResourceFetcher = Depends(get_resource_fetcher)) -> PathGenerator:
    return PathGenerator(fetcher=fetcher)


def _normalize_token_value(raw_token: Optional[str]) -> Optional[str]:
    """Extract a bare JWT from a cookie or header value.

    Accepts quoted values, percent-encoded ``Bearer%20`` prefixes and any
    case of the ``Bearer``/``Token`` scheme.
    """
    if raw_token is None:
        return None

    token = unquote(raw_token.strip().strip('"').strip("'"))
    match = re.match(r"^(bearer|token)[\s,:]+(.+)$", token, flags=re.IGNORECASE)
    if match:
        token = match.group(2)
    return token.strip() or None


def _user_from_token(token: str, db: Session) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
    )

    try:
        user_id = security.decode_subject(token)
    except security.TokenExpiredError:
        log.warning("Authentication failed: token expired.")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="token_expired")

    if user_id is None:
        log.warning("Authentication failed: invalid or malformed token.")
        raise credentials_exception

    user = db.get(User, user_id)
    if user is None:
        log.warning("Authentication failed: user %s not found.", user_id)
        raise credentials_exception
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="inactive_user")
    return user


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    candidates = (
        request.cookies.get("access_token"),
        request.headers.get("Authorization"),
        request.headers.get("X-Access-Token"),
    )

    last_error: Optional[HTTPException] = None
    for candidate in candidates:
        token = _normalize_token_value(candidate)
        if not token:
            continue
        try:
            return _user_from_token(token, db)
        except HTTPException as exc:
            if exc.status_code != status.HTTP_401_UNAUTHORIZED:
                raise
            last_error = exc

    if last_error is not None:
        raise last_error
    log.warning("Authentication failed: no token supplied.")
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Could not validate credentials")
