"""
Small helpers shared by routers and services.
"""
import logging
import random
import string
import time
from datetime import datetime, timezone
from typing import Callable, Optional, Type, TypeVar
from urllib.parse import urlparse

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")

_BASE36 = string.digits + string.ascii_lowercase


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes (as SQLite hands them back) as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def extract_origin(url: str | None) -> Optional[str]:
    """Return the origin (scheme + host [+ port]) from a URL-like string."""
    if not url:
        return None
    parsed = urlparse(url.strip())
    if parsed.scheme and parsed.netloc:
        return f"{parsed.scheme}://{parsed.netloc}"
    return None


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def generate_affiliate_code() -> str:
    """
    Build an 8-character referral code: the last 4 base-36 digits of the
    millisecond timestamp followed by 4 random base-36 characters, upper-cased.
    """
    timestamp = _to_base36(int(time.time() * 1000)).rjust(4, "0")[-4:]
    suffix = "".join(random.choices(_BASE36, k=4))
    return (timestamp + suffix).upper()


def get_or_create(
    db: Session,
    model: Type[ModelT],
    user_id,
    factory: Callable[[], ModelT],
) -> ModelT:
    """
    Return the model row owned by ``user_id``, inserting it on first access.

    ``model`` must carry a unique constraint on ``user_id``. When a concurrent
    request wins the insert, the violation is rolled back and the winner's
    row is returned.
    """
    instance = db.query(model).filter(model.user_id == user_id).first()
    if instance is not None:
        return instance

    instance = factory()
    db.add(instance)
    try:
        db.commit()
    except IntegrityError:
        logger.info("Concurrent creation of %s for user %s; using existing row", model.__name__, user_id)
        db.rollback()
        instance = db.query(model).filter(model.user_id == user_id).one()
        return instance

    db.refresh(instance)
    return instance
