from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from urlshortener.core.errors import AllocationExhausted, NotFound, StorageError
from urlshortener.core.url_rules import validate_original_url
from urlshortener.db.models import UrlMapping
from urlshortener.services.codes import DEFAULT_CODE_LENGTH, generate_short_code

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 10


@dataclass(frozen=True)
class ShortenResult:
    mapping: UrlMapping
    created: bool


@contextmanager
def _storage_call(action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        raise StorageError(f"{action} failed: {exc}") from exc


def _find_by_original_url(db: Session, original_url: str) -> Optional[UrlMapping]:
    stmt = (
        select(UrlMapping)
        .where(UrlMapping.original_url == original_url)
        .order_by(UrlMapping.created_at, UrlMapping.id)
        .limit(1)
    )
    return db.scalars(stmt).first()


def _code_taken(db: Session, short_code: str) -> bool:
    stmt = select(UrlMapping.id).where(UrlMapping.short_code == short_code)
    return db.scalars(stmt).first() is not None


def shorten_url(
    db: Session,
    original_url: Optional[str],
    *,
    code_length: int = DEFAULT_CODE_LENGTH,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    generate: Callable[[int], str] = generate_short_code,
) -> ShortenResult:
    """
    Returns the mapping for original_url, creating one if needed.

    Algorithm:
    - Same URL shortened before => return that mapping untouched
    - Otherwise generate candidates until one is free, then insert it
    - The free-check and the insert race with other writers; a unique
      violation on commit means someone took the code first, so retry
    - Give up with AllocationExhausted after max_attempts candidates
    """
    original_url = validate_original_url(original_url)

    with _storage_call("shorten"):
        existing = _find_by_original_url(db, original_url)
        if existing is not None:
            return ShortenResult(mapping=existing, created=False)

        for attempt in range(1, max_attempts + 1):
            candidate = generate(code_length)

            if _code_taken(db, candidate):
                logger.debug("Short code %s already taken (attempt %d)", candidate, attempt)
                continue

            mapping = UrlMapping(original_url=original_url, short_code=candidate, visit_count=0)
            db.add(mapping)
            try:
                db.commit()
            except IntegrityError as exc:
                db.rollback()
                if not _code_taken(db, candidate):
                    raise StorageError(f"insert failed: {exc}") from exc
                logger.info("Short code %s lost an insert race (attempt %d), retrying", candidate, attempt)
                continue

            db.refresh(mapping)
            logger.info("Created short URL: %s -> %s", mapping.short_code, mapping.original_url)
            return ShortenResult(mapping=mapping, created=True)

    raise AllocationExhausted(max_attempts)


def resolve_short_code(db: Session, short_code: str) -> str:
    """Counts one visit and returns the URL to redirect to."""
    with _storage_call("resolve"):
        result = db.execute(
            update(UrlMapping)
            .where(UrlMapping.short_code == short_code)
            .values(visit_count=UrlMapping.visit_count + 1)
            .execution_options(synchronize_session=False)
        )
        db.commit()

        if result.rowcount == 0:
            raise NotFound("Short URL not found")

        # original_url never changes, so reading it after the commit is safe
        return db.scalars(
            select(UrlMapping.original_url).where(UrlMapping.short_code == short_code)
        ).one()


def get_original_url(db: Session, short_code: str) -> str:
    with _storage_call("lookup"):
        original_url = db.scalars(
            select(UrlMapping.original_url).where(UrlMapping.short_code == short_code)
        ).first()

    if original_url is None:
        raise NotFound("Short URL not found")
    return original_url


def list_mappings(db: Session) -> list[UrlMapping]:
    with _storage_call("list"):
        stmt = select(UrlMapping).order_by(UrlMapping.created_at.desc(), UrlMapping.id.desc())
        return list(db.scalars(stmt).all())
