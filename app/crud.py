import logging
from datetime import datetime, timezone

import codes
import database
import errors
import models
from sqlalchemy import case, exists
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger("tinylink.crud")

MAX_GENERATE_ATTEMPTS = 5


def code_exists(db: Session, code: str) -> bool:
    # Deleted rows still hold their code
    return db.query(exists().where(models.Link.code == code)).scalar()


def _allocate_code(db: Session) -> str:
    for attempt in range(1, MAX_GENERATE_ATTEMPTS + 1):
        candidate = codes.generate_code()
        if not code_exists(db, candidate):
            return candidate
        logger.debug("Generated code %s is taken (attempt %d)", candidate, attempt)
    raise errors.AllocationExhausted()


def create_link(db: Session, target_url: str, code: str | None = None) -> models.Link:
    """Insert a new link under ``code``, or under a freshly generated code.

    The existence check used while generating only saves wasted inserts; the
    unique constraint on ``links.code`` decides, and its violation is reported
    as CodeConflict on both paths.
    """
    if not codes.is_valid_url(target_url):
        raise errors.InvalidInput("Invalid URL")
    if code and not codes.is_valid_code(code):
        raise errors.InvalidInput("Code must match [A-Za-z0-9]{6,8}")
    if code in codes.RESERVED_CODES:
        raise errors.InvalidInput("Code is reserved")

    try:
        if not code:
            code = _allocate_code(db)
        link = models.Link(code=code, target_url=target_url)
        with database.transaction(db):
            db.add(link)
        db.refresh(link)
    except IntegrityError as exc:
        logger.info("Code conflict on insert: %s", code)
        raise errors.CodeConflict() from exc
    except SQLAlchemyError as exc:
        logger.exception("Failed to create link %s", code)
        raise errors.ServerError() from exc
    logger.info("Created link %s -> %s", link.code, link.target_url)
    return link


def get_link(db: Session, code: str) -> models.Link | None:
    return db.query(models.Link).filter(models.Link.code == code, models.is_live()).first()


def get_links(db: Session) -> list[models.Link]:
    return (
        db.query(models.Link)
        .filter(models.is_live())
        .order_by(models.Link.created_at.desc(), models.Link.id.desc())
        .all()
    )


def delete_link(db: Session, code: str) -> bool:
    with database.transaction(db):
        affected = (
            db.query(models.Link)
            .filter(models.Link.code == code, models.is_live())
            .update({models.Link.deleted: True}, synchronize_session=False)
        )
    return affected > 0


def _fetch_target(db: Session, code: str) -> str:
    return db.query(models.Link.target_url).filter(models.Link.code == code).scalar()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def resolve_and_record_click(db: Session, code: str) -> str:
    """Count one click on a live link and return its target URL.

    The increment runs first so the row is locked before it is read; the
    counter and ``last_clicked`` are committed together with the lookup, or
    rolled back together. ``last_clicked`` never moves backwards: a click
    that took its timestamp before waiting on the lock keeps the newer value
    already written by a later click.
    """
    now = _now()
    try:
        with database.transaction(db):
            affected = (
                db.query(models.Link)
                .filter(models.Link.code == code, models.is_live())
                .update(
                    {
                        models.Link.total_clicks: models.Link.total_clicks + 1,
                        models.Link.last_clicked: case(
                            (models.Link.last_clicked > now, models.Link.last_clicked),
                            else_=now,
                        ),
                    },
                    synchronize_session=False,
                )
            )
            if not affected:
                raise errors.NotFound()
            target_url = _fetch_target(db, code)
    except SQLAlchemyError as exc:
        logger.exception("Failed to record click for %s", code)
        raise errors.ServerError() from exc
    return target_url
