import logging
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.errors import InternalError, InvalidArgument, NotFound
from crud.project_crud import PROJECT_NOT_FOUND, get_project
from models.base import utcnow
from models.project_object import ProjectObject

logger = logging.getLogger(__name__)


def _upsert_statement(dialect_name: str, values: dict[str, Any]):
    """Single-statement insert-or-replace keyed on (project_id, object_id)."""
    if dialect_name == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect_name == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    elif dialect_name in ("mysql", "mariadb"):
        from sqlalchemy.dialects.mysql import insert

        stmt = insert(ProjectObject).values(**values)
        return stmt.on_duplicate_key_update(
            properties=stmt.inserted.properties,
            updated_at=stmt.inserted.updated_at,
        )
    else:
        raise InternalError(f"Upsert is not supported on {dialect_name}")

    stmt = insert(ProjectObject).values(**values)
    return stmt.on_conflict_do_update(
        index_elements=[ProjectObject.project_id, ProjectObject.object_id],
        set_={
            "properties": stmt.excluded.properties,
            "updated_at": stmt.excluded.updated_at,
        },
    )


def get_object(db: Session, project_id: int, object_id: str):
    return (
        db.query(ProjectObject)
        .filter(ProjectObject.project_id == project_id, ProjectObject.object_id == object_id)
        .populate_existing()
        .first()
    )


def upsert_object_properties(
    db: Session,
    user_id: int,
    project_id: int,
    object_id: str,
    properties: dict[str, Any],
) -> ProjectObject:
    if not object_id or not object_id.strip():
        raise InvalidArgument("object_id is required")

    get_project(db, user_id, project_id)

    now = utcnow()
    stmt = _upsert_statement(
        db.get_bind().dialect.name,
        {
            "project_id": project_id,
            "object_id": object_id,
            "properties": properties,
            "created_at": now,
            "updated_at": now,
        },
    )
    try:
        db.execute(stmt)
        db.commit()
    except IntegrityError:
        # The project was deleted between the ownership check and the write
        db.rollback()
        raise NotFound(PROJECT_NOT_FOUND)

    logger.info("User %s wrote properties of object %s in project %s", user_id, object_id, project_id)
    return get_object(db, project_id, object_id)
