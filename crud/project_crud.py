import logging

from sqlalchemy import desc, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.errors import Conflict, InvalidArgument, NotFound
from core.validators import project_field_error
from models.base import utcnow
from models.project import Project
from schemas.project_schema import ProjectRequest

logger = logging.getLogger(__name__)

PROJECT_NOT_FOUND = "Project not found"
DUPLICATE_NAME = "A project with the same name already exists"


def _check_fields(payload: ProjectRequest) -> None:
    error = project_field_error(payload.name, payload.description, payload.file_id)
    if error:
        raise InvalidArgument(error)


def _check_name_free(db: Session, name: str, exclude_project_id: int | None = None) -> None:
    if is_project_name_taken(db, name, exclude_project_id=exclude_project_id):
        raise Conflict(DUPLICATE_NAME)


def _commit(db: Session) -> None:
    # The unique lower(name) index settles races the lookup above cannot
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict(DUPLICATE_NAME)


def is_project_name_taken(db: Session, name: str, exclude_project_id: int | None = None) -> bool:
    # NOTE: checked across every user's projects, not only the caller's
    q = db.query(Project.id).filter(func.lower(Project.name) == func.lower(name.strip()))
    if exclude_project_id is not None:
        q = q.filter(Project.id != exclude_project_id)
    return q.first() is not None


def list_projects(db: Session, user_id: int):
    return (
        db.query(Project)
        .filter(Project.user_id == user_id)
        .order_by(desc(Project.created_at), desc(Project.id))
        .all()
    )


def get_project(db: Session, user_id: int, project_id: int) -> Project:
    # Someone else's project is reported exactly like a missing one
    proj = (
        db.query(Project)
        .filter(Project.id == project_id, Project.user_id == user_id)
        .first()
    )
    if proj is None:
        raise NotFound(PROJECT_NOT_FOUND)
    return proj


def create_project(db: Session, user_id: int, payload: ProjectRequest) -> Project:
    _check_fields(payload)
    _check_name_free(db, payload.name)
    now = utcnow()
    proj = Project(
        user_id=user_id,
        name=payload.name.strip(),
        description=payload.description or "",
        file_id=payload.file_id.strip(),
        created_at=now,
        updated_at=now,
    )
    db.add(proj)
    _commit(db)
    db.refresh(proj)
    logger.info("User %s created project %s", user_id, proj.id)
    return proj


def update_project(db: Session, user_id: int, project_id: int, payload: ProjectRequest) -> Project:
    _check_fields(payload)
    proj = get_project(db, user_id, project_id)
    _check_name_free(db, payload.name, exclude_project_id=proj.id)
    proj.name = payload.name.strip()
    proj.description = payload.description or ""
    proj.file_id = payload.file_id.strip()
    proj.updated_at = utcnow()
    _commit(db)
    db.refresh(proj)
    logger.info("User %s updated project %s", user_id, proj.id)
    return proj


def delete_project(db: Session, user_id: int, project_id: int) -> None:
    # project_objects rows go with it through ON DELETE CASCADE
    deleted = (
        db.query(Project)
        .filter(Project.id == project_id, Project.user_id == user_id)
        .delete(synchronize_session=False)
    )
    if not deleted:
        db.rollback()
        raise NotFound(PROJECT_NOT_FOUND)
    db.commit()
    logger.info("User %s deleted project %s", user_id, project_id)
