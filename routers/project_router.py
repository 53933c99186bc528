from typing import Any

from fastapi import APIRouter, Body, Depends, Response, status
from sqlalchemy.orm import Session

from core.auth import get_current_user
from core.database import get_db
from core.errors import InvalidArgument
from core.security import AuthIdentity
from crud.project_crud import create_project, delete_project, get_project, list_projects, update_project
from crud.project_object_crud import upsert_object_properties
from schemas.project_schema import ObjectPropertiesResponse, ProjectRequest, ProjectResponse


router = APIRouter(prefix="/api/projects", tags=["Projects"])


@router.get("", response_model=list[ProjectResponse])
def list_all(db: Session = Depends(get_db), current_user: AuthIdentity = Depends(get_current_user)):
    return list_projects(db, current_user.user_id)


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
def create(
    payload: ProjectRequest,
    db: Session = Depends(get_db),
    current_user: AuthIdentity = Depends(get_current_user),
):
    return create_project(db, current_user.user_id, payload)


@router.get("/{project_id}", response_model=ProjectResponse)
def read_one(project_id: int, db: Session = Depends(get_db), current_user: AuthIdentity = Depends(get_current_user)):
    return get_project(db, current_user.user_id, project_id)


@router.put("/{project_id}", response_model=ProjectResponse)
def update(
    project_id: int,
    payload: ProjectRequest,
    db: Session = Depends(get_db),
    current_user: AuthIdentity = Depends(get_current_user),
):
    return update_project(db, current_user.user_id, project_id, payload)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete(project_id: int, db: Session = Depends(get_db), current_user: AuthIdentity = Depends(get_current_user)):
    delete_project(db, current_user.user_id, project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{project_id}/objects/{object_id}", response_model=ObjectPropertiesResponse)
def update_object_properties(
    project_id: int,
    object_id: str,
    properties: Any = Body(...),
    db: Session = Depends(get_db),
    current_user: AuthIdentity = Depends(get_current_user),
):
    """
    Replace the property bag of one model object (insert on first write).
    """
    if not isinstance(properties, dict):
        raise InvalidArgument("Request body must be a JSON object")
    obj = upsert_object_properties(db, current_user.user_id, project_id, object_id, properties)
    return ObjectPropertiesResponse(
        message="Object properties updated",
        object_id=obj.object_id,
        properties=obj.properties or {},
    )
