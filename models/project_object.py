from sqlalchemy import JSON, Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from models.base import Base, TimestampMixin

class ProjectObject(Base, TimestampMixin):
    """Property bag for one model element inside a project."""

    __tablename__ = "project_objects"
    __table_args__ = (
        UniqueConstraint("project_id", "object_id", name="uq_project_objects_project_object"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    object_id = Column(String(255), nullable=False)
    properties = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=True)
