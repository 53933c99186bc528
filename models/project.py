from sqlalchemy import Column, ForeignKey, Index, Integer, String, Text, func
from models.base import Base, TimestampMixin

class Project(Base, TimestampMixin):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True, default="")
    file_id = Column(String(255), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

Index("idx_projects_user_id_created_at", Project.user_id, Project.created_at.desc())
# Names are unique across all users, ignoring case
Index("uq_projects_name_lower", func.lower(Project.name), unique=True)
