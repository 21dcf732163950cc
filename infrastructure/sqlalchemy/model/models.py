from sqlalchemy import Column, DateTime, Integer, String, Text

from infrastructure.sqlalchemy.session.db import Base


class TaskModel(Base):
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default="Pending", index=True)
    due_date = Column(DateTime, nullable=True, index=True)
    created_at = Column(DateTime, nullable=False, index=True)
    updated_at = Column(DateTime, nullable=False)
    version = Column(Integer, nullable=False, default=1)
