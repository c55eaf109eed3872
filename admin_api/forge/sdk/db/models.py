import datetime

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Index, Integer, String, UnicodeText
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase

# sqlite only auto-increments INTEGER PRIMARY KEY columns
ID_TYPE = BigInteger().with_variant(Integer, "sqlite")


class Base(AsyncAttrs, DeclarativeBase):
    pass


class TaskModel(Base):
    __tablename__ = "tasks"
    __table_args__ = (Index("idx_tasks_owner_created", "owner", "created_at"),)

    task_id = Column(ID_TYPE, primary_key=True, autoincrement=True)
    task_name = Column(String, nullable=False)
    task_definition = Column(UnicodeText, nullable=False)
    owner = Column(String, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow, nullable=False, index=True)
    updated_at = Column(
        DateTime,
        default=datetime.datetime.utcnow,
        onupdate=datetime.datetime.utcnow,
        nullable=False,
    )
    deleted_at = Column(DateTime, nullable=True, index=True)


class TaskRunModel(Base):
    __tablename__ = "task_runs"
    __table_args__ = (Index("idx_task_runs_task_created", "task_id", "created_at"),)

    task_run_id = Column(ID_TYPE, primary_key=True, autoincrement=True)
    task_id = Column(ID_TYPE, ForeignKey("tasks.task_id"), nullable=False, index=True)
    status = Column(String, nullable=False)
    start_time = Column(DateTime, nullable=True)
    end_time = Column(DateTime, nullable=True)
    error_message = Column(UnicodeText, nullable=True)
    execution_instance_id = Column(String, nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow, nullable=False)
