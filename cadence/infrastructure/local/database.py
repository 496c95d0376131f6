"""
SQLite database configuration and ORM models.

This module defines the SQLAlchemy ORM models and database initialization.
"""

from datetime import datetime
from functools import lru_cache
from uuid import uuid4

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from cadence.core.config import get_settings


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


# ===========================================
# ORM Models
# ===========================================


class TaskORM(Base):
    """Task ORM model."""

    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), default="TODO", index=True)
    priority = Column(String(10), default="MEDIUM", index=True)
    due_date = Column(DateTime, nullable=True, index=True)
    tags = Column(JSON, nullable=True, default=list)
    recurrence_template_id = Column(String(64), nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class RecurrenceTemplateORM(Base):
    """Recurrence template ORM model."""

    __tablename__ = "recurrence_templates"

    id = Column(String(64), primary_key=True, default=lambda: str(uuid4()))
    name = Column(String(200), nullable=False)
    intervals = Column(JSON, nullable=False, default=list)
    day_of_month = Column(Integer, nullable=True)
    # Both set -> weekday occurrence mode; otherwise sequential
    weekday = Column(Integer, nullable=True)
    occurrence_in_month = Column(Integer, nullable=True)


class RecurringTaskORM(Base):
    """Recurring task definition ORM model."""

    __tablename__ = "recurring_tasks"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    priority = Column(String(10), default="MEDIUM")
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=True)
    intervals = Column(JSON, nullable=False, default=list)
    tags = Column(JSON, nullable=True, default=list)
    category_ids = Column(JSON, nullable=True, default=list)
    status = Column(String(10), default="ACTIVE", index=True)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class TaskRecurringLinkORM(Base):
    """Junction between generated tasks and their recurring task."""

    __tablename__ = "task_recurring_links"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    recurring_task_id = Column(String(36), nullable=False, index=True)
    task_id = Column(String(36), nullable=False, index=True)
    original_generated_date = Column(DateTime, nullable=False)
    last_regenerated_date = Column(DateTime, nullable=False, default=datetime.now)


# ===========================================
# Database Session Management
# ===========================================


@lru_cache()
def get_engine() -> AsyncEngine:
    """Get async engine instance."""
    settings = get_settings()
    return create_async_engine(settings.DATABASE_URL, echo=settings.DEBUG)


def get_session_factory():
    """Get async session factory."""
    engine = get_engine()
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine | None = None):
    """Initialize database tables."""
    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
