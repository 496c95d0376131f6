"""SQLite (SQLAlchemy asyncio) persistence."""
