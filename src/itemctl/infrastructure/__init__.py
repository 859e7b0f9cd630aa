"""Infrastructure layer — SQLite persistence via SQLAlchemy Core."""
