"""Database engine, sessions and bootstrap helpers."""
