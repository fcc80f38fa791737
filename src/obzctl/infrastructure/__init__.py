"""Infrastructure layer — archive codec, storage backends, SQLite schema.

This layer depends on stdlib, SQLAlchemy, and the domain models it
persists. It must never import from services, commands, or output.
"""
