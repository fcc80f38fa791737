"""Domain layer — OBF schema models, validation, board mutators, OBZ aggregate.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
