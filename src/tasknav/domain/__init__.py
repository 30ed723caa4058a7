"""Domain layer — task matching, front-matter rules, and line coordinates.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
