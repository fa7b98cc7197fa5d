# profilehub/store/__init__.py
# Mutation surface over profiles & master data

from .profiles import ProfilesStore

__all__ = ["ProfilesStore"]
