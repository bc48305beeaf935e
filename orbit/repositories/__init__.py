"""Persistence repositories for the store service."""

from .store import StoreRepository, store_repository

__all__ = ["StoreRepository", "store_repository"]
