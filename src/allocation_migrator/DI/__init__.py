"""Dependency injection."""

from allocation_migrator.DI.container import Container

__all__ = ["Container"]
