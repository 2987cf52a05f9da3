"""Generic repository contract.

``IRepository[T]`` is the base that every module's repository interface
extends.  Services depend on these abstractions and receive the Django
implementations through their constructor.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


class IRepository(ABC, Generic[T]):
    """Base generic repository contract.

    ``T`` is the aggregate managed by the repository (e.g. ``Account``,
    ``Order``).  Lookups return ``None`` for missing or malformed IDs and
    leave it to the service to raise the domain error.
    """

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[T]:
        """Retrieve an entity by its primary key."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[T]:
        """List entities with optional ORM look-ups."""

    @abstractmethod
    def save(self, entity: T) -> T:
        """Persist (create or update) an entity."""
