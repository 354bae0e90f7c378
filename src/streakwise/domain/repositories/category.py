"""Category repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.category import Category


class CategoryRepository(Protocol):
    """Repository for managing habit categories."""

    def get_by_id(self, category_id: int) -> Optional[Category]:
        """Retrieve a category by ID."""
        ...

    def get_by_name(self, name: str) -> Optional[Category]:
        """Retrieve a category by name."""
        ...

    def list_all(self) -> list[Category]:
        """List all categories ordered by name."""
        ...

    def create(self, category: Category) -> Category:
        """Create a new category."""
        ...
