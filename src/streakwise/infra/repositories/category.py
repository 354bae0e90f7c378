"""SQLModel implementation of Category repository."""

from __future__ import annotations

from typing import Callable, Optional

from sqlmodel import Session, select

from ...models.category import Category


class SQLModelCategoryRepository:
    """SQLModel-based category repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, category_id: int) -> Optional[Category]:
        """Retrieve a category by ID."""
        with self.session_factory() as session:
            obj = session.get(Category, category_id)
            if obj:
                session.expunge(obj)
            return obj

    def get_by_name(self, name: str) -> Optional[Category]:
        """Retrieve a category by name."""
        with self.session_factory() as session:
            obj = session.exec(select(Category).where(Category.name == name)).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_all(self) -> list[Category]:
        """List all categories ordered by name."""
        with self.session_factory() as session:
            rows = list(session.exec(select(Category).order_by(Category.name)).all())  # type: ignore
            session.expunge_all()
            return rows

    def create(self, category: Category) -> Category:
        """Create a new category."""
        with self.session_factory() as session:
            session.add(category)
            session.commit()
            session.refresh(category)
            session.expunge(category)
            return category
