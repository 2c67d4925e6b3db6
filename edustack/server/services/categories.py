"""
Category tree service.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from edustack.core.database.entities.categories import Category
from edustack.core.database.repositories.categories import CategoryRepository
from edustack.core.database.repositories.courses import CourseRepository
from edustack.core.errors import BadRequestError, ConflictError, NotFoundError
from edustack.core.identifiers import slugify
from edustack.core.logging_config import get_logger
from edustack.core.models.io.categories import CategoryBrief, CategoryCreate, CategoryDetail, CategoryRead, CategoryUpdate
from edustack.core.models.io.courses import CourseSummary

logger = get_logger(__name__)

CATEGORY_NOT_FOUND = "Category not found"
NAME_TAKEN = "Category with this name already exists"
NULLABLE_FIELDS = {"description", "parent_id", "icon", "color"}


def _active_children(category: Category) -> List[CategoryBrief]:
    return [CategoryBrief.model_validate(child) for child in category.children if child.is_active]


class CategoryService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.categories = CategoryRepository(session)

    async def _get(self, category_id: str) -> Category:
        category = await self.categories.get_detail(category_id)
        if category is None:
            raise NotFoundError(CATEGORY_NOT_FOUND)
        return category

    async def _check_parent(self, parent_id: Optional[str], category_id: Optional[str] = None) -> None:
        if parent_id is None:
            return
        if parent_id == category_id:
            raise BadRequestError("A category cannot be its own parent")
        if await self.categories.get_by_id(parent_id) is None:
            raise NotFoundError("Parent category not found")

    async def _read(self, category: Category) -> CategoryRead:
        counts = await self.categories.course_counts([category.id])
        return CategoryRead.model_validate(category).model_copy(
            update={"course_count": counts.get(category.id, 0), "children": _active_children(category)}
        )

    async def list_categories(self) -> List[CategoryRead]:
        """Active root categories with their active children and course counts."""
        roots = await self.categories.list_active_roots()
        counts = await self.categories.course_counts([category.id for category in roots])
        return [
            CategoryRead.model_validate(category).model_copy(
                update={"course_count": counts.get(category.id, 0), "children": _active_children(category)}
            )
            for category in roots
        ]

    async def get_category(self, category_id: str) -> CategoryDetail:
        category = await self._get(category_id)
        courses = await CourseRepository(self.session).latest_published_in_category(category.id, limit=10)
        read = await self._read(category)
        return CategoryDetail(
            **read.model_dump(),
            parent=CategoryBrief.model_validate(category.parent) if category.parent else None,
            courses=[CourseSummary.model_validate(course) for course in courses],
        )

    async def create_category(self, payload: CategoryCreate) -> CategoryRead:
        slug = slugify(payload.name)
        if await self.categories.get_by_slug(slug) is not None:
            raise ConflictError(NAME_TAKEN)
        await self._check_parent(payload.parent_id)
        category = await self.categories.create(Category(**payload.model_dump(), slug=slug))
        await self.session.commit()
        logger.info(f"Category {category.id} ({slug}) created")
        return await self._read(await self._get(category.id))

    async def update_category(self, category_id: str, payload: CategoryUpdate) -> CategoryRead:
        category = await self._get(category_id)
        changes = payload.model_dump(exclude_unset=True)
        if changes.get("name") is not None and changes["name"] != category.name:
            slug = slugify(changes["name"])
            clash = await self.categories.get_by_slug(slug)
            if clash is not None and clash.id != category.id:
                raise ConflictError(NAME_TAKEN)
            changes["slug"] = slug
        if "parent_id" in changes:
            await self._check_parent(changes["parent_id"], category.id)
        changes = {key: value for key, value in changes.items() if value is not None or key in NULLABLE_FIELDS}
        await self.categories.update(category, changes)
        await self.session.commit()
        logger.info(f"Category {category.id} updated: {sorted(changes)}")
        return await self._read(await self._get(category.id))

    async def delete_category(self, category_id: str) -> None:
        category = await self._get(category_id)
        if (await self.categories.course_counts([category.id])).get(category.id, 0) > 0:
            raise BadRequestError("Cannot delete category with courses. Move courses to another category first.")
        if await self.categories.has_children(category.id):
            raise BadRequestError("Cannot delete category with subcategories. Delete subcategories first.")
        await self.categories.delete(category)
        await self.session.commit()
        logger.info(f"Category {category_id} deleted")

