from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from typing import List
from app.config import settings
from app.database import get_db
from app.core.auth import get_current_user
from app.models.category import Category
from app.models.task import Task
from app.schemas.category import CategoryCreate, CategoryUpdate, CategoryResponse
from app.services.audit import record_activity

router = APIRouter(prefix="/categories", tags=["categories"])

DEFAULT_STYLES = {
    "Work": ("#3b82f6", "💼"),
    "Personal": ("#10b981", "🏠"),
    "Health": ("#ef4444", "💪"),
    "Learning": ("#8b5cf6", "📚"),
    "Finance": ("#f59e0b", "💰"),
}


async def _get_owned_category(db: AsyncSession, category_id: int, user_id: int) -> Category:
    result = await db.execute(
        select(Category).where(Category.id == category_id, Category.user_id == user_id)
    )
    category = result.scalar_one_or_none()
    if not category:
        raise HTTPException(404, "Category not found")
    return category


async def _ensure_unique_name(db: AsyncSession, name: str, user_id: int) -> None:
    result = await db.execute(
        select(Category.id).where(Category.user_id == user_id, Category.name == name)
    )
    if result.scalar_one_or_none() is not None:
        raise HTTPException(400, "Category already exists")


@router.get("", response_model=List[CategoryResponse])
async def list_categories(
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    result = await db.execute(
        select(Category).where(Category.user_id == current_user.id).order_by(Category.id)
    )
    categories = result.scalars().all()
    if categories:
        return categories

    # First visit: seed the default set
    for name in settings.default_categories:
        color, emoji = DEFAULT_STYLES.get(name, ("#6b7280", "📌"))
        db.add(Category(user_id=current_user.id, name=name, color=color, emoji=emoji))
    await db.commit()

    result = await db.execute(
        select(Category).where(Category.user_id == current_user.id).order_by(Category.id)
    )
    return result.scalars().all()


@router.post("", response_model=CategoryResponse)
async def create_category(
    category_in: CategoryCreate,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    await _ensure_unique_name(db, category_in.name, current_user.id)
    category = Category(user_id=current_user.id, **category_in.model_dump())
    db.add(category)
    await db.flush()
    record_activity(db, current_user.id, "category_created", "category", category.id, {"name": category.name})
    await db.commit()
    await db.refresh(category)
    return category


@router.patch("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: int,
    category_in: CategoryUpdate,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    category = await _get_owned_category(db, category_id, current_user.id)
    updates = category_in.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in updates and updates["name"] != category.name:
        await _ensure_unique_name(db, updates["name"], current_user.id)

    for field, value in updates.items():
        setattr(category, field, value)
    await db.commit()
    await db.refresh(category)
    return category


@router.delete("/{category_id}")
async def delete_category(
    category_id: int,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    category = await _get_owned_category(db, category_id, current_user.id)

    # Tasks keep existing, uncategorised
    await db.execute(
        update(Task)
        .where(Task.category_id == category_id, Task.user_id == current_user.id)
        .values(category_id=None)
    )
    await db.delete(category)
    record_activity(db, current_user.id, "category_deleted", "category", category_id, {"name": category.name})
    await db.commit()
    return {"message": "Category deleted"}
