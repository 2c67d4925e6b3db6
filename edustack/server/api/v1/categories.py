"""
Category Endpoints.

Public browsing of the category tree; creating, editing and deleting
categories needs the ``manage_categories`` permission.
"""

from fastapi import APIRouter, Depends, status

from edustack.core.models.io import (
    ApiResponse,
    CategoryCreate,
    CategoryData,
    CategoryDetailData,
    CategoryListData,
    CategoryUpdate,
)
from edustack.server.services.categories import CategoryService
from edustack.server.services.deps import SessionDep, require_permission

router = APIRouter()

manage_categories = Depends(require_permission("manage_categories"))


@router.get(
    "",
    response_model=ApiResponse[CategoryListData],
    summary="List Categories",
    description="Active root categories ordered by sort order, each with its active children and course count.",
)
async def list_categories(session: SessionDep) -> ApiResponse[CategoryListData]:
    categories = await CategoryService(session).list_categories()
    return ApiResponse[CategoryListData](data=CategoryListData(categories=categories))


@router.get(
    "/{category_id}",
    response_model=ApiResponse[CategoryDetailData],
    summary="Get Category",
    description="A category with its parent, active children and up to ten newest published courses.",
    responses={404: {"description": "Category not found"}},
)
async def get_category(category_id: str, session: SessionDep) -> ApiResponse[CategoryDetailData]:
    category = await CategoryService(session).get_category(category_id)
    return ApiResponse[CategoryDetailData](data=CategoryDetailData(category=category))


@router.post(
    "",
    response_model=ApiResponse[CategoryData],
    status_code=status.HTTP_201_CREATED,
    dependencies=[manage_categories],
    summary="Create Category",
    description="Create a category. The slug is derived from the name and must be unique.",
    responses={400: {"description": "Category with this name already exists"}},
)
async def create_category(payload: CategoryCreate, session: SessionDep) -> ApiResponse[CategoryData]:
    category = await CategoryService(session).create_category(payload)
    return ApiResponse[CategoryData](message="Category created successfully", data=CategoryData(category=category))


@router.put(
    "/{category_id}",
    response_model=ApiResponse[CategoryData],
    dependencies=[manage_categories],
    summary="Update Category",
    description="Update a category. Renaming recomputes the slug.",
)
async def update_category(category_id: str, payload: CategoryUpdate, session: SessionDep) -> ApiResponse[CategoryData]:
    category = await CategoryService(session).update_category(category_id, payload)
    return ApiResponse[CategoryData](message="Category updated successfully", data=CategoryData(category=category))


@router.delete(
    "/{category_id}",
    response_model=ApiResponse,
    dependencies=[manage_categories],
    summary="Delete Category",
    description="Delete a category that has neither courses nor subcategories.",
)
async def delete_category(category_id: str, session: SessionDep) -> ApiResponse:
    await CategoryService(session).delete_category(category_id)
    return ApiResponse(message="Category deleted successfully")
