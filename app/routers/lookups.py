"""
HRMS - Lookups Router
"""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.dependencies import get_request_context
from app.schemas.common import ApiResponse, FiltersEcho, MessageResponse, PaginatedResponse
from app.schemas.lookup import LookupCreateRequest, LookupResponse, LookupUpdateRequest, LookupValue
from app.services.context import RequestContext
from app.services.lookup_service import LookupService
from app.utils.pagination import applied_filters, clamp_per_page


router = APIRouter()


@router.get("/lookups", response_model=ApiResponse[Dict[str, List[LookupValue]]], summary="All lookups by type")
async def lookups_by_type(
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    grouped = await LookupService(db, context).get_grouped()
    return ApiResponse[Dict[str, List[LookupValue]]](
        message="Lookups retrieved successfully",
        data={
            lookup_type: [LookupValue.model_validate(l) for l in lookups]
            for lookup_type, lookups in grouped.items()
        },
    )


@router.get("/lookups/lists", response_model=PaginatedResponse[LookupResponse], summary="List lookups")
async def list_lookups(
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1, le=100),
    type_filter: Optional[str] = Query(None, alias="type"),
    search: Optional[str] = Query(None),
    sort_by: str = Query("type", pattern="^(type|value|created_at)$"),
    sort_order: str = Query("asc", pattern="^(asc|desc)$"),
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    per_page = clamp_per_page(per_page)
    lookups, pagination = await LookupService(db, context).list_lookups(
        page=page,
        per_page=per_page,
        type_filter=type_filter,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return PaginatedResponse[LookupResponse](
        message="Lookups retrieved successfully",
        data=[LookupResponse.model_validate(l) for l in lookups],
        pagination=pagination,
        filters=FiltersEcho(applied_filters=applied_filters(type=type_filter, search=search)),
    )


@router.get("/lookups/search", response_model=ApiResponse[List[LookupResponse]], summary="Search lookups")
async def search_lookups(
    q: str = Query(..., min_length=1),
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    lookups = await LookupService(db, context).search(q)
    return ApiResponse[List[LookupResponse]](
        message="Lookups retrieved successfully",
        data=[LookupResponse.model_validate(l) for l in lookups],
    )


@router.get("/lookups/types", response_model=ApiResponse[List[str]], summary="Lookup types")
async def lookup_types(
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    types = await LookupService(db, context).get_types()
    return ApiResponse[List[str]](message="Lookup types retrieved successfully", data=types)


@router.get("/lookups/type/{lookup_type}", response_model=ApiResponse[List[LookupResponse]], summary="Lookups of one type")
async def lookups_of_type(
    lookup_type: str,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    lookups = await LookupService(db, context).get_by_type(lookup_type)
    return ApiResponse[List[LookupResponse]](
        message="Lookups retrieved successfully",
        data=[LookupResponse.model_validate(l) for l in lookups],
    )


@router.get("/lookups/{lookup_id}", response_model=ApiResponse[LookupResponse], summary="Get lookup")
async def get_lookup(
    lookup_id: int,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    lookup = await LookupService(db, context).get_lookup(lookup_id)
    return ApiResponse[LookupResponse](
        message="Lookup retrieved successfully",
        data=LookupResponse.model_validate(lookup),
    )


@router.post(
    "/lookups",
    response_model=ApiResponse[LookupResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create lookup",
)
async def create_lookup(
    request: LookupCreateRequest,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    lookup = await LookupService(db, context).create_lookup(request.model_dump())
    return ApiResponse[LookupResponse](
        message="Lookup created successfully",
        data=LookupResponse.model_validate(lookup),
    )


@router.put("/lookups/{lookup_id}", response_model=ApiResponse[LookupResponse], summary="Update lookup")
async def update_lookup(
    lookup_id: int,
    request: LookupUpdateRequest,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    lookup = await LookupService(db, context).update_lookup(lookup_id, request.model_dump(exclude_unset=True))
    return ApiResponse[LookupResponse](
        message="Lookup updated successfully",
        data=LookupResponse.model_validate(lookup),
    )


@router.delete("/lookups/{lookup_id}", response_model=MessageResponse, summary="Delete lookup")
async def delete_lookup(
    lookup_id: int,
    context: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_async_session),
):
    await LookupService(db, context).delete_lookup(lookup_id)
    return MessageResponse(message="Lookup deleted successfully")
