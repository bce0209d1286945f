"""Goods type router."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from freight_api.src.dependencies import get_goods_repository, require_admin
from freight_api.src.models.auth import CurrentUser
from freight_api.src.models.catalog import GoodsTypeCreate, GoodsTypeUpdate
from freight_api.src.models.common import ErrorResponse, serialize_document, serialize_documents
from freight_api.src.repositories.base import DuplicateResourceError
from freight_api.src.repositories.catalog_repo import GoodsTypeRepository

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/goods",
    tags=["Goods Types"],
    responses={404: {"model": ErrorResponse, "description": "Goods type not found"}}
)

ALREADY_EXISTS = "Goods type already exists."


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Goods type not found.")


@router.get("", summary="List Goods Types")
async def list_goods_types(
    show_all: bool = Query(False, alias="showAll", description="Include inactive types"),
    repo: GoodsTypeRepository = Depends(get_goods_repository)
):
    types = await repo.list_by_name(show_all=show_all)
    return {"success": True, "types": serialize_documents(types)}


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create Goods Type",
    responses={409: {"model": ErrorResponse, "description": ALREADY_EXISTS}}
)
async def create_goods_type(
    goods_type: GoodsTypeCreate,
    admin: CurrentUser = Depends(require_admin),
    repo: GoodsTypeRepository = Depends(get_goods_repository)
):
    if await repo.name_exists(goods_type.name):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=ALREADY_EXISTS)

    try:
        created = await repo.create(goods_type.to_document())
    except DuplicateResourceError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=ALREADY_EXISTS)

    logger.info("goods_type_created", goods_type_id=str(created["_id"]), name=created["name"])
    return {"success": True, "goodsType": serialize_document(created)}


@router.put("/{goods_type_id}", summary="Update Goods Type")
async def update_goods_type(
    goods_type_id: str,
    update: GoodsTypeUpdate,
    admin: CurrentUser = Depends(require_admin),
    repo: GoodsTypeRepository = Depends(get_goods_repository)
):
    try:
        goods_type = await repo.update_by_id(goods_type_id, update.to_document(partial=True))
    except DuplicateResourceError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=ALREADY_EXISTS)

    if goods_type is None:
        raise _not_found()
    return {"success": True, "goodsType": serialize_document(goods_type)}


@router.delete("/{goods_type_id}", summary="Delete Goods Type")
async def delete_goods_type(
    goods_type_id: str,
    admin: CurrentUser = Depends(require_admin),
    repo: GoodsTypeRepository = Depends(get_goods_repository)
):
    if await repo.delete_by_id(goods_type_id) is None:
        raise _not_found()
    return {"success": True, "message": "Goods type deleted."}
