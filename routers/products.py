# routers/products.py
import logging
from typing import List
from datetime import datetime, UTC

from fastapi import APIRouter, Depends, Request, Query
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from config import settings
from errors import NotFound
from models import ProductCreate, ProductUpdate, ProductOut
from utils import (
    current_user_oid,
    generate_random_sku,
    handle_duplicate_key_error,
    to_oid,
)

logger = logging.getLogger(__name__)

router = APIRouter()

def products_col(req: Request):
    return req.app.state.mongo[settings.DB_NAME]["products"]

def owner_filter(id: str, owner_id: ObjectId) -> dict:
    return {"_id": to_oid(id), "owner_id": owner_id}

def raise_conflict(e: DuplicateKeyError):
    conflict = handle_duplicate_key_error(e)
    if conflict:
        raise conflict from e
    raise e

@router.post("", response_model=ProductOut, status_code=201)
async def create_product(
    request: Request,
    payload: ProductCreate,
    owner_id: ObjectId = Depends(current_user_oid),
):
    c = products_col(request)
    doc = payload.model_dump()
    doc["sku"] = doc.get("sku") or generate_random_sku()
    doc["owner_id"] = owner_id
    if doc.get("supplier_id") is not None:
        doc["supplier_id"] = to_oid(doc["supplier_id"])
    doc["created_at"] = datetime.now(UTC)
    try:
        res = await c.insert_one(doc)
    except DuplicateKeyError as e:
        raise_conflict(e)
    logger.info(f"Created product {res.inserted_id} with sku {doc['sku']}")
    return await c.find_one({"_id": res.inserted_id})

@router.get("", response_model=List[ProductOut])
async def list_products(
    request: Request,
    limit: int = Query(50, ge=1, le=200),
    skip: int = Query(0, ge=0),
    owner_id: ObjectId = Depends(current_user_oid),
):
    c = products_col(request)
    cur = c.find({"owner_id": owner_id}).sort("_id", 1).skip(skip).limit(limit)
    return [d async for d in cur]

@router.get("/{id}", response_model=ProductOut)
async def get_product(
    request: Request,
    id: str,
    owner_id: ObjectId = Depends(current_user_oid),
):
    doc = await products_col(request).find_one(owner_filter(id, owner_id))
    if not doc:
        raise NotFound("Not found")
    return doc

@router.patch("/{id}", response_model=ProductOut)
async def patch_product(
    request: Request,
    id: str,
    patch: ProductUpdate,
    owner_id: ObjectId = Depends(current_user_oid),
):
    c = products_col(request)
    filt = owner_filter(id, owner_id)
    data = patch.model_dump(exclude_unset=True)
    if "supplier_id" in data:
        data["supplier_id"] = (
            None if data["supplier_id"] is None else to_oid(data["supplier_id"])
        )
    # required fields cannot be unset
    for key in ("name", "price", "stock", "sku"):
        if key in data and data[key] is None:
            del data[key]
    if not data:
        doc = await c.find_one(filt)
    else:
        try:
            doc = await c.find_one_and_update(
                filt,
                {"$set": data},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as e:
            raise_conflict(e)
    if not doc:
        raise NotFound("Not found")
    return doc

@router.delete("/{id}", status_code=204)
async def delete_product(
    request: Request,
    id: str,
    owner_id: ObjectId = Depends(current_user_oid),
):
    res = await products_col(request).delete_one(owner_filter(id, owner_id))
    if res.deleted_count == 0:
        raise NotFound("Not found")
    return
