# routers/auth.py
import logging
from datetime import datetime, UTC

from fastapi import APIRouter, Depends, Request, Response
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from config import settings
from errors import NotFound, Unauthorized
from models import UserCreate, UserLogin, UserOut
from tokens import create_jwt
from utils import (
    current_user_oid,
    handle_duplicate_key_error,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)

router = APIRouter()

def users_col(req: Request):
    return req.app.state.mongo[settings.DB_NAME]["users"]

def set_auth_cookie(response: Response, user_id: str) -> None:
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=create_jwt(user_id),
        max_age=settings.JWT_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )

@router.post("/register", response_model=UserOut, status_code=201)
async def register(request: Request, payload: UserCreate):
    c = users_col(request)
    doc = payload.model_dump()
    doc["password_hash"] = hash_password(doc.pop("password"))
    doc["created_at"] = datetime.now(UTC)
    try:
        res = await c.insert_one(doc)
    except DuplicateKeyError as e:
        conflict = handle_duplicate_key_error(e)
        if conflict:
            raise conflict from e
        raise
    logger.info(f"Registered user {res.inserted_id}")
    return await c.find_one({"_id": res.inserted_id}, {"password_hash": 0})

@router.post("/login", response_model=UserOut)
async def login(request: Request, response: Response, payload: UserLogin):
    c = users_col(request)
    doc = await c.find_one({"email": payload.email})
    if not doc or not verify_password(payload.password, doc.get("password_hash", "")):
        raise Unauthorized("Email atau password salah")
    set_auth_cookie(response, str(doc["_id"]))
    doc.pop("password_hash", None)
    return doc

@router.post("/logout", status_code=204)
async def logout(response: Response):
    response.delete_cookie(settings.AUTH_COOKIE_NAME)
    return

@router.get("/me", response_model=UserOut)
async def me(request: Request, user_oid: ObjectId = Depends(current_user_oid)):
    doc = await users_col(request).find_one({"_id": user_oid}, {"password_hash": 0})
    if not doc:
        raise NotFound("User not found")
    return doc
