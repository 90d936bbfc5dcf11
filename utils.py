# utils.py
import logging
import re
import secrets
import string
from typing import Annotated, Any, Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from bson import ObjectId
from fastapi import Depends, Request
from pydantic import PlainSerializer, PlainValidator, WithJsonSchema
from pymongo.errors import BulkWriteError, PyMongoError, WriteConcernError, WriteError

from config import settings
from errors import BadRequest, Conflict, ServiceError, Unauthorized
from tokens import decode_jwt, is_jwt_expired

logger = logging.getLogger(__name__)

DUPLICATE_KEY_CODE = 11000
SKU_PREFIX = "SKU-"
SKU_LENGTH = 5
# nanoid's url-safe alphabet
SKU_ALPHABET = string.ascii_letters + string.digits + "_-"

_DUP_KEY_RE = re.compile(r"dup key: \{ ([^:]+):")
_OID_RE = re.compile(r"[0-9a-fA-F]{24}")
_ph = PasswordHasher()


# ObjectId <-> str

def object_id_as_string(oid: ObjectId) -> str:
    return str(oid)


def opt_object_id_as_string(oid: Optional[ObjectId]) -> Optional[str]:
    return None if oid is None else str(oid)


def string_id_to_obj_id(s: Any) -> Optional[ObjectId]:
    # ObjectId() alone lets whitespace through bytes.fromhex
    if not isinstance(s, str) or not _OID_RE.fullmatch(s):
        return None
    return ObjectId(s)


def to_oid(s: str) -> ObjectId:
    oid = string_id_to_obj_id(s)
    if oid is None:
        raise BadRequest("Invalid id")
    return oid


def _validate_object_id(value: Any) -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    oid = string_id_to_obj_id(value)
    if oid is None:
        raise ValueError(f"{value!r} is not a valid ObjectId")
    return oid


def _validate_opt_object_id(value: Any) -> Optional[ObjectId]:
    return None if value is None else _validate_object_id(value)


ObjectIdStr = Annotated[
    ObjectId,
    PlainValidator(_validate_object_id),
    PlainSerializer(object_id_as_string, return_type=str),
    WithJsonSchema({"type": "string"}),
]

OptObjectIdStr = Annotated[
    Optional[ObjectId],
    PlainValidator(_validate_opt_object_id),
    PlainSerializer(opt_object_id_as_string, return_type=Optional[str]),
    WithJsonSchema({"type": "string", "nullable": True}),
]


# passwords

def hash_password(password: str) -> str:
    # argon2id, fresh salt per call
    return _ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return _ph.verify(password_hash, password)
    except (VerificationError, InvalidHashError, UnicodeError):
        return False


# mongo errors

def handle_duplicate_key_error(err: PyMongoError) -> Optional[ServiceError]:
    if isinstance(err, WriteError):
        if err.code == DUPLICATE_KEY_CODE:
            field = extract_duplicate_field(_error_message(err))
            if field is not None:
                return Conflict(f"{field} sudah digunakan")
    elif isinstance(err, (WriteConcernError, BulkWriteError)):
        logger.warning("Write failure is not a WriteError, not treated as duplicate key.")
    return None


def _error_message(err: PyMongoError) -> str:
    details = getattr(err, "details", None) or {}
    return details.get("errmsg") or str(err)


def extract_duplicate_field(message: str) -> Optional[str]:
    m = _DUP_KEY_RE.search(message)
    return m.group(1) if m else None


def generate_random_sku() -> str:
    """e.g. "SKU-X7D2F"."""
    suffix = "".join(secrets.choice(SKU_ALPHABET) for _ in range(SKU_LENGTH))
    return SKU_PREFIX + suffix.upper()


# cookie auth

def extract_user_id_from_cookie(request: Request) -> str:
    token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    if token is None:
        raise Unauthorized("Token tidak ditemukan")

    try:
        claims = decode_jwt(token)
    except jwt.InvalidTokenError:
        raise Unauthorized("Token tidak valid")

    if is_jwt_expired(claims.exp):
        raise Unauthorized("Token sudah expired")
    return claims.sub


def current_user_oid(user_id: str = Depends(extract_user_id_from_cookie)) -> ObjectId:
    oid = string_id_to_obj_id(user_id)
    if oid is None:
        raise Unauthorized("Token tidak valid")
    return oid
