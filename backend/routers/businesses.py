# routers/businesses.py — Business listings (multipart forms with an optional image)
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from auth import get_current_user, require_admin, CurrentUser
from database import get_db_session
from errors import ImageTooLarge, MissingFields, ValidationError
from images import ImageUpload, MAX_IMAGE_BYTES, READ_CHUNK_BYTES
from models import BusinessStatus
from schemas import BusinessCreate, BusinessOut, BusinessUpdate
from stores.businesses import BusinessStore

router = APIRouter(prefix="/businesses", tags=["Businesses"])

REQUIRED_FIELDS = ("name", "employee_count", "phone_number", "email", "country", "city")


# --- Helpers ---

async def _read_image(image: Optional[UploadFile]) -> Optional[ImageUpload]:
    if image is None or not image.filename:
        return None
    # Stop reading as soon as the upload passes the limit
    chunks, size = [], 0
    while True:
        chunk = await image.read(READ_CHUNK_BYTES)
        if not chunk:
            break
        size += len(chunk)
        if size > MAX_IMAGE_BYTES:
            raise ImageTooLarge()
        chunks.append(chunk)
    data = b"".join(chunks)
    return ImageUpload(filename=image.filename, content_type=image.content_type, data=data)


def _parse(model, fields: dict):
    try:
        return model(**fields)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ()))
        raise ValidationError(f"{field}: {first.get('msg', 'invalid value')}" if field else first.get("msg"))


# --- Endpoints ---

@router.get("", response_model=List[BusinessOut])
async def list_approved_businesses(
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """Public directory: approved listings only"""
    return await BusinessStore(db).get_businesses_by_status(BusinessStatus.APPROVED)


@router.get("/all", response_model=List[BusinessOut])
async def list_all_businesses(
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    """Every listing regardless of status"""
    return await BusinessStore(db).list_businesses()


@router.get("/my", response_model=List[BusinessOut])
async def list_my_businesses(
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await BusinessStore(db).get_user_businesses(user.id)


@router.get("/status/{status}", response_model=List[BusinessOut])
async def list_businesses_by_status(
    status: BusinessStatus,
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    return await BusinessStore(db).get_businesses_by_status(status)


@router.get("/{business_id}", response_model=BusinessOut)
async def get_business(
    business_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    return await BusinessStore(db).get_business_by_id(business_id)


@router.post("", response_model=BusinessOut, status_code=201)
async def create_business(
    name: Optional[str] = Form(None),
    employee_count: Optional[str] = Form(None),
    phone_number: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    country: Optional[str] = Form(None),
    city: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """Create a listing; admins' listings are approved straight away"""
    fields = {
        "name": name,
        "employee_count": employee_count,
        "phone_number": phone_number,
        "email": email,
        "country": country,
        "city": city,
    }
    missing = [f for f in REQUIRED_FIELDS if not fields[f]]
    if missing:
        raise MissingFields(missing)

    data = _parse(BusinessCreate, {**fields, "description": description})
    return await BusinessStore(db).create_business(data, user.id, await _read_image(image))


@router.put("/change-status/{business_id}/{status}", response_model=BusinessOut)
async def change_business_status(
    business_id: str,
    status: BusinessStatus,
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    """Approve or reject a listing"""
    return await BusinessStore(db).change_status(business_id, status)


@router.put("/{business_id}", response_model=BusinessOut)
async def update_business(
    business_id: str,
    name: Optional[str] = Form(None),
    employee_count: Optional[str] = Form(None),
    phone_number: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    country: Optional[str] = Form(None),
    city: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """Update a listing (owner or admin); empty fields keep their value"""
    sent = {
        "name": name,
        "employee_count": employee_count,
        "phone_number": phone_number,
        "email": email,
        "country": country,
        "city": city,
        "description": description,
    }
    data = _parse(BusinessUpdate, {k: v for k, v in sent.items() if v not in (None, "")})
    return await BusinessStore(db).update_business(business_id, user.id, data, await _read_image(image))


@router.delete("/{business_id}", status_code=204)
async def delete_business(
    business_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    await BusinessStore(db).delete_business(business_id, user.id)
    return Response(status_code=204)
