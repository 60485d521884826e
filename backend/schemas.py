# schemas.py — Request and response models shared by stores and routers
from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, EmailStr, Field, field_validator

from models import BusinessStatus, RoleName, TaskStatus

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_BYTES = 72  # bcrypt input limit


def _check_password(v: str) -> str:
    if len(v) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return v


# ============================================================
# COMMENTS
# ============================================================

class CommentCreate(BaseModel):
    text: str = Field(..., min_length=1, max_length=10000)
    task_id: str = Field(..., min_length=1)


class CommentUpdate(BaseModel):
    text: str = Field(..., min_length=1, max_length=10000)


class CommentOut(BaseModel):
    id: str
    text: str
    task_id: str
    created_at: str


# ============================================================
# CATEGORIES
# ============================================================

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class CategoryUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class CategoryOut(BaseModel):
    id: str
    name: str
    created_at: str


# ============================================================
# TASKS
# ============================================================

class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None
    status: TaskStatus
    category_id: Optional[str] = None
    end_time: Optional[datetime] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    subtasks: List["TaskCreate"] = Field(default_factory=list)


class TaskUpdate(BaseModel):
    """Partial update: only the fields sent by the client are applied"""
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    category_id: Optional[str] = None
    end_time: Optional[datetime] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    subtasks: Optional[List[TaskCreate]] = None

    @field_validator("title", "status")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class TaskOut(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    status: str
    category_id: Optional[str] = None
    category_name: Optional[str] = None
    parent_id: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    end_time: Optional[str] = None
    user_id: str
    created_at: str
    subtasks: List["TaskOut"] = []
    comments: List[CommentOut] = []


TaskCreate.model_rebuild()
TaskOut.model_rebuild()


# ============================================================
# USERS & AUTH
# ============================================================

class UserRegister(BaseModel):
    name: str = Field(..., min_length=2, max_length=24)
    email: EmailStr
    password: str

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _check_password(v)


class UserCreateByAdmin(UserRegister):
    role: RoleName


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=24)
    email: Optional[EmailStr] = None


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class ChangePassword(BaseModel):
    old_password: str = Field(..., min_length=1)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, v: str) -> str:
        return _check_password(v)


class RefreshRequest(BaseModel):
    refresh_token: str


class UserOut(BaseModel):
    id: str
    name: str
    email: str
    role: str
    created_at: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserOut


class PageInfo(BaseModel):
    has_next_page: bool
    has_previous_page: bool
    total: int
    current: int
    limit: int


class UserPage(BaseModel):
    edges: List[UserOut]
    page_info: PageInfo


# ============================================================
# BUSINESSES
# ============================================================

class BusinessCreate(BaseModel):
    name: str = Field(..., min_length=1)
    employee_count: int = Field(..., ge=1)
    phone_number: str = Field(..., min_length=1)
    email: EmailStr
    country: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    description: Optional[str] = None


class BusinessUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    employee_count: Optional[int] = Field(None, ge=1)
    phone_number: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    country: Optional[str] = Field(None, min_length=1)
    city: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None


class BusinessOut(BaseModel):
    id: str
    name: str
    employee_count: int
    phone_number: str
    email: str
    country: str
    city: str
    owner_full_name: str
    description: Optional[str] = None
    image: Optional[str] = None
    user_id: str
    status: BusinessStatus
    created_at: str
