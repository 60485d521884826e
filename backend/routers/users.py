# routers/users.py — User management (admin listing, self-service edits)
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from auth import get_current_user, require_admin, CurrentUser
from database import get_db_session
from schemas import PageInfo, UserCreateByAdmin, UserOut, UserPage, UserUpdate
from stores.users import UserStore

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=UserPage)
async def list_users(
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
    search: str = Query(default=""),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
):
    """Search users by name or email, one page at a time"""
    edges, total = await UserStore(db).list_users(search=search, page=page, limit=limit)
    return UserPage(
        edges=edges,
        page_info=PageInfo(
            has_next_page=page * limit < total,
            has_previous_page=page > 1,
            total=total,
            current=page,
            limit=limit,
        ),
    )


@router.post("", response_model=UserOut)
async def create_user(
    data: UserCreateByAdmin,
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    """Create a user with an explicit role"""
    return await UserStore(db).create_user(data, data.role.value)


@router.get("/{user_id}", response_model=UserOut)
async def get_user(
    user_id: str,
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    return await UserStore(db).get_user_by_id(user_id)


@router.put("/{user_id}", response_model=UserOut)
async def update_user(
    user_id: str,
    data: UserUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """Update a profile (own account, or any account for admins)"""
    return await UserStore(db).update_user(user_id, user, data)


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """Delete an account together with its tasks and businesses"""
    await UserStore(db).delete_user(user_id, user)
    return Response(status_code=204)
