# routers/auth.py — Registration, login and token endpoints
from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from auth import AuthService, CurrentUser, get_current_user, security, ACCESS_TOKEN_EXPIRE_MINUTES
from database import get_db_session
from models import RoleName
from schemas import ChangePassword, RefreshRequest, TokenResponse, UserLogin, UserOut, UserRegister
from stores.users import UserStore, user_to_out

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _build_token_response(user_obj) -> TokenResponse:
    """Build token response from a user ORM instance"""
    token_data = {
        "sub": user_obj.id,
        "email": user_obj.email,
        "role": user_obj.role.name,
    }
    return TokenResponse(
        access_token=AuthService.create_access_token(token_data),
        refresh_token=AuthService.create_refresh_token(token_data),
        expires_in=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=user_to_out(user_obj),
    )


@router.post("/register", response_model=UserOut)
async def register(
    user_data: UserRegister,
    db: AsyncSession = Depends(get_db_session),
):
    """Register a new user account"""
    return await UserStore(db).create_user(user_data, RoleName.USER.value)


@router.post("/register-admin", response_model=UserOut)
async def register_admin(
    user_data: UserRegister,
    db: AsyncSession = Depends(get_db_session),
):
    """Register a new admin account"""
    return await UserStore(db).create_user(user_data, RoleName.ADMIN.value)


@router.post("/login", response_model=TokenResponse)
async def login(
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db_session),
):
    """Authenticate and receive tokens"""
    user = await AuthService.authenticate_user(credentials.email, credentials.password, db)
    return _build_token_response(user)


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    refresh_req: RefreshRequest,
    db: AsyncSession = Depends(get_db_session),
):
    """Refresh access token using a refresh token"""
    payload = AuthService.verify_token(refresh_req.refresh_token, expected_type="refresh")
    user = await AuthService.load_user(payload["sub"], db)
    return _build_token_response(user)


@router.get("/me", response_model=UserOut)
async def get_current_user_info(
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """Get current authenticated user information"""
    return await UserStore(db).get_user_by_id(user.id)


@router.post("/change-password")
async def change_password(
    password_data: ChangePassword,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """Change current user's password"""
    await UserStore(db).change_password(user.id, password_data)
    return {"status": "password_changed", "message": "Password updated successfully"}


@router.post("/verify-token")
async def verify_token(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db_session),
):
    """Check an access token and report whose it is"""
    payload = AuthService.verify_token(credentials.credentials)
    user = await AuthService.load_user(payload["sub"], db)
    return {"valid": True, "user_id": user.id, "role": user.role.name}
