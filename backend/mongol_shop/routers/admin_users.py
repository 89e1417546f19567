from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from mongol_shop.database import get_db
from mongol_shop.db_models.user import User
from mongol_shop.models.user import AccountStatusUpdate, AdminCreate, UserCreated, UserResponse
from mongol_shop.services.auth import admin_required
from mongol_shop.services.user_service import UserService

router = APIRouter(prefix="/api/admin/users", tags=["admin-users"])


@router.get("/by-username/{username}", response_model=UserResponse)
def get_user_by_username(username: str, _: User = Depends(admin_required), db: Session = Depends(get_db)):
    user = UserService(db).get_user_by_username(username)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("/by-role/{role}", response_model=List[UserResponse])
def get_users_by_role(role: str, _: User = Depends(admin_required), db: Session = Depends(get_db)):
    return UserService(db).get_users_by_role(role)


@router.get("/pending-sellers", response_model=List[UserResponse])
def get_pending_sellers(_: User = Depends(admin_required), db: Session = Depends(get_db)):
    return UserService(db).get_pending_sellers()


@router.post("/admins", response_model=UserCreated)
def create_admin(payload: AdminCreate, admin: User = Depends(admin_required), db: Session = Depends(get_db)):
    return UserService(db).create_admin(admin, payload)


@router.patch("/{user_id}/status", response_model=UserResponse)
def set_account_status(
    user_id: str,
    payload: AccountStatusUpdate,
    admin: User = Depends(admin_required),
    db: Session = Depends(get_db),
):
    """Verify a pending seller (status=active), suspend or reinstate an account."""
    return UserService(db).set_account_status(admin, user_id, payload.status)
