from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from mongol_shop.database import get_db
from mongol_shop.models.user import ProfileUpsert, UserResponse
from mongol_shop.services.auth import ProfileIdentity, get_profile_identity
from mongol_shop.services.user_service import UserService

router = APIRouter(prefix="/profile", tags=["profile"])


@router.post("")
def upsert_profile(
    payload: ProfileUpsert,
    identity: ProfileIdentity = Depends(get_profile_identity),
    db: Session = Depends(get_db),
):
    """Refresh the caller's profile, or create the one linked to a new external subject."""
    profile_id = UserService(db).upsert_profile(identity.auth_subject, payload, user_id=identity.user_id)
    return {"user_id": profile_id}


@router.get("/me", response_model=Optional[UserResponse])
def get_profile(identity: ProfileIdentity = Depends(get_profile_identity), db: Session = Depends(get_db)):
    return UserService(db).get_profile(identity)
