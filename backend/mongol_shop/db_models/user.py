from sqlalchemy import Column, String, Boolean, DateTime, Text, Float, Integer, JSON, Index, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from mongol_shop.database import Base
import uuid

JSONType = JSON().with_variant(JSONB(), "postgresql")


class User(Base):
    """ORM mapping for the `users` table.

    One row per shop identity: local username/password accounts, OAuth
    sign-ins (provider + provider_id) and profiles linked to an external
    auth subject (auth_user_id). `role` and `account_status` are nullable so
    rows written before those columns existed still load; login backfills them.
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    auth_user_id = Column(String(255), nullable=True, index=True)

    # Core identity / auth fields
    username = Column(String(100), nullable=True, unique=True)
    email = Column(String(255), nullable=False, index=True)
    hashed_password = Column(String(255), nullable=True)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    profile_picture = Column(Text, nullable=True)
    provider = Column(String(20), nullable=False, default="local")
    provider_id = Column(String(255), nullable=True)

    role = Column(String(20), nullable=True, index=True)
    account_status = Column(String(30), nullable=True, index=True)

    # Contact information
    phone = Column(String(50), nullable=True)
    address = Column(JSONType, nullable=True)

    # Seller extensions
    business_name = Column(String(255), nullable=True)
    business_type = Column(String(20), nullable=True)
    business_description = Column(Text, nullable=True)
    business_verified = Column(Boolean, nullable=True, index=True)
    rating = Column(Float, nullable=True)
    total_sales = Column(Integer, nullable=True)
    total_orders = Column(Integer, nullable=True)

    # Admin extensions
    admin_permissions = Column(JSONType, nullable=True)
    admin_notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    verified_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("provider", "provider_id", name="uq_users_provider_identity"),
        Index("idx_users_role_status", "role", "account_status"),
    )
