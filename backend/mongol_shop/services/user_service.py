from typing import List, Optional
from datetime import datetime, timezone
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from mongol_shop.config import settings
from mongol_shop.db_models.user import User
from mongol_shop.models.user import (
    AccountStatus,
    AdminCreate,
    AuthProvider,
    OAuthUserCreate,
    ProfileUpsert,
    RegisterResponse,
    SELF_ASSIGNABLE_ROLES,
    UserCreate,
    UserCreated,
    UserLogin,
    UserRole,
    UserSummary,
)
from mongol_shop.services.auth import ProfileIdentity, get_password_hash, is_legacy_hash, verify_password
from mongol_shop.services.errors import (
    AuthError,
    ConflictError,
    NotFoundError,
    RoleError,
    SuspendedError,
    ValidationError,
)
from mongol_shop.utils.logger import logger

# Same text for every login failure so callers cannot tell which usernames exist.
INVALID_CREDENTIALS = "Invalid username or password"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _split_name(name: Optional[str]) -> tuple:
    parts = (name or "").split(" ")
    return parts[0], " ".join(parts[1:])


class UserService:
    """Account lifecycle against the `users` table.

    Every public mutation commits exactly once at the end, so a raised
    `ShopError` leaves the table untouched.
    """

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def get_user_by_provider(self, provider: str, provider_id: str) -> Optional[User]:
        return (
            self.db.query(User)
            .filter(User.provider == provider, User.provider_id == provider_id)
            .first()
        )

    def get_current_user(self, auth_subject: str) -> Optional[User]:
        """Profile linked to an external auth subject, or None."""
        return self.db.query(User).filter(User.auth_user_id == auth_subject).first()

    def get_users_by_role(self, role: str) -> List[User]:
        return self.db.query(User).filter(User.role == role).order_by(User.created_at.asc()).all()

    def get_pending_sellers(self) -> List[User]:
        return (
            self.db.query(User)
            .filter(
                User.account_status == AccountStatus.PENDING_VERIFICATION.value,
                User.role == UserRole.SELLER.value,
            )
            .order_by(User.created_at.asc())
            .all()
        )

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def _ensure_unique(self, username: str, email: str) -> None:
        if self.get_user_by_username(username):
            logger.warning(f"Registration failed: Username already exists - {username}")
            raise ConflictError("username")
        if self.get_user_by_email(email):
            logger.warning(f"Registration failed: Email already exists - {email}")
            raise ConflictError("email")

    def _commit_new_user(self, user: User) -> None:
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent insert of the same username.
            self.db.rollback()
            logger.warning(f"Unique constraint hit while inserting user {user.username!r}")
            raise ConflictError("username")
        self.db.refresh(user)

    def register(self, user_data: UserCreate) -> RegisterResponse:
        self._ensure_unique(user_data.username, user_data.email)

        role = user_data.role or UserRole.CUSTOMER.value
        if role not in SELF_ASSIGNABLE_ROLES:
            raise ValidationError("Invalid role. Must be 'customer' or 'seller'")

        is_seller = role == UserRole.SELLER.value
        account_status = (
            AccountStatus.PENDING_VERIFICATION.value if is_seller else AccountStatus.ACTIVE.value
        )

        user = User(
            username=user_data.username,
            email=user_data.email,
            hashed_password=get_password_hash(user_data.password),
            provider=AuthProvider.LOCAL.value,
            role=role,
            account_status=account_status,
            first_name=user_data.first_name,
            last_name=user_data.last_name,
            phone=user_data.phone,
            address=user_data.address.model_dump() if user_data.address else None,
            created_at=_utcnow(),
        )
        if is_seller:
            user.business_name = user_data.business_name
            user.business_type = user_data.business_type or "individual"
            user.business_description = user_data.business_description
            user.business_verified = False
            user.rating = 0
            user.total_sales = 0
            user.total_orders = 0

        self._commit_new_user(user)
        logger.info(f"New user registered: {user.username} with role: {role} status: {account_status}")
        return RegisterResponse(
            user_id=user.id,
            username=user.username,
            role=role,
            account_status=account_status,
        )

    def _next_free_username(self, base: str) -> str:
        """First of base, base1, base2, ... not present in the table."""
        taken = {
            row[0]
            for row in self.db.query(User.username)
            .filter(User.username.startswith(base, autoescape=True))
            .all()
        }
        if base not in taken:
            return base
        counter = 1
        while f"{base}{counter}" in taken:
            counter += 1
        return f"{base}{counter}"

    def register_oauth_user(self, data: OAuthUserCreate) -> UserCreated:
        """Sign in (or sign up) an identity already verified by an OAuth provider.

        The username is picked from the free candidates in one query and then
        inserted against the unique index. Losing the insert to a concurrent
        sign-up rolls back and re-picks, up to OAUTH_USERNAME_RETRIES times.
        """
        role = data.role or UserRole.CUSTOMER.value
        base = data.first_name or data.email.split("@")[0]
        retries = max(1, settings.OAUTH_USERNAME_RETRIES)

        for attempt in range(1, retries + 1):
            existing = self.get_user_by_provider(data.provider, data.provider_id)
            if existing:
                # Returning identities keep their stored role; the requested one is ignored.
                existing.last_login_at = _utcnow()
                self.db.commit()
                logger.info(f"OAuth sign-in for {data.provider} user {existing.username}")
                return UserCreated(user_id=existing.id, username=existing.username, role=existing.role)

            if role not in SELF_ASSIGNABLE_ROLES:
                raise ValidationError("Invalid role. Must be 'customer' or 'seller'")

            if self.get_user_by_email(data.email):
                logger.warning(f"OAuth sign-up refused, email already registered - {data.email}")
                raise ConflictError("email", "An account with this email already exists")

            username = self._next_free_username(base)
            now = _utcnow()
            user = User(
                username=username,
                email=data.email,
                first_name=data.first_name,
                last_name=data.last_name,
                profile_picture=data.profile_picture,
                provider=data.provider,
                provider_id=data.provider_id,
                role=role,
                account_status=AccountStatus.ACTIVE.value,
                created_at=now,
                last_login_at=now,
            )
            self.db.add(user)
            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                logger.warning(
                    f"OAuth sign-up lost insert race for username {username!r} "
                    f"(attempt {attempt}/{retries})"
                )
                continue

            logger.info(f"New OAuth user registered: {username} via {data.provider}")
            return UserCreated(user_id=user.id, username=username, role=role)

        raise ConflictError("username", "Could not allocate a unique username, please retry")

    def _insert_admin(self, data: AdminCreate) -> UserCreated:
        self._ensure_unique(data.username, data.email)
        user = User(
            username=data.username,
            email=data.email,
            hashed_password=get_password_hash(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
            provider=AuthProvider.LOCAL.value,
            role=UserRole.ADMIN.value,
            account_status=AccountStatus.ACTIVE.value,
            admin_permissions=list(data.admin_permissions),
            created_at=_utcnow(),
        )
        self._commit_new_user(user)
        return UserCreated(user_id=user.id, username=user.username, role=user.role)

    def create_admin(self, actor: Optional[User], data: AdminCreate) -> UserCreated:
        if (
            actor is None
            or actor.role != UserRole.ADMIN.value
            or (actor.account_status or AccountStatus.ACTIVE.value) != AccountStatus.ACTIVE.value
        ):
            logger.warning(f"Admin creation refused for actor {getattr(actor, 'username', None)!r}")
            raise RoleError("Admin access required")

        created = self._insert_admin(data)
        logger.info(f"Admin {actor.username} created admin {created.username}")
        return created

    def bootstrap_admin(self, data: AdminCreate) -> Optional[UserCreated]:
        """Create the very first admin. Does nothing once any admin exists."""
        if self.db.query(User).filter(User.role == UserRole.ADMIN.value).first():
            return None
        created = self._insert_admin(data)
        logger.info(f"Bootstrap admin created: {created.username}")
        return created

    # ------------------------------------------------------------------
    # Login / profile
    # ------------------------------------------------------------------

    def login(self, credentials: UserLogin) -> UserSummary:
        user = self.get_user_by_username(credentials.username)
        if user is None:
            logger.warning(f"Authentication failed: User not found - {credentials.username}")
            raise AuthError(INVALID_CREDENTIALS)
        if not user.hashed_password:
            logger.warning(f"Authentication failed: OAuth-only account - {credentials.username}")
            raise AuthError(INVALID_CREDENTIALS)
        if not verify_password(credentials.password, user.hashed_password):
            logger.warning(f"Authentication failed: Invalid password - {credentials.username}")
            raise AuthError(INVALID_CREDENTIALS)

        account_status = user.account_status or AccountStatus.ACTIVE.value
        if account_status == AccountStatus.SUSPENDED.value:
            logger.warning(f"Suspended user attempted login: {credentials.username}")
            raise SuspendedError("Your account has been suspended. Please contact support.")

        role = user.role or UserRole.CUSTOMER.value

        user.last_login_at = _utcnow()
        if not user.account_status:
            user.account_status = account_status
        if not user.role:
            user.role = role
        if is_legacy_hash(user.hashed_password):
            user.hashed_password = get_password_hash(credentials.password)
            logger.info(f"Password hash upgraded to PBKDF2 for user: {user.username}")
        self.db.commit()

        logger.info(f"User authenticated successfully: {user.username}")
        return UserSummary(
            user_id=user.id,
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=role,
            account_status=account_status,
            profile_picture=user.profile_picture,
        )

    def get_profile(self, identity: ProfileIdentity) -> Optional[User]:
        """Record behind a bearer identity: shop tokens by id, external ones by subject link."""
        if identity.user_id:
            return self.get_user_by_id(identity.user_id)
        return self.get_current_user(identity.auth_subject)

    def upsert_profile(self, auth_subject: Optional[str], data: ProfileUpsert, user_id: Optional[str] = None) -> str:
        """Patch the caller's profile, creating one only for a new external subject.

        `user_id` is set when the caller holds a shop token; that account is
        updated in place and never duplicated.
        """
        first_name, last_name = _split_name(data.name)
        now = _utcnow()

        if user_id:
            existing = self.get_user_by_id(user_id)
            if existing is None:
                raise NotFoundError("User not found")
        else:
            existing = self.get_current_user(auth_subject)
        if existing:
            existing.email = data.email or existing.email
            existing.first_name = first_name or existing.first_name
            existing.last_name = last_name or existing.last_name
            existing.profile_picture = data.image or existing.profile_picture
            existing.last_login_at = now
            self.db.commit()
            logger.info(f"Updated profile {existing.id} for {auth_subject or 'shop token'}")
            return existing.id

        role = data.role or UserRole.CUSTOMER.value
        if role not in SELF_ASSIGNABLE_ROLES:
            raise ValidationError("Invalid role. Must be 'customer' or 'seller'")

        user = User(
            auth_user_id=auth_subject,
            email=data.email or "",
            first_name=first_name,
            last_name=last_name,
            profile_picture=data.image,
            role=role,
            account_status=AccountStatus.ACTIVE.value,
            provider=AuthProvider.OAUTH.value,
            created_at=now,
            last_login_at=now,
        )
        self.db.add(user)
        self.db.commit()
        logger.info(f"Created profile {user.id} for subject {auth_subject}")
        return user.id

    # ------------------------------------------------------------------
    # Admin transitions
    # ------------------------------------------------------------------

    def set_account_status(self, actor: User, user_id: str, new_status: str) -> User:
        """Move an account between active / suspended / pending_verification.

        Activating a seller is seller verification: it also marks the
        business as verified and stamps verified_at.
        """
        if actor is None or actor.role != UserRole.ADMIN.value:
            raise RoleError("Admin access required")
        try:
            status_value = AccountStatus(new_status)
        except ValueError:
            raise ValidationError(
                f"Invalid account status {new_status!r}. Must be one of: "
                + ", ".join(s.value for s in AccountStatus)
            )

        user = self.get_user_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")

        user.account_status = status_value.value
        if user.role == UserRole.SELLER.value and status_value == AccountStatus.ACTIVE:
            user.business_verified = True
            user.verified_at = _utcnow()
        self.db.commit()
        self.db.refresh(user)

        logger.info(f"Admin {actor.username} set status of {user.username or user.id} to {status_value.value}")
        return user
