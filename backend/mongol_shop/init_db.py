from mongol_shop.config import settings
from mongol_shop.database import Base, SessionLocal, engine
from mongol_shop.db_models import User, Product  # noqa: F401  (register tables on Base)
from mongol_shop.models.user import AdminCreate
from mongol_shop.services.user_service import UserService
from mongol_shop.utils.logger import logger


def init_db():
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully!")


def seed_bootstrap_admin():
    """Create the first admin from BOOTSTRAP_ADMIN_* settings, if configured."""
    if not (settings.BOOTSTRAP_ADMIN_USERNAME and settings.BOOTSTRAP_ADMIN_EMAIL and settings.BOOTSTRAP_ADMIN_PASSWORD):
        logger.info("No bootstrap admin configured, skipping")
        return None

    db = SessionLocal()
    try:
        created = UserService(db).bootstrap_admin(
            AdminCreate(
                username=settings.BOOTSTRAP_ADMIN_USERNAME,
                email=settings.BOOTSTRAP_ADMIN_EMAIL,
                password=settings.BOOTSTRAP_ADMIN_PASSWORD,
                first_name="Shop",
                last_name="Admin",
                admin_permissions=["user_management", "product_management", "order_management"],
            )
        )
        if created is None:
            logger.info("An admin already exists, bootstrap admin not created")
        return created
    finally:
        db.close()


if __name__ == "__main__":
    init_db()
    seed_bootstrap_admin()
