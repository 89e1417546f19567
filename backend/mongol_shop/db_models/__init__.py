from mongol_shop.db_models.user import User
from mongol_shop.db_models.product import Product

__all__ = [
    "User",
    "Product",
]
