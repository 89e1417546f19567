from typing import List, Optional
from datetime import datetime, timezone
from sqlalchemy.orm import Session
from mongol_shop.db_models.product import Product
from mongol_shop.db_models.user import User
from mongol_shop.models.product import ProductCreate, ProductStatus, ProductUpdate
from mongol_shop.models.user import AccountStatus, UserRole
from mongol_shop.services.errors import (
    InactiveAccountError,
    NotFoundError,
    OwnershipError,
    RoleError,
    ValidationError,
)
from mongol_shop.utils.logger import logger


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def matches_search_term(product: Product, term_lower: str) -> bool:
    """Case-insensitive substring hit on title, description or any tag."""
    if term_lower in (product.title or "").lower():
        return True
    if term_lower in (product.description or "").lower():
        return True
    return any(term_lower in tag.lower() for tag in (product.tags or []))


class ProductService:

    def __init__(self, db: Session):
        self.db = db

    def _get_owned_product(self, product_id: str, seller_id: str, action: str) -> Product:
        product = self.db.query(Product).filter(Product.id == product_id).first()
        if product is None:
            raise NotFoundError("Product not found")
        if product.seller_id != seller_id:
            logger.warning(f"Seller {seller_id} tried to {action} product {product_id} owned by {product.seller_id}")
            raise OwnershipError(f"You can only {action} your own products")
        return product

    def create_product(self, seller_id: str, data: ProductCreate) -> str:
        seller = self.db.query(User).filter(User.id == seller_id).first()
        if seller is None:
            raise NotFoundError("Seller not found")
        if seller.role != UserRole.SELLER.value:
            raise RoleError("User is not a seller")
        if seller.account_status != AccountStatus.ACTIVE.value:
            raise InactiveAccountError("Seller account is not active")

        now = _utcnow()
        product = Product(
            seller_id=seller_id,
            **data.model_dump(),
            status=ProductStatus.DRAFT.value,
            featured=False,
            rating=0,
            review_count=0,
            created_at=now,
            updated_at=now,
        )
        self.db.add(product)
        self.db.commit()
        logger.info(f"Seller {seller_id} created product {product.id} ({product.title!r})")
        return product.id

    def update_product(self, product_id: str, seller_id: str, updates: ProductUpdate) -> bool:
        product = self._get_owned_product(product_id, seller_id, "update")

        changes = updates.model_dump(exclude_unset=True, exclude_none=True)
        new_status = changes.get("status")
        if new_status is not None and new_status not in {s.value for s in ProductStatus}:
            raise ValidationError(
                f"Invalid product status {new_status!r}. Must be one of: "
                + ", ".join(s.value for s in ProductStatus)
            )

        for key, value in changes.items():
            setattr(product, key, value)
        now = _utcnow()
        product.updated_at = now
        # Every transition to active re-stamps published_at.
        if new_status == ProductStatus.ACTIVE.value:
            product.published_at = now
        self.db.commit()

        logger.info(f"Seller {seller_id} updated product {product_id}: {sorted(changes)}")
        return True

    def delete_product(self, product_id: str, seller_id: str) -> bool:
        product = self._get_owned_product(product_id, seller_id, "delete")
        self.db.delete(product)
        self.db.commit()
        logger.info(f"Seller {seller_id} deleted product {product_id}")
        return True

    # Queries

    def get_products_by_seller(self, seller_id: str) -> List[Product]:
        return (
            self.db.query(Product)
            .filter(Product.seller_id == seller_id)
            .order_by(Product.created_at.asc())
            .all()
        )

    def _active(self):
        return self.db.query(Product).filter(Product.status == ProductStatus.ACTIVE.value)

    def get_active_products(self) -> List[Product]:
        return self._active().order_by(Product.created_at.asc()).all()

    def get_products_by_category(self, category: str) -> List[Product]:
        return self._active().filter(Product.category == category).order_by(Product.created_at.asc()).all()

    def get_featured_products(self) -> List[Product]:
        return self._active().filter(Product.featured.is_(True)).order_by(Product.created_at.asc()).all()

    def search_products(
        self,
        search_term: Optional[str] = None,
        category: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
    ) -> List[Product]:
        """Active products filtered by term, then category, then price bounds.

        Each filter applies only when its argument is given; bounds are
        inclusive. Tags live in a JSON column, so the term match runs in
        Python over the active set.
        """
        products = self.get_active_products()

        if search_term:
            term_lower = search_term.lower()
            products = [p for p in products if matches_search_term(p, term_lower)]

        if category:
            products = [p for p in products if p.category == category]

        if min_price is not None:
            products = [p for p in products if p.price >= min_price]
        if max_price is not None:
            products = [p for p in products if p.price <= max_price]

        return products
