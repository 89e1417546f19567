from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from mongol_shop.database import get_db
from mongol_shop.db_models.user import User
from mongol_shop.models.product import ProductCreate, ProductCreated, ProductResponse, ProductUpdate
from mongol_shop.services.auth import get_current_active_user
from mongol_shop.services.product_service import ProductService

router = APIRouter(prefix="/api/products", tags=["products"])


# Fixed paths are declared before "/{product_id}" style routes.

@router.get("", response_model=List[ProductResponse])
def get_active_products(db: Session = Depends(get_db)):
    return ProductService(db).get_active_products()


@router.get("/featured", response_model=List[ProductResponse])
def get_featured_products(db: Session = Depends(get_db)):
    return ProductService(db).get_featured_products()


@router.get("/search", response_model=List[ProductResponse])
def search_products(
    q: Optional[str] = Query(None, description="Matched against title, description and tags"),
    category: Optional[str] = None,
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    db: Session = Depends(get_db),
):
    return ProductService(db).search_products(
        search_term=q,
        category=category,
        min_price=min_price,
        max_price=max_price,
    )


@router.get("/category/{category}", response_model=List[ProductResponse])
def get_products_by_category(category: str, db: Session = Depends(get_db)):
    return ProductService(db).get_products_by_category(category)


@router.get("/seller/{seller_id}", response_model=List[ProductResponse])
def get_products_by_seller(seller_id: str, db: Session = Depends(get_db)):
    return ProductService(db).get_products_by_seller(seller_id)


@router.post("", response_model=ProductCreated)
def create_product(
    payload: ProductCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    product_id = ProductService(db).create_product(current_user.id, payload)
    return ProductCreated(product_id=product_id)


@router.patch("/{product_id}")
def update_product(
    product_id: str,
    payload: ProductUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    ProductService(db).update_product(product_id, current_user.id, payload)
    return {"success": True}


@router.delete("/{product_id}")
def delete_product(
    product_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    ProductService(db).delete_product(product_id, current_user.id)
    return {"success": True}
