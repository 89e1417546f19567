from sqlalchemy import Column, String, Boolean, DateTime, Text, Float, Integer, ForeignKey
from sqlalchemy.sql import func
from mongol_shop.database import Base
from mongol_shop.db_models.user import JSONType
import uuid


class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    seller_id = Column(String(36), ForeignKey('users.id'), nullable=False, index=True)

    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(100), nullable=False, index=True)
    subcategory = Column(String(100))

    price = Column(Float, nullable=False, index=True)
    compare_at_price = Column(Float)
    currency = Column(String(3), nullable=False, default='USD')

    inventory = Column(Integer, nullable=False, default=0)
    sku = Column(String(100))
    track_inventory = Column(Boolean, nullable=False, default=True)

    images = Column(JSONType, nullable=False, default=list)
    weight = Column(Float)
    dimensions = Column(JSONType)
    attributes = Column(JSONType)

    status = Column(String(20), nullable=False, default='draft', index=True)
    featured = Column(Boolean, nullable=False, default=False, index=True)

    tags = Column(JSONType)
    meta_title = Column(String(255))
    meta_description = Column(Text)

    rating = Column(Float, nullable=False, default=0)
    review_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    published_at = Column(DateTime(timezone=True))
