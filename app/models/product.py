from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, JSON
from sqlalchemy.dialects.postgresql import JSONB
from datetime import datetime
from app.models.user import Base

# JSONB on Postgres, plain JSON elsewhere (sqlite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class Product(Base):
    __tablename__ = "products"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(String(2000))
    category = Column(String(100), index=True)
    brand = Column(String(100))
    price = Column(Float, nullable=False)
    offer_price = Column(Float)
    # Cached sum of size_stocks[].stock whenever size_stocks is set
    stock = Column(Integer, default=0, nullable=False)
    # Ordered per-size ledger, e.g. [{"size": "M", "stock": 3}, {"size": "L", "stock": 2}]
    size_stocks = Column(JSONType)
    images = Column(JSONType)  # List of URLs
    sku = Column(String(100), unique=True)
    featured = Column(Boolean, default=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def sizes(self):
        return [entry["size"] for entry in (self.size_stocks or [])]

    @property
    def main_image(self):
        return (self.images or [None])[0]

    @property
    def unit_price(self) -> float:
        """Price a buyer pays right now: the offer price when one is set."""
        return float(self.offer_price if self.offer_price is not None else self.price)
