"""SQLAlchemy models for the autostock backing store."""

from datetime import datetime, UTC
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker, Session

Base = declarative_base()


class Product(Base):
    """Product model."""

    __tablename__ = "products"

    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    category = Column(String, nullable=False)
    brand = Column(String, nullable=True)
    description = Column(String, nullable=True)
    sku = Column(String, nullable=False)
    cost = Column(Numeric(12, 2), nullable=False, default=0)
    price = Column(Numeric(12, 2), nullable=False, default=0)
    stock = Column(Integer, nullable=False, default=0)
    image_url = Column(String, nullable=False)
    supplier = Column(String, nullable=True)
    entry_date = Column(DateTime, nullable=True)
    supplier_warranty = Column(DateTime, nullable=True)
    confidence = Column(Float, nullable=True)
    folder_id = Column(String, nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    abc_class = Column(String(1), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class Folder(Base):
    """Folder model with hierarchical structure."""

    __tablename__ = "folders"

    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    parent_id = Column(String, nullable=True)
    color = Column(String, nullable=True)
    prefix = Column(String, nullable=True)
    margin = Column(Numeric(6, 4), nullable=True)
    is_internal = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class Category(Base):
    """Category configuration model."""

    __tablename__ = "categories"

    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    prefix = Column(String, nullable=False)
    margin = Column(Numeric(6, 4), nullable=False, default=0)
    color = Column(String, nullable=False)
    is_internal = Column(Boolean, default=False, nullable=False)


class ClaimedOffer(Base):
    """Record of a claimed promotional offer."""

    __tablename__ = "claimed_offers"

    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    plan = Column(String, nullable=False)
    claimed_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class Order(Base):
    """Customer order model. Items are stored as a JSON list."""

    __tablename__ = "orders"

    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    customer_name = Column(String, nullable=True)
    customer_phone = Column(String, nullable=True)
    items = Column(JSON, nullable=False, default=list)
    total_amount = Column(Numeric(12, 2), nullable=False, default=0)
    status = Column(String, nullable=False, default="pending")
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class SettingEntry(Base):
    """One persisted settings field."""

    __tablename__ = "settings"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    key = Column(String, nullable=False)
    value = Column(JSON, nullable=True)

    __table_args__ = (UniqueConstraint("user_id", "key", name="uq_settings_user_key"),)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
