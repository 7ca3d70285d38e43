"""SQLAlchemy models for the cartsync local database."""

from sqlalchemy import (
    Column,
    Integer,
    String,
    Date,
    Numeric,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from cartsync.domain.entities import SyncStatus

Base = declarative_base()


class User(Base):
    """Cart staff member model."""

    __tablename__ = "users"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    pin = Column(String, nullable=False, index=True)
    role = Column(String, nullable=False)
    bio = Column(String, nullable=True)
    profile_picture = Column(String, nullable=True)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)
    sync_status = Column(String, default=SyncStatus.PENDING.value, nullable=False)


class Category(Base):
    """Inventory category model.

    Name uniqueness is case/whitespace-insensitive and enforced by the domain
    and repair layers, not by a column constraint: duplicates can legitimately
    appear mid-reconciliation.
    """

    __tablename__ = "categories"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)
    sync_status = Column(String, default=SyncStatus.PENDING.value, nullable=False)


class InventoryItem(Base):
    """Inventory item model."""

    __tablename__ = "inventory"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    # Weak references: may dangle until the next repair pass
    category_id = Column(String, nullable=True, index=True)
    unit = Column(String, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Numeric(12, 3), nullable=False)
    created_by = Column(String, nullable=False, index=True)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)
    sync_status = Column(String, default=SyncStatus.PENDING.value, nullable=False)


class Sale(Base):
    """Sale model."""

    __tablename__ = "sales"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    total = Column(Numeric(10, 2), nullable=False)
    date = Column(Date, nullable=False, index=True)
    created_by = Column(String, nullable=False, index=True)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)
    sync_status = Column(String, default=SyncStatus.PENDING.value, nullable=False)


class Expense(Base):
    """Expense model."""

    __tablename__ = "expenses"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    total = Column(Numeric(10, 2), nullable=False)
    date = Column(Date, nullable=False, index=True)
    created_by = Column(String, nullable=False, index=True)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)
    sync_status = Column(String, default=SyncStatus.PENDING.value, nullable=False)


class Activity(Base):
    """Activity feed entry model."""

    __tablename__ = "activities"

    id = Column(String, primary_key=True)
    type = Column(String, nullable=False)
    description = Column(String, nullable=False)
    user_id = Column(String, nullable=False, index=True)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)
    sync_status = Column(String, default=SyncStatus.PENDING.value, nullable=False)


class PendingDeletion(Base):
    """Queued remote deletion (table + record id)."""

    __tablename__ = "pending_deletions"

    id = Column(Integer, primary_key=True)
    table_name = Column(String, nullable=False)
    record_id = Column(String, nullable=False)

    __table_args__ = (UniqueConstraint("table_name", "record_id", name="uq_pending_deletion"),)


class SyncMeta(Base):
    """Key/value store for sync bookkeeping such as the last sync time."""

    __tablename__ = "sync_meta"

    key = Column(String, primary_key=True)
    value = Column(String, nullable=True)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
