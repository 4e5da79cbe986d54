"""SQLAlchemy ORM models for sales and their commission installments"""

from sqlalchemy import Column, Integer, Boolean, Numeric, DateTime, Date, ForeignKey, Text
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class SaleRecord(Base):
    """Recorded sale; soft-deleted, never physically removed"""

    __tablename__ = "sale"

    id = Column(Integer, primary_key=True, autoincrement=True)
    client_id = Column(Integer, nullable=False, index=True)
    contact_id = Column(Integer, nullable=False)
    invoice_number = Column(Text, nullable=False, default="")
    sale_date = Column(Date, nullable=False)
    amount = Column(Numeric(18, 2), nullable=False)
    commission_percent = Column(Numeric(9, 4), nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now())
    is_deleted = Column(Boolean, nullable=False, default=False, index=True)
    deleted_at = Column(DateTime, nullable=True)

    installments = relationship("InstallmentRecord", back_populates="sale")


class InstallmentRecord(Base):
    """Scheduled commission installment for a sale"""

    __tablename__ = "installment"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sale_id = Column(Integer, ForeignKey("sale.id", ondelete="RESTRICT"), nullable=False, index=True)
    # Nullable so legacy rows missing a date can be loaded and purged
    due_date = Column(Date, nullable=True)
    pay_date = Column(Date, nullable=True, index=True)
    amount = Column(Numeric(28, 10), nullable=False)
    commission = Column(Numeric(18, 2), nullable=False)
    is_paid = Column(Boolean, nullable=False, default=False)
    paid_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now())
    is_deleted = Column(Boolean, nullable=False, default=False, index=True)
    deleted_at = Column(DateTime, nullable=True)

    sale = relationship("SaleRecord", back_populates="installments")
