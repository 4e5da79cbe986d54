"""Data access layer for sales and commission installments"""

from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from sqlalchemy import func
from sqlalchemy.orm import Session
from commission_schedule.infrastructure.database.models import SaleRecord, InstallmentRecord
from commission_schedule.domain.models import Installment, Sale


def _to_sale(record: SaleRecord) -> Sale:
    return Sale(
        id=record.id,
        client_id=record.client_id,
        contact_id=record.contact_id,
        invoice_number=record.invoice_number,
        sale_date=record.sale_date,
        amount=record.amount,
        commission_percent=record.commission_percent,
        created_at=record.created_at,
        updated_at=record.updated_at,
        is_deleted=record.is_deleted,
        deleted_at=record.deleted_at,
    )


def _to_installment(record: InstallmentRecord) -> Installment:
    return Installment(
        id=record.id,
        sale_id=record.sale_id,
        due_date=record.due_date,
        pay_date=record.pay_date,
        amount=record.amount,
        commission=record.commission,
        is_paid=record.is_paid,
        paid_at=record.paid_at,
        created_at=record.created_at,
        updated_at=record.updated_at,
        is_deleted=record.is_deleted,
        deleted_at=record.deleted_at,
    )


class SaleRepository:
    """Repository for sales"""

    def __init__(self, db: Session):
        self.db = db

    def create_sale(self, sale: Sale, now: datetime) -> Sale:
        """Persist a new sale and return it with its assigned id"""
        db_sale = SaleRecord(
            client_id=sale.client_id,
            contact_id=sale.contact_id,
            invoice_number=sale.invoice_number.strip(),
            sale_date=sale.sale_date,
            amount=sale.amount,
            commission_percent=sale.commission_percent,
            created_at=now,
            updated_at=now,
            is_deleted=False,
        )
        self.db.add(db_sale)
        self.db.flush()  # Get ID without committing
        self.db.refresh(db_sale)  # report values at column precision
        return _to_sale(db_sale)

    def get_active_sale(self, sale_id: int) -> Optional[Sale]:
        """Fetch a sale unless it has been soft-deleted"""
        record = self._active_record(sale_id)
        return _to_sale(record) if record else None

    def get_active_sales_by_id(self, sale_ids: Iterable[int]) -> Dict[int, Sale]:
        """Active sales keyed by id; unknown or deleted ids are left out"""
        sale_ids = set(sale_ids)
        if not sale_ids:
            return {}

        records = (
            self.db.query(SaleRecord)
            .filter(SaleRecord.id.in_(sale_ids), SaleRecord.is_deleted.is_(False))
            .all()
        )
        return {record.id: _to_sale(record) for record in records}

    def list_active_sales(self) -> List[Sale]:
        return [
            _to_sale(record)
            for record in self.db.query(SaleRecord)
            .filter(SaleRecord.is_deleted.is_(False))
            .order_by(SaleRecord.sale_date.desc(), SaleRecord.id)
            .all()
        ]

    def update_sale(self, sale: Sale, now: datetime) -> Optional[Sale]:
        """Overwrite the editable fields of an active sale"""
        record = self._active_record(sale.id)
        if record is None:
            return None

        record.client_id = sale.client_id
        record.contact_id = sale.contact_id
        record.invoice_number = sale.invoice_number.strip()
        record.sale_date = sale.sale_date
        record.amount = sale.amount
        record.commission_percent = sale.commission_percent
        record.updated_at = now
        self.db.flush()
        self.db.refresh(record)
        return _to_sale(record)

    def soft_delete_sale(self, sale_id: int, now: datetime) -> bool:
        """Flag a sale as deleted; returns False when it was not active"""
        record = self._active_record(sale_id)
        if record is None:
            return False

        record.is_deleted = True
        record.deleted_at = now
        record.updated_at = now
        self.db.flush()
        return True

    def _active_record(self, sale_id: int) -> Optional[SaleRecord]:
        return (
            self.db.query(SaleRecord)
            .filter(SaleRecord.id == sale_id, SaleRecord.is_deleted.is_(False))
            .first()
        )


class InstallmentRepository:
    """Repository for commission installments (implements InstallmentStore)"""

    def __init__(self, db: Session):
        self.db = db

    def load_active_installments(self, sale_id: int) -> List[Installment]:
        """Active installments for a sale ordered by due date, then id"""
        return [
            _to_installment(record)
            for record in self.db.query(InstallmentRecord)
            .filter(InstallmentRecord.sale_id == sale_id, InstallmentRecord.is_deleted.is_(False))
            .order_by(InstallmentRecord.due_date, InstallmentRecord.id)
            .all()
        ]

    def get_installment(self, installment_id: int) -> Optional[Installment]:
        """Fetch an active installment"""
        record = self._active_record(installment_id)
        return _to_installment(record) if record else None

    def insert_installments(self, installments: Sequence[Installment]) -> List[Installment]:
        """Insert new active rows; ids on the input objects are ignored"""
        records = [
            InstallmentRecord(
                sale_id=inst.sale_id,
                due_date=inst.due_date,
                pay_date=inst.pay_date,
                amount=inst.amount,
                commission=inst.commission,
                is_paid=inst.is_paid,
                paid_at=inst.paid_at,
                created_at=inst.created_at,
                updated_at=inst.updated_at,
                is_deleted=False,
            )
            for inst in installments
        ]
        self.db.add_all(records)
        self.db.flush()
        for record in records:
            self.db.refresh(record)  # amounts come back at column precision
        return [_to_installment(record) for record in records]

    def soft_delete_installments(
        self,
        installment_ids: Sequence[int],
        deleted_at: datetime,
        updated_at: datetime,
    ) -> None:
        """Flag installments as deleted without removing the rows"""
        if not installment_ids:
            return

        records = (
            self.db.query(InstallmentRecord)
            .filter(InstallmentRecord.id.in_(installment_ids), InstallmentRecord.is_deleted.is_(False))
            .all()
        )
        for record in records:
            record.is_deleted = True
            record.deleted_at = deleted_at
            record.updated_at = updated_at
        self.db.flush()

    def update_installment(self, installment: Installment) -> None:
        """Write back the schedule and paid fields of an active installment"""
        record = self._active_record(installment.id)
        if record is None:
            return

        record.due_date = installment.due_date
        record.pay_date = installment.pay_date
        record.amount = installment.amount
        record.commission = installment.commission
        record.is_paid = installment.is_paid
        record.paid_at = installment.paid_at
        record.updated_at = installment.updated_at
        self.db.flush()

    def purge_installments(self, installment_ids: Sequence[int]) -> None:
        """Physically remove rows (integrity cleanup only)"""
        if not installment_ids:
            return

        records = self.db.query(InstallmentRecord).filter(InstallmentRecord.id.in_(installment_ids)).all()
        for record in records:
            self.db.delete(record)
        self.db.flush()

    def get_active_between(self, start: date, end: date) -> List[Installment]:
        """Active installments of active sales with pay-date in [start, end]"""
        return [
            _to_installment(record)
            for record in self.db.query(InstallmentRecord)
            .join(SaleRecord, InstallmentRecord.sale_id == SaleRecord.id)
            .filter(
                InstallmentRecord.is_deleted.is_(False),
                SaleRecord.is_deleted.is_(False),
                InstallmentRecord.pay_date >= start,
                InstallmentRecord.pay_date <= end,
            )
            .order_by(InstallmentRecord.pay_date, InstallmentRecord.due_date, InstallmentRecord.id)
            .all()
        ]

    def get_pay_date_range(self) -> Tuple[Optional[date], Optional[date]]:
        """Earliest and latest pay-date over active installments"""
        earliest, latest = (
            self.db.query(func.min(InstallmentRecord.pay_date), func.max(InstallmentRecord.pay_date))
            .filter(InstallmentRecord.is_deleted.is_(False))
            .one()
        )
        return earliest, latest

    def count_active(self) -> int:
        return (
            self.db.query(func.count(InstallmentRecord.id))
            .filter(InstallmentRecord.is_deleted.is_(False))
            .scalar()
        )

    def purge_orphaned_installments(self) -> int:
        """Remove installments whose sale row no longer exists"""
        orphaned = (
            self.db.query(InstallmentRecord)
            .outerjoin(SaleRecord, InstallmentRecord.sale_id == SaleRecord.id)
            .filter(SaleRecord.id.is_(None))
            .all()
        )
        for record in orphaned:
            self.db.delete(record)
        self.db.flush()
        return len(orphaned)

    def soft_delete_for_deleted_sales(self, now: datetime) -> int:
        """Deactivate active installments still attached to soft-deleted sales"""
        stale = (
            self.db.query(InstallmentRecord)
            .join(SaleRecord, InstallmentRecord.sale_id == SaleRecord.id)
            .filter(InstallmentRecord.is_deleted.is_(False), SaleRecord.is_deleted.is_(True))
            .all()
        )
        for record in stale:
            record.is_deleted = True
            record.deleted_at = now
            record.updated_at = now
        self.db.flush()
        return len(stale)

    def _active_record(self, installment_id: Optional[int]) -> Optional[InstallmentRecord]:
        return (
            self.db.query(InstallmentRecord)
            .filter(InstallmentRecord.id == installment_id, InstallmentRecord.is_deleted.is_(False))
            .first()
        )
