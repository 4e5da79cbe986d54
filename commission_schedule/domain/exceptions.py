"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class SaleNotFoundError(DomainException):
    """Sale does not exist or has been soft-deleted"""

    def __init__(self, sale_id: int):
        super().__init__(f"Sale {sale_id} not found")
        self.sale_id = sale_id


class InstallmentNotFoundError(DomainException):
    """Installment does not exist or has been soft-deleted"""

    def __init__(self, installment_id: int):
        super().__init__(f"Installment {installment_id} not found")
        self.installment_id = installment_id
