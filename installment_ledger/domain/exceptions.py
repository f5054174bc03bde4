"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidBalanceError(DomainException):
    """Monetary input is negative or malformed"""

    pass


class TotalValueMismatchError(InvalidBalanceError):
    """Stored total does not match document value - discount + interest"""

    def __init__(self, expected_cents: int, actual_cents: int):
        self.expected_cents = expected_cents
        self.actual_cents = actual_cents
        super().__init__(
            f"Total value {actual_cents} does not match computed total {expected_cents}"
        )


class InvalidCountError(DomainException):
    """Installment count is not positive"""

    pass


class ImbalancedInstallmentsError(DomainException):
    """Installments do not add up to the balance left after the down payment"""

    def __init__(self, expected_cents: int, actual_cents: int):
        self.expected_cents = expected_cents
        self.actual_cents = actual_cents
        super().__init__(
            f"Installments sum to {actual_cents} but the balance is {expected_cents} "
            f"(difference {expected_cents - actual_cents})"
        )


class DownPaymentExceedsTotalError(DomainException):
    """Down payment is larger than the document total"""

    def __init__(self, down_payment_cents: int, total_cents: int):
        self.down_payment_cents = down_payment_cents
        self.total_cents = total_cents
        super().__init__(
            f"Down payment {down_payment_cents} exceeds total value {total_cents}"
        )


class InvalidPaymentError(DomainException):
    """Payment amount is negative, zero or otherwise unusable"""

    pass


class PaymentExceedsBalanceError(InvalidPaymentError):
    """Recorded payments would exceed the installment's expected amount"""

    pass
