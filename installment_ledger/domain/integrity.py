"""Rules for deleting a ledger entry through one of its rows"""

from installment_ledger.domain.models import DOWN_PAYMENT_NUMBER, DeletionCheck


def check_deletion(installment_number: int, total_installments: int, payment_count: int) -> DeletionCheck:
    """
    Decide whether deleting via this row is allowed.

    Installments are never deleted one by one: only the down payment row or
    a single 1/1 installment stands for the whole document. Any payment
    recorded on any row of the document blocks the deletion.

    Args:
        installment_number: Number of the row the user is deleting from
        total_installments: Regular installments in the document
        payment_count: Payments recorded across all of the document's rows
    """
    is_down_payment = installment_number == DOWN_PAYMENT_NUMBER
    is_single_installment = installment_number == 1 and total_installments == 1

    if not is_down_payment and not is_single_installment:
        return DeletionCheck(
            allowed=False,
            reason=(
                "Individual installments cannot be deleted; delete the down payment "
                "or the 1/1 installment to remove the whole document"
            ),
        )

    if payment_count > 0:
        return DeletionCheck(
            allowed=False,
            reason="The document has recorded payments; remove them before deleting",
        )

    return DeletionCheck(allowed=True)
