# apps/applications/payments.py
"""
Payment derivation shared by every application type.

    due = sum(fees) - (paid + discount)
    status = "Paid" if due <= 0 else "Due"

The due amount is not clamped: a negative value is an overpayment that
reconciliation picks up as refund-due, and it still counts as Paid.
"""
from decimal import Decimal, ROUND_HALF_UP

PAYMENT_STATUS_DUE = 'Due'
PAYMENT_STATUS_PAID = 'Paid'

CENT = Decimal('0.01')


def to_money(value):
    """Decimal with two places; None counts as zero."""
    if value is None or value == '':
        return Decimal('0.00')
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def compute_due_amount(fees, paid_amount, discount):
    return to_money(sum((to_money(fee) for fee in fees), Decimal('0.00'))
                    - (to_money(paid_amount) + to_money(discount)))


def derive_payment_status(due_amount):
    return PAYMENT_STATUS_PAID if to_money(due_amount) <= 0 else PAYMENT_STATUS_DUE
