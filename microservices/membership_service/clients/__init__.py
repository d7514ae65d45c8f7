"""
Membership Service Clients

Collaborators the membership service calls out to.
"""

from .payment_stub import PaymentStub, mask_payment_method

__all__ = ["PaymentStub", "mask_payment_method"]
