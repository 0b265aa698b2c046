"""
Operation Field Extractors
==========================
Registry mapping operation kinds to the ordered fields folded into the digest.

New operation kinds are added by registering an extractor; the verification
engine never looks at operation names.
"""

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Callable, Dict, List, Tuple

from ..exceptions import InvalidContext, UnsupportedOperation
from ..models import OperationContext

ACCOUNT_ATTRIBUTE_ID = "operation.account"

_CURRENCY_RE = re.compile(r"^[A-Z]{3}$")


@dataclass(frozen=True)
class OperationFields:
    """Fields extracted from an operation for digest and SMS text."""
    digest_items: List[str]
    message_prefix: str
    message_args: Dict[str, str]


Extractor = Callable[[OperationContext], OperationFields]


class OperationRegistry:
    """Operation name to field extractor mapping."""

    def __init__(self):
        self._extractors: Dict[str, Extractor] = {}

    def register(self, *names: str) -> Callable[[Extractor], Extractor]:
        """Register an extractor under one or more operation names."""
        if not names:
            raise ValueError("At least one operation name is required")

        def decorator(func: Extractor) -> Extractor:
            for name in names:
                self._extractors[name] = func
            return func

        return decorator

    def __contains__(self, name: str) -> bool:
        return name in self._extractors

    @property
    def operation_names(self) -> List[str]:
        return sorted(self._extractors)

    def extract(self, context: OperationContext) -> OperationFields:
        extractor = self._extractors.get(context.name)
        if extractor is None:
            raise UnsupportedOperation(context.name)
        return extractor(context)


def plain_amount(amount: Decimal) -> str:
    """Render an amount as a plain decimal string, keeping its scale."""
    return format(amount, "f")


def extract_payment(context: OperationContext) -> Tuple[str, str, str]:
    """
    Extract amount, currency and destination account of a payment.

    Raises:
        InvalidContext: If any field is missing or malformed
    """
    form_data = context.form_data
    if form_data is None:
        raise InvalidContext("Operation form data is invalid")

    if form_data.amount is None:
        raise InvalidContext("Operation amount is missing")
    try:
        amount = Decimal(form_data.amount.amount)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidContext("Operation amount is invalid") from None
    if not amount.is_finite():
        raise InvalidContext("Operation amount is invalid")

    currency = form_data.amount.currency
    if not isinstance(currency, str) or not _CURRENCY_RE.match(currency):
        raise InvalidContext("Operation currency is invalid")

    account = form_data.get_attribute(ACCOUNT_ATTRIBUTE_ID)
    if not isinstance(account, str) or not account.strip():
        raise InvalidContext("Invalid account in operation form data")

    return plain_amount(amount), currency, account


def create_default_registry() -> OperationRegistry:
    """Registry with the built-in login and payment operation kinds."""
    registry = OperationRegistry()

    @registry.register("login", "login_sca")
    def login(context: OperationContext) -> OperationFields:
        return OperationFields(
            digest_items=["login"],
            message_prefix="login",
            message_args={},
        )

    @registry.register(
        "authorize_payment", "authorize_payment_sca", "payment-authorization"
    )
    def authorize_payment(context: OperationContext) -> OperationFields:
        amount, currency, account = extract_payment(context)
        return OperationFields(
            digest_items=[amount, currency, account],
            message_prefix="authorize_payment",
            message_args={
                "amount": amount,
                "currency": currency,
                "account": account,
            },
        )

    return registry
