"""Sale placement and idempotent submission.

``place_sale`` creates the sale, its items and one ``out`` movement per line in
a single transaction, using the same locked stock core as manual adjustments.
If any line fails (unknown subject, foreign variant, insufficient stock) the
whole sale is rolled back and the first failing line is reported.
"""

import hashlib
import json
import logging
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from typing import Callable, Iterable, Optional, Tuple

from common.choices import MovementType, PaymentMethod
from common.exceptions import DomainError, ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone
from inventory.services import apply_locked_movement, resolve_subject

from .models import IdempotencyKey, Sale, SaleItem

logger = logging.getLogger("pos.sales")

CENT = Decimal("0.01")
IDEMPOTENCY_TTL = timedelta(hours=24)


@dataclass(frozen=True)
class SaleLine:
    product_id: int
    quantity: int
    variant_id: Optional[int] = None
    price: Optional[Decimal] = None


def _money(value, field: str) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field} must be a number.")
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a number.")
    return amount.quantize(CENT)


def _at_line(index: int, exc: DomainError) -> DomainError:
    err = type(exc)(f"Line {index}: {exc.detail}")
    err.line = index
    return err


def _clean_lines(items: Iterable) -> list[SaleLine]:
    lines = []
    for index, raw in enumerate(items or [], start=1):
        if isinstance(raw, dict):
            raw = SaleLine(
                product_id=raw.get("product_id"),
                quantity=raw.get("quantity"),
                variant_id=raw.get("variant_id"),
                price=raw.get("price"),
            )
        quantity = raw.quantity
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError(f"Line {index}: quantity must be a positive integer.")
        price = None
        if raw.price is not None:
            price = _money(raw.price, f"Line {index}: price")
            if price <= 0:
                raise ValidationError(f"Line {index}: price must be positive.")
        lines.append(SaleLine(product_id=raw.product_id, quantity=quantity, variant_id=raw.variant_id, price=price))
    if not lines:
        raise ValidationError("A sale needs at least one item.")
    return lines


def place_sale(
    *,
    actor,
    items: Iterable,
    payment_method: str,
    cash_amount=None,
    change=None,
    is_table: bool = False,
    table_number: Optional[str] = None,
    notes: Optional[str] = None,
    total=None,
) -> Sale:
    """Record a sale at the actor's branch and take its items out of stock.

    Lines are processed in the given order. Raises ``ValidationError``,
    ``NotFound``, ``NoBranchAssigned`` or ``InsufficientStock``; on any of them
    no sale, item, stock change or movement is kept.
    """

    branch_id = actor.require_branch()
    lines = _clean_lines(items)
    if payment_method not in PaymentMethod.values:
        raise ValidationError(f"Unknown payment method: {payment_method!r}.")
    table_number = (table_number or "").strip() or None
    if is_table and not table_number:
        raise ValidationError("A table number is required for table sales.")
    notes = (notes or "").strip() or None

    with transaction.atomic():
        priced = []
        for index, line in enumerate(lines, start=1):
            try:
                product, variant = resolve_subject(line.product_id, line.variant_id)
            except DomainError as exc:
                raise _at_line(index, exc) from exc
            if not product.active:
                raise ValidationError(f"Line {index}: {product.name} is not available for sale.")
            unit_price = line.price
            if unit_price is None:
                unit_price = (variant.unit_price if variant is not None else product.price).quantize(CENT)
            if unit_price <= 0:
                raise ValidationError(f"Line {index}: price must be positive.")
            priced.append((line, product, variant, unit_price, unit_price * line.quantity))

        computed_total = sum((subtotal for *_, subtotal in priced), Decimal("0.00"))
        if total is not None and _money(total, "total") != computed_total:
            raise ValidationError(f"Total {_money(total, 'total')} does not match the items ({computed_total}).")

        if cash_amount is not None:
            cash_amount = _money(cash_amount, "cash_amount")
        if payment_method == PaymentMethod.CASH:
            if cash_amount is None or cash_amount <= 0:
                raise ValidationError("The cash amount received is required for cash payments.")
            if cash_amount < computed_total:
                raise ValidationError("The cash amount received is less than the total.")
            change = _money(change, "change") if change is not None else cash_amount - computed_total
        elif change is not None:
            change = _money(change, "change")

        sale = Sale.objects.create(
            user_id=actor.user_id,
            branch_id=branch_id,
            total=computed_total,
            payment_method=payment_method,
            cash_amount=cash_amount,
            change=change,
            is_table=bool(is_table),
            table_number=table_number if is_table else None,
            notes=notes,
        )
        SaleItem.objects.bulk_create(
            [
                SaleItem(
                    sale=sale,
                    product=product,
                    variant=variant,
                    product_name=product.name,
                    variant_label=variant.label if variant is not None else "",
                    quantity=line.quantity,
                    unit_price=unit_price,
                    subtotal=subtotal,
                )
                for line, product, variant, unit_price, subtotal in priced
            ]
        )

        reason = f"Sale #{sale.id}"
        for index, (line, product, variant, _, _) in enumerate(priced, start=1):
            try:
                apply_locked_movement(
                    user_id=actor.user_id,
                    branch_id=branch_id,
                    product=product,
                    variant=variant,
                    movement_type=MovementType.OUT,
                    quantity=line.quantity,
                    reason=reason,
                )
            except DomainError as exc:
                logger.info(
                    "sale.rejected",
                    extra={
                        "event": "sale.rejected",
                        "line": index,
                        "product_id": product.id,
                        "variant_id": variant.id if variant is not None else None,
                        "branch_id": branch_id,
                        "user_id": actor.user_id,
                        "code": exc.code,
                    },
                )
                raise _at_line(index, exc) from exc

    logger.info(
        "sale.placed",
        extra={
            "event": "sale.placed",
            "sale_id": sale.id,
            "branch_id": branch_id,
            "user_id": actor.user_id,
            "items": len(priced),
            "total": str(computed_total),
            "payment_method": payment_method,
        },
    )
    return sale


def with_idempotency(
    *,
    key: str,
    user,
    path: str,
    method: str,
    handler: Callable[[], Tuple[dict, int]],
    request_hash: Optional[str] = None,
) -> Tuple[dict, int]:
    """Run handler idempotently and persist its response for the given key and scope.

    - Scope is "user:<id>" for authenticated callers, "anon" otherwise.
    - A stored key with a different ``request_hash`` returns 409.
    - A stored key without a response yet (still in flight) returns 409.
    - Failed responses (4xx/5xx) are not kept, so the client may retry the same key.
    """

    scope = f"user:{getattr(user, 'id', None)}" if getattr(user, "id", None) else "anon"
    method = str(method).upper()
    path = str(path)

    try:
        with transaction.atomic():
            idem = IdempotencyKey.objects.create(
                key=key,
                user=user if getattr(user, "id", None) else None,
                scope=scope,
                path=path,
                method=method,
                request_hash=request_hash,
                expires_at=timezone.now() + IDEMPOTENCY_TTL,
            )
    except IntegrityError:
        idem = IdempotencyKey.objects.get(key=key, scope=scope, path=path, method=method)
        if idem.request_hash and request_hash and idem.request_hash != request_hash:
            return {"detail": "Idempotency key reused with different request payload", "code": "conflict"}, 409
        if idem.response_json is not None and idem.response_code is not None:
            logger.info("sale.idempotent_replay", extra={"event": "sale.idempotent_replay", "key": key})
            return idem.response_json, int(idem.response_code)
        return {"detail": "Request in progress", "code": "conflict"}, 409

    try:
        body, code = handler()
    except Exception:
        IdempotencyKey.objects.filter(id=idem.id).delete()
        raise
    if code >= 400:
        IdempotencyKey.objects.filter(id=idem.id).delete()
        return body, code

    IdempotencyKey.objects.filter(id=idem.id).update(response_json=_json_safe(body), response_code=code)
    return body, code


def _json_safe(value):
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    return value


def compute_request_hash(data: Optional[dict]) -> Optional[str]:
    """Canonical SHA256 of the request body (sorted keys); None when empty."""

    if not data:
        return None
    try:
        payload = json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)
    except (TypeError, ValueError):
        return None
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def purge_expired_idempotency_keys(now=None) -> int:
    now = now or timezone.now()
    deleted, _ = IdempotencyKey.objects.filter(expires_at__lt=now).delete()
    return deleted


# EOF
