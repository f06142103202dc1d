# Overview: Service-layer operations for sales and abonos; stock, totals and payment status.

"""
Sales Service

WHY: A sale is recorded in one step at the counter: lines, totals, stock
decrement and (for cash) the register movement. Installment sales are paid
over time with abonos.

PAYMENT FLOW:
- cash: amount_received must cover the total; change = received - total
- installment: optional initial abono, then record_payment() until paid
- status: pending (nothing paid) -> partial -> paid

RULES:
- Line prices come from the product, never from the client
- Stock is checked per product across all lines before anything is written
- An abono can never exceed the remaining balance
"""

from ..extensions import db
from ..models import Sale, SaleItem, Payment, Product, Customer, CashMovement
from ..validation import NotFoundError, ValidationError, coerce_amount, coerce_int
from . import register_service
from ventas.time_utils import utcnow


class SaleError(ValueError):
    """Raised for sale operation errors."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


PAYMENT_TYPES = ("cash", "installment")
PAYMENT_METHODS = ("cash", "transfer", "card")


def derive_payment_status(total_amount: int, total_paid: int) -> str:
    if total_paid >= total_amount:
        return "paid"
    if total_paid > 0:
        return "partial"
    return "pending"


def _normalize_items(items) -> dict[int, int]:
    """Collapse request lines into {product_id: quantity}, keeping first-seen order."""
    if not isinstance(items, list) or not items:
        raise SaleError("La venta debe tener al menos un producto")

    quantities: dict[int, int] = {}
    for raw in items:
        if not isinstance(raw, dict):
            raise ValidationError("Invalid sale item")
        product_id = coerce_int("product_id", raw.get("product_id"))
        quantity = coerce_int("quantity", raw.get("quantity"))
        if quantity <= 0:
            raise ValidationError("quantity must be > 0")
        quantities[product_id] = quantities.get(product_id, 0) + quantity
    return quantities


def _load_products(quantities: dict[int, int]) -> dict[int, Product]:
    products = {}
    missing = []
    insufficient = []

    for product_id, quantity in quantities.items():
        product = db.session.query(Product).filter_by(id=product_id).with_for_update().first()
        if not product:
            missing.append(product_id)
            continue
        if product.stock < quantity:
            insufficient.append({
                "product_id": product_id,
                "name": product.name,
                "requested_quantity": quantity,
                "stock": product.stock,
            })
        products[product_id] = product

    if missing:
        raise NotFoundError(f"Producto no encontrado: {', '.join(str(p) for p in missing)}")
    if insufficient:
        raise SaleError("Stock insuficiente", details={"items": insufficient})
    return products


def create_sale(
    user_id: int | None,
    items,
    *,
    customer_id: int | None = None,
    payment_type: str = "cash",
    discount_amount=0,
    amount_received=None,
    initial_payment=0,
    payment_method: str = "cash",
) -> Sale:
    """
    Record a sale, decrement stock and register the cash movement.

    Args:
        items: [{"product_id": int, "quantity": int}, ...]
        payment_type: "cash" or "installment"
        discount_amount: whole pesos off the subtotal
        amount_received: cash handed over (cash sales; defaults to the total)
        initial_payment: first abono (installment sales)

    Raises:
        SaleError: empty cart, insufficient stock, short payment, missing customer
        NotFoundError: unknown product or customer
        ValidationError: malformed amounts
    """
    if payment_type not in PAYMENT_TYPES:
        raise ValidationError(f"payment_type must be one of: {', '.join(PAYMENT_TYPES)}")
    if payment_method not in PAYMENT_METHODS:
        raise ValidationError(f"payment_method must be one of: {', '.join(PAYMENT_METHODS)}")

    if customer_id is not None:
        customer_id = coerce_int("customer_id", customer_id)
        if not db.session.get(Customer, customer_id):
            raise NotFoundError("Cliente no encontrado")
    elif payment_type == "installment":
        raise SaleError("Las ventas por abonos requieren un cliente")

    quantities = _normalize_items(items)
    products = _load_products(quantities)

    subtotal = sum(products[pid].sale_price * qty for pid, qty in quantities.items())
    discount = coerce_amount("discount_amount", discount_amount or 0)
    if discount > subtotal:
        raise SaleError("El descuento no puede ser mayor al subtotal")
    total = subtotal - discount

    if payment_type == "cash":
        received = total if amount_received is None else coerce_amount("amount_received", amount_received)
        if received < total:
            raise SaleError("El monto recibido es menor al total")
        total_paid = received
        first_payment = 0
    else:
        first_payment = coerce_amount("initial_payment", initial_payment or 0)
        if first_payment > total:
            raise SaleError("El abono inicial no puede ser mayor al total")
        total_paid = first_payment

    now = utcnow()
    sale = Sale(
        customer_id=customer_id,
        user_id=user_id,
        subtotal=subtotal,
        discount_amount=discount,
        total_amount=total,
        payment_type=payment_type,
        payment_status=derive_payment_status(total, total_paid),
        total_paid=total_paid,
        created_at=now,
    )

    for product_id, quantity in quantities.items():
        product = products[product_id]
        sale.items.append(SaleItem(
            product_id=product_id,
            quantity=quantity,
            unit_price=product.sale_price,
            total_price=product.sale_price * quantity,
        ))
        product.stock -= quantity

    if first_payment:
        sale.payments.append(Payment(
            user_id=user_id,
            amount=first_payment,
            payment_method=payment_method,
            notes="Abono inicial",
            created_at=now,
        ))

    db.session.add(sale)
    db.session.flush()

    if payment_type == "cash":
        register_service.record_sale_movement(
            user_id, sale, total, f"Venta #{sale.id}", commit=False
        )
    elif first_payment and payment_method == "cash":
        register_service.record_sale_movement(
            user_id, sale, first_payment, f"Abono inicial venta #{sale.id}", commit=False
        )

    db.session.commit()
    return sale


def get_sale(sale_id: int) -> Sale:
    sale = db.session.get(Sale, sale_id)
    if not sale:
        raise NotFoundError("Venta no encontrada")
    return sale


def list_sales(
    *,
    payment_type: str | None = None,
    payment_status: str | None = None,
    customer_id: int | None = None,
    limit: int = 100,
) -> list[Sale]:
    query = db.session.query(Sale)
    if payment_type:
        query = query.filter(Sale.payment_type == payment_type)
    if payment_status:
        query = query.filter(Sale.payment_status == payment_status)
    if customer_id is not None:
        query = query.filter(Sale.customer_id == customer_id)
    return query.order_by(Sale.created_at.desc(), Sale.id.desc()).limit(limit).all()


def list_installment_sales(payment_status: str | None = None) -> list[Sale]:
    return list_sales(payment_type="installment", payment_status=payment_status, limit=500)


def delete_sale(sale_id: int, restore_stock: bool = True) -> None:
    """
    Permanently delete a sale with its lines and abonos.

    Register movements that referenced the sale keep their amounts but lose
    the link, so closed registers still balance.
    """
    sale = get_sale(sale_id)

    if restore_stock:
        for item in sale.items:
            if item.product:
                item.product.stock += item.quantity

    db.session.query(CashMovement).filter_by(sale_id=sale.id).update(
        {"sale_id": None}, synchronize_session=False
    )
    db.session.delete(sale)
    db.session.commit()


def record_payment(
    sale_id: int,
    amount,
    *,
    user_id: int | None = None,
    payment_method: str = "cash",
    notes: str | None = None,
) -> tuple[Sale, Payment, int]:
    """
    Register an abono against an installment sale.

    Returns (sale, payment, paid_before) where paid_before is the total paid
    prior to this abono (the receipt's "ABONADO ANTERIOR").

    Raises:
        SaleError: not an installment sale, already paid, or amount exceeds
            the remaining balance
    """
    sale = get_sale(sale_id)

    if sale.payment_type != "installment":
        raise SaleError("Solo se pueden registrar abonos en ventas por abonos")
    if sale.payment_status == "paid":
        raise SaleError("La venta ya está pagada")
    if payment_method not in PAYMENT_METHODS:
        raise ValidationError(f"payment_method must be one of: {', '.join(PAYMENT_METHODS)}")

    amount = coerce_amount("amount", amount, allow_zero=False)
    remaining = sale.remaining_balance
    if amount > remaining:
        raise SaleError(
            "El abono excede el saldo pendiente",
            details={"remaining_balance": remaining, "amount": amount},
        )

    paid_before = sale.total_paid
    payment = Payment(
        user_id=user_id,
        amount=amount,
        payment_method=payment_method,
        notes=(notes or "").strip() or None,
        created_at=utcnow(),
    )
    sale.payments.append(payment)
    sale.total_paid = paid_before + amount
    sale.payment_status = derive_payment_status(sale.total_amount, sale.total_paid)
    db.session.flush()

    if payment_method == "cash":
        register_service.record_sale_movement(
            user_id, sale, amount, f"Abono venta #{sale.id}", commit=False
        )

    db.session.commit()
    return sale, payment, paid_before


def get_payment(sale_id: int, payment_id: int) -> Payment:
    payment = db.session.query(Payment).filter_by(id=payment_id, sale_id=sale_id).first()
    if not payment:
        raise NotFoundError("Abono no encontrado")
    return payment


def paid_before_payment(sale: Sale, payment: Payment) -> int:
    """Sum of the abonos recorded before the given one."""
    return sum(p.amount for p in sale.payments if p.id < payment.id)


def installment_receipt_data(sale: Sale, payment: Payment, paid_before: int | None = None) -> dict:
    """
    Sale dict shaped for an abono receipt.

    total_paid is replaced by what was paid before this abono so the receipt
    shows ABONADO ANTERIOR, ABONO ACTUAL and SALDO RESTANTE consistently.
    """
    if paid_before is None:
        paid_before = paid_before_payment(sale, payment)

    data = sale.to_dict(include_items=False)
    data["total_paid"] = paid_before
    data["payment_amount"] = payment.amount
    data["payment_method"] = payment.payment_method
    data["payment_notes"] = payment.notes or ""
    data["created_at"] = payment.to_dict()["created_at"]
    return data
