# Overview: Service-layer operations for the cash register; shifts, movements and closing counts.

"""
Cash Register Service

WHY: Each employee opens a register at the start of the shift with the
opening float, and closes it by counting the cash. The difference between
what should be in the drawer and what was counted is the discrepancy.

DESIGN PRINCIPLES:
- One open register per employee at a time
- Only the owner, or a manager, may move, close or read a register
- Registers are immutable once closed
- Cash sales and cash abonos add a "sale" movement to the seller's open register
- expected = opening + income + sales - expenses
- discrepancy = actual - expected (positive is sobrante, negative is faltante)
"""

from ..extensions import db
from ..models import CashRegister, CashMovement, Sale
from ..validation import NotFoundError, coerce_amount
from ventas.time_utils import utcnow


class RegisterError(ValueError):
    """Raised for register operation errors."""
    pass


class RegisterAccessError(PermissionError):
    """Raised when someone other than the owner or a manager touches a register."""
    pass


INCOME_CATEGORIES = {
    "ventas_efectivo": "Ventas en Efectivo",
    "ventas_tarjeta": "Ventas con Tarjeta",
    "ventas_transferencia": "Ventas por Transferencia",
    "otros_ingresos": "Otros Ingresos",
    "devoluciones_proveedores": "Devoluciones de Proveedores",
    "prestamos_recibidos": "Préstamos Recibidos",
}

EXPENSE_CATEGORIES = {
    "compras_inventario": "Compras de Inventario",
    "gastos_operativos": "Gastos Operativos",
    "servicios_publicos": "Servicios Públicos",
    "nomina": "Nómina",
    "impuestos": "Impuestos",
    "mantenimiento": "Mantenimiento",
    "publicidad": "Publicidad",
    "transporte": "Transporte",
    "otros_gastos": "Otros Gastos",
}

MANUAL_MOVEMENT_TYPES = {"income": INCOME_CATEGORIES, "expense": EXPENSE_CATEGORIES}

# Movement types that add cash to the drawer
INFLOW_TYPES = {"income", "sale"}


def get_register(register_id: int) -> CashRegister:
    register = db.session.get(CashRegister, register_id)
    if not register:
        raise NotFoundError("Caja no encontrada")
    return register


def get_open_register(user_id: int) -> CashRegister | None:
    """The employee's currently open register, if any."""
    return db.session.query(CashRegister).filter_by(
        user_id=user_id,
        status="open"
    ).order_by(CashRegister.opened_at.desc()).first()


def open_register(user_id: int, opening_amount, notes: str | None = None) -> CashRegister:
    """
    Open a register with the counted opening float.

    Raises:
        RegisterError: employee already has an open register
        ValidationError: bad amount
    """
    opening_amount = coerce_amount("opening_amount", opening_amount)

    existing = get_open_register(user_id)
    if existing:
        raise RegisterError(f"Ya tienes una caja abierta (#{existing.id})")

    now = utcnow()
    register = CashRegister(
        user_id=user_id,
        status="open",
        opening_amount=opening_amount,
        total_sales=0,
        expected_closing_amount=opening_amount,
        opened_at=now,
        session_notes=(notes or "").strip() or None,
    )
    db.session.add(register)
    register.movements.append(CashMovement(
        created_by=user_id,
        type="opening",
        amount=opening_amount,
        description="Apertura de caja",
        created_at=now,
    ))

    db.session.commit()
    return register


def calculate_balance(register: CashRegister) -> int:
    """Cash that should be in the drawer right now."""
    balance = register.opening_amount
    for movement in register.movements:
        if movement.type in INFLOW_TYPES:
            balance += movement.amount
        elif movement.type == "expense":
            balance -= movement.amount
    return balance


def _require_open(register: CashRegister) -> None:
    if register.status != "open":
        raise RegisterError("La caja está cerrada")


def ensure_register_access(
    register: CashRegister,
    current_user_id: int | None,
    manager_override: bool = False,
) -> None:
    """Owner or manager only. current_user_id=None is an internal caller."""
    if current_user_id is None or manager_override:
        return
    if register.user_id != current_user_id:
        raise RegisterAccessError("Esta caja pertenece a otro empleado")


def add_movement(
    register_id: int,
    user_id: int,
    movement_type: str,
    amount,
    description: str,
    category: str | None = None,
    *,
    manager_override: bool = False,
) -> CashMovement:
    """
    Record a manual income or expense on an open register.

    Raises:
        RegisterAccessError: user_id is not the owner and no manager_override
        RegisterError: register closed, bad type, category or description
    """
    register = get_register(register_id)
    ensure_register_access(register, user_id, manager_override)
    _require_open(register)

    if movement_type not in MANUAL_MOVEMENT_TYPES:
        raise RegisterError("El tipo de movimiento debe ser income o expense")

    categories = MANUAL_MOVEMENT_TYPES[movement_type]
    if category is not None and category not in categories:
        raise RegisterError(f"Categoría inválida para {movement_type}: {category}")

    description = (description or "").strip()
    if not description:
        raise RegisterError("La descripción es requerida")

    movement = CashMovement(
        created_by=user_id,
        type=movement_type,
        category=category,
        amount=coerce_amount("amount", amount, allow_zero=False),
        description=description[:255],
        created_at=utcnow(),
    )
    register.movements.append(movement)
    register.expected_closing_amount = calculate_balance(register)
    db.session.commit()
    return movement


def record_sale_movement(
    user_id: int | None,
    sale: Sale,
    amount: int,
    description: str,
    *,
    commit: bool = True,
) -> CashMovement | None:
    """
    Add a cash sale or cash abono to the seller's open register.

    Returns None when the seller has no open register or amount is zero.
    """
    if not user_id or amount <= 0:
        return None

    register = get_open_register(user_id)
    if not register:
        return None

    movement = CashMovement(
        created_by=user_id,
        type="sale",
        category="ventas_efectivo",
        amount=amount,
        description=description[:255],
        sale_id=sale.id,
        created_at=utcnow(),
    )
    register.movements.append(movement)
    register.total_sales = (register.total_sales or 0) + amount
    register.expected_closing_amount = calculate_balance(register)

    if commit:
        db.session.commit()
    return movement


def close_register(
    register_id: int,
    actual_amount,
    discrepancy_reason: str | None = None,
    notes: str | None = None,
    *,
    current_user_id: int | None = None,
    manager_override: bool = False,
) -> CashRegister:
    """
    Close a register and calculate the discrepancy.

    IMMUTABLE: Once closed, the register cannot be reopened or modified.

    Raises:
        RegisterAccessError: closed by someone other than the owner without
            manager_override
        RegisterError: already closed
    """
    register = get_register(register_id)
    ensure_register_access(register, current_user_id, manager_override)
    _require_open(register)

    actual_amount = coerce_amount("actual_amount", actual_amount)
    expected = calculate_balance(register)
    discrepancy = actual_amount - expected

    reason = (discrepancy_reason or "").strip()

    now = utcnow()
    register.status = "closed"
    register.closed_at = now
    register.expected_closing_amount = expected
    register.actual_closing_amount = actual_amount
    register.discrepancy_amount = discrepancy
    register.discrepancy_reason = reason or None
    if notes:
        register.session_notes = notes.strip()

    register.movements.append(CashMovement(
        created_by=current_user_id or register.user_id,
        type="closing",
        amount=actual_amount,
        description="Cierre de caja",
        created_at=now,
    ))

    db.session.commit()
    return register


def list_closed_registers(user_id: int | None = None, limit: int = 50) -> list[CashRegister]:
    query = db.session.query(CashRegister).filter_by(status="closed")
    if user_id is not None:
        query = query.filter_by(user_id=user_id)
    return query.order_by(CashRegister.closed_at.desc()).limit(limit).all()


def get_register_summary(
    register_id: int,
    *,
    current_user_id: int | None = None,
    manager_override: bool = False,
) -> dict:
    """
    Register details plus movement totals.

    Raises RegisterAccessError when current_user_id is neither the owner nor
    covered by manager_override.

    Returns:
        - register: register dict
        - movements: newest first
        - total_income / total_expenses / sales_count
        - current_balance: expected cash in the drawer
    """
    register = get_register(register_id)
    ensure_register_access(register, current_user_id, manager_override)
    movements = list(register.movements)

    income = sum(m.amount for m in movements if m.type in INFLOW_TYPES)
    expenses = sum(m.amount for m in movements if m.type == "expense")
    sale_ids = {m.sale_id for m in movements if m.type == "sale" and m.sale_id}

    return {
        "register": register.to_dict(),
        "movements": [m.to_dict() for m in reversed(movements)],
        "total_income": income,
        "total_expenses": expenses,
        "sales_count": len(sale_ids),
        "current_balance": calculate_balance(register),
        "is_closed": register.status == "closed",
    }
