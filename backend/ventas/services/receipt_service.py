# Overview: Receipt formatting; turns a finished sale or abono into printable HTML.

"""
Receipt Formatter

WHY: The counter prints a comprobante for every sale and every abono. The
layout is driven entirely by the receipt settings, so the same sale can be
printed on a 58mm roll or an A4 page.

DESIGN:
- Pure transform: same sale + same config => byte-identical HTML
- No clock reads; date and time come from the sale's created_at
- Every section is its own <div class="section section-NAME">, emitted in
  SECTION_ORDER; each show_* toggle controls exactly one section
- All money goes through ventas.currency.format_currency
- Barcode and QR are placeholders carrying the encoded value; image
  generation happens on the printing side

KINDS:
- sale: full sale with line items and change due ("Cambio")
- installment: abono receipt (TOTAL VENTA, ABONADO ANTERIOR, ABONO ACTUAL,
  SALDO RESTANTE) without line items
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from datetime import datetime
from typing import Any, Mapping

from jinja2 import Environment
from markupsafe import Markup

from ventas.currency import format_currency
from ventas.time_utils import parse_iso_datetime


class ReceiptConfigError(ValueError):
    """Raised when receipt settings contain unknown keys or mistyped values."""
    pass


RECEIPT_WIDTHS = {"58mm": "200px", "80mm": "280px", "A4": "380px"}
FONT_SIZES = {"small": "10px", "medium": "12px", "large": "14px"}
MAX_PRINT_COPIES = 10

KIND_SALE = "sale"
KIND_INSTALLMENT = "installment"
RECEIPT_KINDS = (KIND_SALE, KIND_INSTALLMENT)

PAYMENT_METHOD_LABELS = {
    "cash": "Efectivo",
    "transfer": "Transferencia",
    "card": "Tarjeta",
    "installment": "Abonos",
}

PAYMENT_STATUS_LABELS = {
    "paid": "Pagada",
    "partial": "Parcial",
    "pending": "Pendiente",
}


@dataclass(frozen=True)
class ReceiptConfig:
    """Every recognized receipt option and its default."""

    # Printing
    print_enabled: bool = True
    auto_print: bool = False
    print_copies: int = 1
    receipt_width: str = "80mm"
    font_size: str = "medium"

    # Branding
    show_logo: bool = True
    logo_text: str = "LOGO"
    show_company_info: bool = True
    company_name: str = "VentasFULL"
    company_address: str = ""
    company_phone: str = ""
    company_email: str = ""
    company_tax_id: str = ""
    receipt_header: str = ""

    # Content
    show_date_time: bool = True
    show_seller_info: bool = True
    show_customer_info: bool = True
    show_item_details: bool = True
    show_subtotal: bool = True
    show_discounts: bool = True
    show_payment_details: bool = True

    # Codes
    show_barcode: bool = False
    show_qr: bool = False
    qr_base_url: str = ""

    # Legal and footer
    show_terms: bool = False
    terms_text: str = ""
    show_return_policy: bool = False
    return_policy_text: str = ""
    show_footer_message: bool = True
    footer_message: str = "¡Gracias por su compra!"
    receipt_footer: str = ""

    def __post_init__(self):
        for f in fields(self):
            _check_type(f.name, f.type, getattr(self, f.name))
        if self.receipt_width not in RECEIPT_WIDTHS:
            raise ReceiptConfigError(
                f"receipt_width must be one of: {', '.join(RECEIPT_WIDTHS)}"
            )
        if self.font_size not in FONT_SIZES:
            raise ReceiptConfigError(
                f"font_size must be one of: {', '.join(FONT_SIZES)}"
            )
        if not 1 <= self.print_copies <= MAX_PRINT_COPIES:
            raise ReceiptConfigError(f"print_copies must be between 1 and {MAX_PRINT_COPIES}")

    @classmethod
    def option_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "ReceiptConfig":
        """
        Build a config from stored or submitted settings.

        Missing keys take their defaults. Unknown keys and mistyped values
        raise ReceiptConfigError. A None string option is read as empty.
        """
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise ReceiptConfigError("Receipt settings must be an object")

        known = set(cls.option_names())
        unknown = sorted(set(data) - known)
        if unknown:
            raise ReceiptConfigError(f"Unknown receipt options: {', '.join(unknown)}")

        values = {}
        for f in fields(cls):
            if f.name not in data:
                continue
            value = data[f.name]
            if value is None and f.type == "str":
                value = ""
            values[f.name] = value
        return cls(**values)

    def merged(self, updates: Mapping[str, Any]) -> "ReceiptConfig":
        """Copy of this config with updates applied (same validation as from_mapping)."""
        if not isinstance(updates, Mapping):
            raise ReceiptConfigError("Receipt settings must be an object")
        return ReceiptConfig.from_mapping({**self.to_dict(), **updates})

    def to_dict(self) -> dict:
        return asdict(self)


def _check_type(name: str, annotation: str, value: Any) -> None:
    # Annotations are strings under `from __future__ import annotations`
    if annotation == "bool":
        if not isinstance(value, bool):
            raise ReceiptConfigError(f"{name} must be a boolean")
    elif annotation == "int":
        if isinstance(value, bool) or not isinstance(value, int):
            raise ReceiptConfigError(f"{name} must be an integer")
    elif annotation == "str":
        if not isinstance(value, str):
            raise ReceiptConfigError(f"{name} must be a string")


# -- Templates --

_env = Environment(autoescape=True, trim_blocks=True, lstrip_blocks=True)
_env.filters["currency"] = format_currency

_SECTION_TEMPLATES = {
    "logo": """
<div class="logo">{{ config.logo_text }}</div>
""",
    "company": """
<div class="bold">{{ config.company_name or 'NOMBRE DE LA EMPRESA' }}</div>
{% if config.company_tax_id %}<div>NIT: {{ config.company_tax_id }}</div>
{% endif %}
{% if config.company_address %}<div>{{ config.company_address }}</div>
{% endif %}
{% if config.company_phone %}<div>Tel: {{ config.company_phone }}</div>
{% endif %}
{% if config.company_email %}<div>{{ config.company_email }}</div>
{% endif %}
""",
    "header": """
<div>{{ config.receipt_header }}</div>
""",
    "title": """
<div class="flex"><span>{{ title }}</span><span>#{{ number }}</span></div>
""",
    "date_time": """
<div>Fecha: {{ date }}</div>
<div>Hora: {{ time }}</div>
""",
    "seller": """
<div>Vendedor: {{ sale.user.name }}</div>
""",
    "customer": """
<div>Cliente: {{ sale.customer.name }}</div>
{% if sale.customer.cedula %}<div>CC: {{ sale.customer.cedula }}</div>
{% endif %}
{% if sale.customer.phone %}<div>Tel: {{ sale.customer.phone }}</div>
{% endif %}
""",
    "items": """
{% for item in items %}
<div class="flex"><span>{{ item.name }}</span><span>{{ item.total_price|currency }}</span></div>
<div class="flex"><span>Cant: {{ item.quantity }} x {{ item.unit_price|currency }}</span><span></span></div>
{% endfor %}
""",
    "subtotal": """
<div class="flex"><span>SUBTOTAL:</span><span>{{ subtotal|currency }}</span></div>
""",
    "discount": """
<div class="flex"><span>DESCUENTO:</span><span>-{{ discount|currency }}</span></div>
""",
    "total": """
{% if kind == 'installment' %}
<div class="flex"><span>TOTAL VENTA:</span><span>{{ total|currency }}</span></div>
<div class="flex"><span>ABONADO ANTERIOR:</span><span>{{ paid_before|currency }}</span></div>
<div class="flex bold"><span>ABONO ACTUAL:</span><span>{{ payment_amount|currency }}</span></div>
<div class="flex bold"><span>SALDO RESTANTE:</span><span>{{ remaining|currency }}</span></div>
{% else %}
<div class="flex bold"><span>TOTAL:</span><span>{{ total|currency }}</span></div>
{% endif %}
""",
    "payment": """
<div>Método de pago: {{ method_label }}</div>
{% if kind == 'installment' %}
<div>Estado: {{ status_label }}</div>
{% if notes %}<div>Notas: {{ notes }}</div>
{% endif %}
{% elif sale.payment_type == 'cash' %}
<div>Recibido: {{ paid_before|currency }}</div>
<div>Cambio: {{ change|currency }}</div>
{% else %}
<div>Pagado: {{ paid_before|currency }}</div>
<div>Saldo: {{ remaining|currency }}</div>
<div>Estado: {{ status_label }}</div>
{% endif %}
""",
    "barcode": """
<div class="barcode" data-value="{{ number }}">{{ number }}</div>
""",
    "qr": """
<div class="qr" data-value="{{ qr_value }}"></div>
""",
    "terms": """
<div class="small">{{ config.terms_text }}</div>
""",
    "return_policy": """
<div class="small">{{ config.return_policy_text }}</div>
""",
    "footer_message": """
<div>{{ config.footer_message }}</div>
""",
    "footer": """
<div>{{ config.receipt_footer }}</div>
""",
}

SECTION_ORDER = tuple(_SECTION_TEMPLATES)

# Sections centered on the paper
_CENTERED = {"logo", "company", "header", "barcode", "qr", "terms", "return_policy", "footer_message", "footer"}

_COMPILED = {name: _env.from_string(source.lstrip("\n")) for name, source in _SECTION_TEMPLATES.items()}

_DOCUMENT = _env.from_string("""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{{ title }} #{{ number }}</title>
<style>
body { font-family: 'Courier New', monospace; font-size: {{ font_size }}; line-height: 1.4; margin: 0; padding: 10px; width: {{ width }}; }
.center { text-align: center; }
.bold { font-weight: bold; }
.small { font-size: 0.85em; }
.section { border-bottom: 1px dashed #000; padding-bottom: 5px; margin-bottom: 5px; }
.flex { display: flex; justify-content: space-between; }
.logo { width: 40px; height: 40px; background: #333; color: white; border-radius: 50%; display: flex; align-items: center; justify-content: center; margin: 0 auto 10px; }
@media print { body { width: auto; } }
</style>
</head>
<body class="receipt receipt-{{ receipt_width }}">
{{ body }}
</body>
</html>
""")


# -- Context --

def receipt_number(sale_id: Any) -> str:
    """Last eight characters of the zero-padded sale id."""
    return str(sale_id if sale_id is not None else "").zfill(8)[-8:]


def resolve_kind(sale: Mapping[str, Any], kind: str | None = None) -> str:
    if kind is None:
        return KIND_INSTALLMENT if sale.get("payment_amount") is not None else KIND_SALE
    if kind not in RECEIPT_KINDS:
        raise ValueError(f"Unknown receipt kind: {kind}")
    return kind


def _created_at(sale: Mapping[str, Any]) -> datetime | None:
    value = sale.get("created_at")
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return parse_iso_datetime(value)
    return None


def _amount(sale: Mapping[str, Any], key: str) -> int:
    return sale.get(key) or 0


def _context(sale: Mapping[str, Any], config: ReceiptConfig, kind: str) -> dict:
    created = _created_at(sale)
    total = _amount(sale, "total_amount")
    paid_before = _amount(sale, "total_paid")
    payment_amount = _amount(sale, "payment_amount")

    if kind == KIND_INSTALLMENT:
        remaining = max(0, total - paid_before - payment_amount)
        method_label = PAYMENT_METHOD_LABELS.get(sale.get("payment_method") or "cash", sale.get("payment_method"))
        status_label = PAYMENT_STATUS_LABELS["paid" if remaining == 0 else "partial"]
        title = "COMPROBANTE DE ABONO"
    else:
        remaining = max(0, total - paid_before)
        method_label = "Efectivo" if sale.get("payment_type") == "cash" else "Abonos"
        status_label = PAYMENT_STATUS_LABELS.get(sale.get("payment_status"), "Pendiente")
        title = "COMPROBANTE DE VENTA"

    number = receipt_number(sale.get("id"))
    items = [
        {
            "name": (item.get("product") or {}).get("name") or "Producto",
            "quantity": item.get("quantity") or 0,
            "unit_price": item.get("unit_price") or 0,
            "total_price": item.get("total_price") or 0,
        }
        for item in sale.get("sale_items") or []
    ]

    return {
        "sale": sale,
        "config": config,
        "kind": kind,
        "title": title,
        "number": number,
        "date": created.strftime("%d/%m/%Y") if created else "",
        "time": created.strftime("%H:%M:%S") if created else "",
        "items": items,
        "subtotal": _amount(sale, "subtotal"),
        "discount": _amount(sale, "discount_amount"),
        "total": total,
        "paid_before": paid_before,
        "payment_amount": payment_amount,
        "remaining": remaining,
        "change": max(0, paid_before - total),
        "method_label": method_label,
        "status_label": status_label,
        "notes": sale.get("payment_notes") or "",
        "qr_value": f"{config.qr_base_url}{number}",
    }


def _included(name: str, sale: Mapping[str, Any], config: ReceiptConfig, ctx: dict) -> bool:
    kind = ctx["kind"]
    if name == "logo":
        return config.show_logo
    if name == "company":
        return config.show_company_info
    if name == "header":
        return bool(config.receipt_header)
    if name == "title":
        return True
    if name == "date_time":
        return config.show_date_time and bool(ctx["date"])
    if name == "seller":
        return config.show_seller_info and bool((sale.get("user") or {}).get("name"))
    if name == "customer":
        return config.show_customer_info and bool(sale.get("customer"))
    if name == "items":
        return kind == KIND_SALE and config.show_item_details and bool(ctx["items"])
    if name == "subtotal":
        return kind == KIND_SALE and config.show_subtotal
    if name == "discount":
        return kind == KIND_SALE and config.show_discounts and ctx["discount"] > 0
    if name == "total":
        return True
    if name == "payment":
        return config.show_payment_details
    if name == "barcode":
        return config.show_barcode
    if name == "qr":
        return config.show_qr
    if name == "terms":
        return config.show_terms and bool(config.terms_text)
    if name == "return_policy":
        return config.show_return_policy and bool(config.return_policy_text)
    if name == "footer_message":
        return config.show_footer_message and bool(config.footer_message)
    if name == "footer":
        return bool(config.receipt_footer)
    raise KeyError(name)


# -- Public API --

def build_sections(
    sale: Mapping[str, Any],
    config: ReceiptConfig | None = None,
    kind: str | None = None,
) -> list[tuple[str, str]]:
    """Included sections in print order as (name, html) pairs."""
    config = config or ReceiptConfig()
    ctx = _context(sale, config, resolve_kind(sale, kind))

    sections = []
    for name in SECTION_ORDER:
        if not _included(name, sale, config, ctx):
            continue
        inner = _COMPILED[name].render(**ctx).rstrip("\n")
        css = f"section section-{name}"
        if name in _CENTERED:
            css += " center"
        sections.append((name, f'<div class="{css}">\n{inner}\n</div>'))
    return sections


def section_names(sale: Mapping[str, Any], config: ReceiptConfig | None = None, kind: str | None = None) -> list[str]:
    return [name for name, _ in build_sections(sale, config, kind)]


def format_receipt(
    sale: Mapping[str, Any],
    config: ReceiptConfig | None = None,
    kind: str | None = None,
) -> str:
    """
    Render a complete printable HTML document for a sale or abono.

    sale is the Sale.to_dict() shape; an abono receipt additionally carries
    payment_amount (the current abono), payment_method and payment_notes,
    with total_paid holding what was paid before it.
    """
    config = config or ReceiptConfig()
    resolved = resolve_kind(sale, kind)
    body = "\n".join(html for _, html in build_sections(sale, config, resolved))
    title = "Comprobante de Abono" if resolved == KIND_INSTALLMENT else "Comprobante de Venta"

    return _DOCUMENT.render(
        title=title,
        number=receipt_number(sale.get("id")),
        font_size=FONT_SIZES[config.font_size],
        width=RECEIPT_WIDTHS[config.receipt_width],
        receipt_width=config.receipt_width,
        # Section markup is built above from autoescaped templates
        body=Markup(body),
    )
