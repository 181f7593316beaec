"""Order record formatting for WhatsApp replies.

The field order below is the canonical reply layout. A line is emitted
only when its source value is non-empty.
"""

from __future__ import annotations

from dateutil import parser as date_parser

from orderbot.models import OrderRecord

NUMBER_KEY = "Numéro"
CLIENT_NUMBER_KEY = "Numéro Client"
STATUS_KEY = "Statut"

# (source key, label, emoji) in reply order, after the identity line.
ORDER_FIELDS: tuple[tuple[str, str, str], ...] = (
    ("Date", "Date", "📅"),
    (STATUS_KEY, "Statut", ""),
    ("Nom Client", "Client", "👤"),
    ("Téléphone", "Téléphone", "📞"),
    ("Adresse", "Adresse", "📍"),
    ("Total", "Total", "💰"),
    ("Transporteur", "Transporteur", "🚛"),
    ("Numéro de suivi", "Suivi", "🔎"),
    ("Notes", "Notes", "📝"),
)

# Product detail lines from the order sheet, after the labelled fields.
# Each line joins the non-empty values of its keys; skipped when all are empty.
DETAIL_LINES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("Type", "Simple/Double"), " - "),
    (("Température",), ""),
    (("Sens",), ""),
    (("Détails sens",), ""),
    (("Hauteur", "Largeur", "Épaisseur"), " x "),
    (("Revêtement Extérieur", "Revêtement Intérieur"), " / "),
    (("Protection Extérieure", "Protection Intérieure"), " / "),
    (("Cadre", "Ép. Panneau"), ", "),
    (("Seuil",), ""),
    (("Retour PVC",), ""),
    (("Charnières",), ""),
    (("Quantité Charnières",), ""),
    (("Fermeture",), ""),
    (("Serrure",), ""),
    (("Système Guide",), ""),
    (("Poignée Mobile", "Poignée Fixe"), " / "),
    (("Accessoires",), ""),
    (("Infos",), ""),
)

# First match wins.
STATUS_EMOJIS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("delivered", "livré"), "✅"),
    (("shipped", "expédié"), "🚚"),
    (("preparing", "préparation", "en cours"), "⏳"),
)
DEFAULT_STATUS_EMOJI = "📦"

# (source key, title) of the production-date block.
PRODUCTION_DATE_FIELDS: tuple[tuple[str, str], ...] = (
    ("Tole Aluminium", "Tole"),
    ("Aluminium", "Aluminium"),
    ("Injection", "Injection"),
    ("Montage", "Montage"),
)
SECTION_SEPARATOR = "---"


def get_value(record: OrderRecord, key: str) -> str:
    value = record.get(key)
    if value is None:
        return ""
    return str(value).strip()


def status_emoji(status: str) -> str:
    lowered = status.lower()
    for keywords, emoji in STATUS_EMOJIS:
        if any(keyword in lowered for keyword in keywords):
            return emoji
    return DEFAULT_STATUS_EMOJI


def format_date_ddmm(value: str) -> str:
    """Render a date as ``DD.MM``; unparseable values pass through unchanged."""
    if not value:
        return ""
    try:
        parsed = date_parser.parse(value)
    except (ValueError, OverflowError):
        return value
    return parsed.strftime("%d.%m")


def _identity_line(record: OrderRecord) -> str | None:
    number = get_value(record, NUMBER_KEY)
    client_number = get_value(record, CLIENT_NUMBER_KEY)
    if not number and not client_number:
        return None
    line = f"*{number}*"
    if client_number:
        line += f" - {client_number}"
    return line


def _production_dates(record: OrderRecord) -> list[str]:
    values = [get_value(record, key) for key, _ in PRODUCTION_DATE_FIELDS]
    if not any(values):
        return []
    return [
        f"*{title}*: {format_date_ddmm(value)}"
        for (_, title), value in zip(PRODUCTION_DATE_FIELDS, values)
    ]


def format_order(record: OrderRecord) -> str:
    """Format an order record as a multi-line WhatsApp message.

    Args:
        record: Flat field map from the order API.

    Returns:
        Lines joined by newlines, without a trailing separator. Empty
        when the record holds none of the known fields.
    """
    lines: list[str] = []

    identity = _identity_line(record)
    if identity is not None:
        lines.append(identity)

    for key, label, emoji in ORDER_FIELDS:
        value = get_value(record, key)
        if not value:
            continue
        if key == STATUS_KEY:
            emoji = status_emoji(value)
        lines.append(f"{emoji} *{label}:* {value}")

    for keys, joiner in DETAIL_LINES:
        parts = [value for value in (get_value(record, key) for key in keys) if value]
        if parts:
            lines.append(joiner.join(parts))

    dates = _production_dates(record)
    if dates:
        if lines:
            lines.append("")
        lines.append(SECTION_SEPARATOR)
        lines.extend(dates)

    return "\n".join(lines)
