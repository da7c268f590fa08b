# utils/formatage.py
from datetime import datetime
from typing import Optional

CURRENCY_SUFFIX = "FCFA"


def format_money(v) -> str:
    """Montant tronqué à l'unité, suffixe FCFA (ex. '11925 FCFA')."""
    try:
        amount = int(float(v))
    except (TypeError, ValueError, OverflowError):
        amount = 0
    return f"{amount} {CURRENCY_SUFFIX}"


def format_quantity(v) -> str:
    try:
        q = float(v)
    except (TypeError, ValueError):
        return str(v or "")
    return str(int(q)) if q.is_integer() else f"{q:g}"


def format_rate(v) -> str:
    """Taux de TVA tel que saisi : 18 -> '18', 19.25 -> '19.25'."""
    try:
        return f"{float(v):g}"
    except (TypeError, ValueError):
        return "0"


def parse_datetime(txt: Optional[str]) -> Optional[datetime]:
    if not txt:
        return None
    s = str(txt).strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(s)
    except ValueError:
        pass
    for fmt in ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d"):
        try:
            return datetime.strptime(s, fmt)
        except ValueError:
            continue
    return None


def format_date_fr(txt: Optional[str]) -> str:
    """Date locale au format français jj/mm/aaaa ; chaîne vide si illisible."""
    dt = parse_datetime(txt)
    if not dt:
        return ""
    if dt.tzinfo is not None:
        # horodatage serveur (UTC) ramené au fuseau de la machine
        dt = dt.astimezone()
    return dt.strftime("%d/%m/%Y")
