# src/cotizador/normalize.py
# Canonicalización de textos, números e instantes (puro, sin I/O).
# Python 3.11+

from __future__ import annotations

import unicodedata
from datetime import date, datetime, time, tzinfo
from decimal import Decimal, InvalidOperation
from typing import Optional, Union
from zoneinfo import ZoneInfo

from .ports import InvalidInputError
from .policy import DEFAULT_TIMEZONE

Number = Union[int, float, str, Decimal]


def normalize_key(raw: object, *, field: str = "value") -> str:
    """
    Clave canónica para ciudades, tipos de servicio, formas de pago, etc.

    NFKD + eliminación de diacríticos, trim, colapso de espacios internos y
    mayúsculas: " Valparaíso " -> "VALPARAISO", "santiago " -> "SANTIAGO".
    Lanza InvalidInputError si el valor no es str o queda vacío.
    """
    if not isinstance(raw, str):
        raise InvalidInputError(f"'{field}' debe ser texto; valor={raw!r}", field=field)
    decomposed = unicodedata.normalize("NFKD", raw)
    folded = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    key = " ".join(folded.split()).upper()
    if not key:
        raise InvalidInputError(f"'{field}' no puede estar vacío", field=field)
    return key


def optional_key(raw: Optional[str], *, field: str = "value") -> Optional[str]:
    """Como normalize_key, pero None o blanco -> None (filtros opcionales)."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    return normalize_key(raw, field=field)


def to_decimal(value: Number, *, field: str = "value") -> Decimal:
    """
    Convierte a Decimal sin arrastrar errores binarios de float (0.1 -> Decimal("0.1")).
    bool, NaN, infinitos y strings no numéricos -> InvalidInputError.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        raise InvalidInputError(f"'{field}' debe ser numérico; valor={value!r}", field=field)
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation as ex:
        raise InvalidInputError(f"'{field}' no es un número válido: {value!r}", field=field) from ex
    if not number.is_finite():
        raise InvalidInputError(f"'{field}' debe ser finito; valor={value!r}", field=field)
    return number


# --- Instantes -----------------------------------------------------------------

def zone(name: Optional[str] = None) -> ZoneInfo:
    return ZoneInfo(name or DEFAULT_TIMEZONE)


def as_aware(value: datetime, tz: Optional[tzinfo]) -> datetime:
    """Datetimes naive se interpretan en `tz`; los aware se respetan."""
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value


def start_of(value: Union[date, datetime], tz: Optional[tzinfo]) -> datetime:
    """Límite inferior de vigencia: una fecha abarca desde las 00:00 de ese día."""
    if isinstance(value, datetime):
        return as_aware(value, tz)
    return datetime.combine(value, time.min, tzinfo=tz)


def end_of(value: Union[date, datetime], tz: Optional[tzinfo]) -> datetime:
    """Límite superior de vigencia: una fecha abarca hasta el último microsegundo del día."""
    if isinstance(value, datetime):
        return as_aware(value, tz)
    return datetime.combine(value, time.max, tzinfo=tz)


__all__ = [
    "Number",
    "normalize_key",
    "optional_key",
    "to_decimal",
    "zone",
    "as_aware",
    "start_of",
    "end_of",
]
