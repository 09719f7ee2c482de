# src/cotizador/volumetric.py
# Peso volumétrico y peso facturable (puro, sin I/O).
# Python 3.11+

from __future__ import annotations

from decimal import Decimal
from typing import Mapping, Optional, Sequence, Union

from .dto import Dimensions, RawDimensions
from .normalize import to_decimal
from .policy import VOLUMETRIC_DIVISOR
from .ports import InvalidInputError

ZERO = Decimal("0")


def parse_dimensions(raw: RawDimensions) -> Optional[Dimensions]:
    """
    Valida las medidas de una solicitud: las tres > 0 o ninguna.

    Acepta Dimensions, un mapping {length|largo, width|ancho, height|alto}
    o una secuencia (largo, ancho, alto). Todo vacío -> None.
    """
    if raw is None:
        return None
    if isinstance(raw, Dimensions):
        values = (raw.length, raw.width, raw.height)
    elif isinstance(raw, Mapping):
        values = (
            raw.get("length", raw.get("largo")),
            raw.get("width", raw.get("ancho")),
            raw.get("height", raw.get("alto")),
        )
    elif isinstance(raw, Sequence) and not isinstance(raw, str) and len(raw) == 3:
        values = tuple(raw)
    else:
        raise InvalidInputError(f"Dimensiones no reconocidas: {raw!r}", field="dimensions")

    present = [v for v in values if v is not None and v != ""]
    if not present:
        return None
    if len(present) != 3:
        raise InvalidInputError(
            "Dimensiones incompletas: se requieren largo, ancho y alto", field="dimensions"
        )

    names = ("length", "width", "height")
    parsed = [to_decimal(v, field=n) for v, n in zip(values, names)]
    for value, name in zip(parsed, names):
        if value <= 0:
            raise InvalidInputError(f"'{name}' debe ser > 0; valor={value}", field=name)
    return Dimensions(*parsed)


def volumetric_weight(
    dimensions: Optional[Dimensions],
    divisor: Union[int, Decimal] = VOLUMETRIC_DIVISOR,
) -> Decimal:
    """
    (largo × ancho × alto) / divisor, en kg.
    Devuelve 0 si falta alguna medida o alguna es <= 0.
    """
    if dimensions is None or not dimensions.is_complete():
        return ZERO
    return dimensions.length * dimensions.width * dimensions.height / Decimal(divisor)


def billable_weight(declared: Decimal, volumetric: Decimal) -> Decimal:
    """
    max(peso declarado, peso volumétrico). El peso declarado es obligatorio:
    el volumétrico nunca lo reemplaza.
    """
    if declared <= 0:
        raise InvalidInputError(f"El peso debe ser > 0; valor={declared}", field="weight")
    return max(declared, volumetric)


__all__ = [
    "RawDimensions",
    "parse_dimensions",
    "volumetric_weight",
    "billable_weight",
]
