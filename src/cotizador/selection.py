# src/cotizador/selection.py
# Lógica pura de selección de tarifa: filtro de candidatas y elección de tramo.
# Python 3.11+

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Tuple

from .dto import TariffRule
from .ports import NoRouteAvailableError, WeightOutOfRangeError


# ------------------------------------------------------------------------------
# Filtro de candidatas
# ------------------------------------------------------------------------------

def _route_matches(rule_value: Optional[str], requested: str) -> bool:
    return rule_value is None or rule_value == requested


def filter_candidates(
    rules: Iterable[TariffRule],
    origin: str,
    destination: str,
    at: datetime,
    *,
    payment_form: Optional[str] = None,
    parcel_type: Optional[str] = None,
) -> Tuple[TariffRule, ...]:
    """
    Reduce el catálogo a las tarifas aplicables a la ruta, el instante y los filtros.

    Reglas (todas deben cumplirse):
      - origen/destino iguales a la clave normalizada, o comodín (None) en la tarifa.
      - estado ACTIVE y valid_from <= at <= valid_to.
      - si hay payment_form: la tarifa la acepta (o no declara restricción).
      - si hay parcel_type: la tarifa es de ese tipo (o no declara tipo).

    Conserva el orden del snapshot. Vacío → NoRouteAvailableError.
    """
    candidates = tuple(
        rule
        for rule in rules
        if _route_matches(rule.origin, origin)
        and _route_matches(rule.destination, destination)
        and rule.is_active
        and rule.is_valid_at(at)
        and (payment_form is None or not rule.payment_forms or payment_form in rule.payment_forms)
        and (parcel_type is None or rule.parcel_type is None or rule.parcel_type == parcel_type)
    )
    if not candidates:
        raise NoRouteAvailableError(origin, destination, at)
    return candidates


# ------------------------------------------------------------------------------
# Selección de tramo
# ------------------------------------------------------------------------------

def _id_key(rule_id: str) -> Tuple[int, int, str]:
    # ids numéricos ASCII se comparan como números ("9" < "10"); el resto, como texto
    if rule_id.isascii() and rule_id.isdigit():
        return (0, int(rule_id), "")
    return (1, 0, rule_id)


def tie_break_key(rule: TariffRule) -> tuple:
    """
    Orden total para tramos solapados (el menor gana):
      1. tramo más angosto (weight_to - weight_from ascendente)
      2. actualizada más recientemente (updated_at descendente; sin fecha al final)
      3. ruta exacta antes que comodín (cantidad de comodines ascendente)
      4. id más bajo
    """
    if rule.updated_at is not None:
        recency = (0, -rule.updated_at.timestamp())
    else:
        recency = (1, 0.0)
    wildcards = (rule.origin is None) + (rule.destination is None)
    return (rule.band_width, recency, wildcards, _id_key(rule.rule_id))


def select_bucket(candidates: Iterable[TariffRule], weight: Decimal) -> TariffRule:
    """
    Elige la tarifa cuyo tramo [weight_from, weight_to] contiene `weight`.
      - Ninguna → WeightOutOfRangeError (la ruta existe, el peso no).
      - Varias (tramos solapados o adyacentes) → desempate con tie_break_key.
    """
    pool = tuple(candidates)
    matching = [rule for rule in pool if rule.covers_weight(weight)]
    if not matching:
        bands = sorted({(r.weight_from, r.weight_to) for r in pool})
        raise WeightOutOfRangeError(weight, bands)
    return min(matching, key=tie_break_key)


__all__ = [
    "filter_candidates",
    "select_bucket",
    "tie_break_key",
]
