# src/cotizador/pricing.py
# Proyección de la tarifa elegida a los campos visibles de la cotización.
# Python 3.11+

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import FrozenSet, Optional

from .dto import TariffRule


@dataclass(frozen=True, slots=True)
class PricedRule:
    rule_id: str
    price: Decimal
    service_type: str
    delivery_type: str
    fare_name: str
    parcel_type: Optional[str]
    delivery_place: Optional[str]
    payment_forms: FrozenSet[str]


def resolve_price(rule: TariffRule) -> PricedRule:
    """
    Mapeo campo a campo. El precio es el configurado en la tarifa, sin recargos,
    impuestos ni redondeo: eso pertenece a otra capa de política de precios.
    """
    return PricedRule(
        rule_id=rule.rule_id,
        price=rule.price,
        service_type=rule.service_type,
        delivery_type=rule.delivery_type,
        fare_name=rule.fare_name,
        parcel_type=rule.parcel_type,
        delivery_place=rule.delivery_place,
        payment_forms=rule.payment_forms,
    )


__all__ = ["PricedRule", "resolve_price"]
