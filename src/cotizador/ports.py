# src/cotizador/ports.py
# Contratos (Ports) del núcleo: definen QUÉ necesita el motor del exterior
# y la superficie de error uniforme. Sin lógica de negocio ni I/O. Python 3.11+

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional, Protocol, Sequence, Tuple, runtime_checkable

if TYPE_CHECKING:
    from .catalog import CatalogSnapshot


# ------------------------------------------------------------------------------
# Excepciones de dominio (resultados locales y no reintentables de cómputo puro)
# ------------------------------------------------------------------------------

class QuoteError(Exception):
    """
    Base para rechazos de cotización.

    `code` identifica el tipo de error para la capa HTTP/UI.
    `stage` lo estampa el orquestador con la etapa en que se rechazó.
    """

    code: str = "QUOTE_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.stage: Optional[str] = None


class InvalidInputError(QuoteError):
    """
    Campos requeridos faltantes o mal formados.
    Ej.: peso <= 0, origen vacío, valor declarado < 0, dimensiones parciales.
    """

    code = "INVALID_INPUT"

    def __init__(self, message: str, *, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class NoRouteAvailableError(QuoteError):
    """
    Ninguna tarifa activa y vigente cubre la ruta normalizada en el instante evaluado.
    """

    code = "NO_ROUTE_AVAILABLE"

    def __init__(self, origin: str, destination: str, at: datetime) -> None:
        super().__init__(
            f"No hay tarifa activa para {origin} -> {destination} al {at.isoformat()}"
        )
        self.origin = origin
        self.destination = destination
        self.at = at


class WeightOutOfRangeError(QuoteError):
    """
    La ruta existe, pero ningún tramo [pesoInicial, pesoFinal] cubre el peso facturable.
    """

    code = "WEIGHT_OUT_OF_RANGE"

    def __init__(
        self,
        billable_weight: Decimal,
        bands: Sequence[Tuple[Decimal, Decimal]] = (),
    ) -> None:
        covered = ", ".join(f"[{lo}, {hi}]" for lo, hi in bands) or "ninguno"
        super().__init__(
            f"Peso facturable {billable_weight} kg fuera de los tramos disponibles: {covered}"
        )
        self.billable_weight = billable_weight
        self.bands = tuple(bands)


class PolicyNotConfiguredError(QuoteError):
    """
    La política de compromiso no tiene entrada para (tipo_servicio, tipo_entrega).
    """

    code = "POLICY_NOT_CONFIGURED"

    def __init__(self, service_type: str, delivery_type: str) -> None:
        super().__init__(
            f"Sin plazo de compromiso configurado para ({service_type}, {delivery_type})"
        )
        self.service_type = service_type
        self.delivery_type = delivery_type


class InvalidRuleError(ValueError):
    """
    Una tarifa del catálogo viola sus invariantes (tramo invertido, precio negativo...).
    Se lanza al construir el snapshot, nunca durante una resolución.
    """


# ------------------------------------------------------------------------------
# Puertos (interfaces). Se usan Protocols para tipado estructural.
# ------------------------------------------------------------------------------

@runtime_checkable
class CatalogProvider(Protocol):
    """
    Puerto de entrada del catálogo de tarifas.
    Reglas:
      - Devuelve un snapshot inmutable; el motor lo toma UNA vez por resolución.
      - El refresco es externo (fuera de banda) y debe reemplazar la referencia
        de forma atómica: nunca exponer un snapshot a medio actualizar.
    """

    def current_snapshot(self) -> CatalogSnapshot: ...


@runtime_checkable
class CommitmentPolicy(Protocol):
    """
    Puerto para los plazos de compromiso (dato de negocio, no lógica).
    Reglas:
      - offset_for devuelve días hábiles (>= 0) para el par (servicio, entrega).
      - Si el par no está configurado → PolicyNotConfiguredError.
      - is_business_day indica si un día cuenta para el plazo.
    """

    def offset_for(self, service_type: str, delivery_type: str) -> int: ...

    def is_business_day(self, day: date) -> bool: ...


__all__ = [
    # Exceptions
    "QuoteError",
    "InvalidInputError",
    "NoRouteAvailableError",
    "WeightOutOfRangeError",
    "PolicyNotConfiguredError",
    "InvalidRuleError",
    # Ports
    "CatalogProvider",
    "CommitmentPolicy",
]
