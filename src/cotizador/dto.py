# src/cotizador/dto.py
# Tipos del dominio. Las tarifas validan sus invariantes al construirse,
# no al usarse; el resto son contenedores inmutables. Python 3.11+

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, tzinfo
from decimal import Decimal
from typing import FrozenSet, Literal, Mapping, Optional, Sequence, Tuple, Union

from .normalize import Number, end_of, normalize_key, optional_key, start_of, to_decimal, zone
from .ports import InvalidInputError, InvalidRuleError

# --- Enums / Literals ---------------------------------------------------------

# Estado de ciclo de vida de la tarifa en el catálogo
RuleStatus = Literal["ACTIVE", "INACTIVE"]

DateLike = Union[date, datetime]


# --- Tarifa (regla del catálogo) -----------------------------------------------

@dataclass(frozen=True, slots=True)
class TariffRule:
    """
    Regla de tarifa inmutable proveniente del catálogo externo.

    Campos:
      - rule_id: identificador opaco (id de la fila).
      - origin / destination: clave canónica de ciudad; None = comodín.
      - weight_from / weight_to: tramo de peso [pesoInicial, pesoFinal], inclusivo.
      - price: tarifa configurada (tarifa_pullman_nueva), se informa tal cual.
      - service_type / delivery_type / fare_name: metadatos del servicio.
      - parcel_type / delivery_place: clasificación opcional (None = cualquiera).
      - payment_forms: formas de pago aceptadas; vacío = sin restricción declarada.
      - valid_from / valid_to: ventana de vigencia cerrada, guardada tal como llega.
        Una `date` (o un datetime naive) se expande en la zona del instante que se
        evalúa, de modo que ambos lados de la comparación usan la misma zona.
      - status: ACTIVE | INACTIVE.
      - created_at / updated_at: auditoría; solo desempatan, nunca filtran.

    Invariantes (se validan aquí → InvalidRuleError):
      - 0 <= weight_from <= weight_to y weight_to > 0
      - price >= 0
      - valid_from <= valid_to
    """
    rule_id: str
    origin: Optional[str]
    destination: Optional[str]
    weight_from: Decimal
    weight_to: Decimal
    price: Decimal
    service_type: str
    delivery_type: str
    fare_name: str
    valid_from: DateLike
    valid_to: DateLike
    parcel_type: Optional[str] = None
    delivery_place: Optional[str] = None
    payment_forms: FrozenSet[str] = frozenset()
    status: RuleStatus = "ACTIVE"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        tz = zone()
        try:
            rid = str(self.rule_id).strip()
            if not rid:
                raise InvalidRuleError("rule_id vacío")
            origin = optional_key(self.origin, field="origin")
            destination = optional_key(self.destination, field="destination")
            weight_from = to_decimal(self.weight_from, field="weight_from")
            weight_to = to_decimal(self.weight_to, field="weight_to")
            price = to_decimal(self.price, field="price")
            parcel_type = optional_key(self.parcel_type, field="parcel_type")
            forms = frozenset(normalize_key(f, field="payment_forms") for f in self.payment_forms)
            status = normalize_key(self.status, field="status")
        except InvalidInputError as ex:
            raise InvalidRuleError(f"Tarifa {self.rule_id!r}: {ex.message}") from ex

        if weight_from < 0 or weight_to <= 0 or weight_from > weight_to:
            raise InvalidRuleError(
                f"Tarifa {rid}: tramo inválido [{weight_from}, {weight_to}]"
            )
        if price < 0:
            raise InvalidRuleError(f"Tarifa {rid}: precio negativo {price}")
        if status not in ("ACTIVE", "INACTIVE"):
            raise InvalidRuleError(f"Tarifa {rid}: estado desconocido {self.status!r}")
        for name in ("service_type", "delivery_type", "fare_name"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise InvalidRuleError(f"Tarifa {rid}: '{name}' vacío")

        for name in ("valid_from", "valid_to"):
            if not isinstance(getattr(self, name), date):
                raise InvalidRuleError(f"Tarifa {rid}: '{name}' debe ser fecha; valor={getattr(self, name)!r}")
        valid_from = start_of(self.valid_from, tz)
        valid_to = end_of(self.valid_to, tz)
        if valid_from > valid_to:
            raise InvalidRuleError(
                f"Tarifa {rid}: vigencia invertida {valid_from.isoformat()} > {valid_to.isoformat()}"
            )

        # frozen: los valores canónicos se fijan con object.__setattr__
        for name, value in (
            ("rule_id", rid),
            ("origin", origin),
            ("destination", destination),
            ("weight_from", weight_from),
            ("weight_to", weight_to),
            ("price", price),
            ("service_type", self.service_type.strip()),
            ("delivery_type", self.delivery_type.strip()),
            ("fare_name", self.fare_name.strip()),
            ("parcel_type", parcel_type),
            ("delivery_place", self.delivery_place.strip() if self.delivery_place else None),
            ("payment_forms", forms),
            ("status", status),
            ("created_at", start_of(self.created_at, tz) if self.created_at else None),
            ("updated_at", start_of(self.updated_at, tz) if self.updated_at else None),
        ):
            object.__setattr__(self, name, value)

    @property
    def band_width(self) -> Decimal:
        return self.weight_to - self.weight_from

    @property
    def is_active(self) -> bool:
        return self.status == "ACTIVE"

    def covers_weight(self, weight: Decimal) -> bool:
        return self.weight_from <= weight <= self.weight_to

    def window_in(self, tz: Optional[tzinfo]) -> Tuple[datetime, datetime]:
        """Ventana [inicio, fin] expresada en `tz` (días completos para fechas)."""
        return start_of(self.valid_from, tz), end_of(self.valid_to, tz)

    def is_valid_at(self, at: datetime) -> bool:
        valid_from, valid_to = self.window_in(at.tzinfo)
        return valid_from <= at <= valid_to


# --- Solicitud (lo que envía el formulario) ----------------------------------

@dataclass(frozen=True, slots=True)
class Dimensions:
    """Medidas del paquete en centímetros (largo, ancho, alto)."""
    length: Optional[Decimal] = None
    width: Optional[Decimal] = None
    height: Optional[Decimal] = None

    def is_complete(self) -> bool:
        return all(d is not None and d > 0 for d in (self.length, self.width, self.height))


# Medidas tal como llegan: Dimensions, mapping (largo/ancho/alto) o secuencia de 3
RawDimensions = Union[Dimensions, Mapping[str, object], Sequence[object], None]


@dataclass(frozen=True, slots=True)
class QuoteRequest:
    """
    Parámetros crudos de una cotización (uno por llamada, efímero).
    La validación ocurre en la etapa de normalización del orquestador.
    """
    origin: str
    destination: str
    weight: Number
    dimensions: RawDimensions = None
    declared_value: Optional[Number] = None
    payment_form: Optional[str] = None
    parcel_type: Optional[str] = None
    evaluation_instant: Optional[datetime] = None


# --- Resultado (lo que devuelve el orquestador) --------------------------------

@dataclass(frozen=True, slots=True)
class QuoteMatch:
    """
    Bloque `match` de la respuesta: ruta normalizada y pesos visibles por separado
    (pesoSolicitado vs. peso facturable vs. tramo elegido).
    """
    origin: str
    destination: str
    requested_weight: Decimal
    volumetric_weight: Decimal
    billable_weight: Decimal
    band_from: Decimal
    band_to: Decimal

    @property
    def uses_volumetric_weight(self) -> bool:
        return self.volumetric_weight > self.requested_weight


@dataclass(frozen=True, slots=True)
class QuoteResult:
    """
    Cotización final, trazable a exactamente una TariffRule (rule_id).
    Nunca se persiste desde el núcleo.
    """
    match: QuoteMatch
    rule_id: str
    price: Decimal
    service_type: str
    delivery_type: str
    fare_name: str
    commitment_date: datetime
    evaluated_at: datetime
    parcel_type: Optional[str] = None
    delivery_place: Optional[str] = None
    payment_forms: FrozenSet[str] = field(default_factory=frozenset)
    declared_value: Optional[Decimal] = None
    policy_version: str = ""


__all__ = [
    "RuleStatus",
    "DateLike",
    "TariffRule",
    "Dimensions",
    "RawDimensions",
    "QuoteRequest",
    "QuoteMatch",
    "QuoteResult",
]
