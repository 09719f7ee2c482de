# src/cotizador/quoter.py
# Orquestador del caso de uso: normaliza la solicitud, elige la tarifa,
# calcula precio y compromiso y arma el QuoteResult final.
# Python 3.11+

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Optional

from .catalog import CatalogSnapshot
from .commitment import commitment_date
from .dto import QuoteMatch, QuoteRequest, QuoteResult
from .normalize import Number, as_aware, normalize_key, optional_key, to_decimal, zone
from .policy import POLICY_VERSION
from .ports import CatalogProvider, CommitmentPolicy, InvalidInputError, QuoteError
from .pricing import resolve_price
from .selection import filter_candidates, select_bucket
from .settings import EngineSettings, get_settings
from .volumetric import RawDimensions, billable_weight, parse_dimensions, volumetric_weight

logger = logging.getLogger(__name__)


class QuoteStage(str, Enum):
    """
    Estados de una resolución (una pasada, sin estado persistido).
    """
    RECEIVED = "RECEIVED"
    NORMALIZED = "NORMALIZED"
    FILTERED = "FILTERED"
    BUCKET_SELECTED = "BUCKET_SELECTED"
    PRICED = "PRICED"
    COMMITMENT_COMPUTED = "COMMITMENT_COMPUTED"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"


def resolve(
    snapshot: CatalogSnapshot,
    policy: CommitmentPolicy,
    request: QuoteRequest,
    *,
    settings: Optional[EngineSettings] = None,
) -> QuoteResult:
    """
    Resolución pura de (snapshot, política, solicitud) → QuoteResult.

    Es el único punto que captura QuoteError: estampa en `error.stage` el último
    estado alcanzado antes del rechazo y relanza el mismo error. Sin reintentos
    (el cómputo es determinista) ni resultados parciales.
    """
    settings = settings or get_settings()
    tz = zone(settings.timezone)
    stage = QuoteStage.RECEIVED

    try:
        # el instante y las vigencias de las tarifas se comparan en la zona del motor
        at = as_aware(request.evaluation_instant, tz).astimezone(tz) if request.evaluation_instant else datetime.now(tz)
        origin = normalize_key(request.origin, field="origin")
        destination = normalize_key(request.destination, field="destination")
        weight = to_decimal(request.weight, field="weight")
        if weight <= 0:
            raise InvalidInputError(f"El peso debe ser > 0; valor={weight}", field="weight")
        declared_value = None
        if request.declared_value is not None and request.declared_value != "":
            declared_value = to_decimal(request.declared_value, field="declared_value")
            if declared_value < 0:
                raise InvalidInputError(
                    f"El valor declarado debe ser >= 0; valor={declared_value}", field="declared_value"
                )
        payment_form = optional_key(request.payment_form, field="payment_form")
        parcel_type = optional_key(request.parcel_type, field="parcel_type")
        dimensions = parse_dimensions(request.dimensions)
        stage = QuoteStage.NORMALIZED
        logger.debug("Solicitud normalizada: %s -> %s, %s kg", origin, destination, weight)

        volumetric = volumetric_weight(dimensions, settings.volumetric_divisor)
        billable = billable_weight(weight, volumetric)
        candidates = filter_candidates(
            snapshot, origin, destination, at,
            payment_form=payment_form,
            parcel_type=parcel_type,
        )
        stage = QuoteStage.FILTERED
        logger.debug("%s tarifas candidatas (snapshot %s)", len(candidates), snapshot.version)

        rule = select_bucket(candidates, billable)
        stage = QuoteStage.BUCKET_SELECTED

        priced = resolve_price(rule)
        stage = QuoteStage.PRICED

        promised = commitment_date(policy, priced.service_type, priced.delivery_type, at)
        stage = QuoteStage.COMMITMENT_COMPUTED
    except QuoteError as ex:
        ex.stage = stage.value
        logger.info(
            "Cotización rechazada: code=%s stage=%s msg=%s", ex.code, ex.stage, ex.message
        )
        raise

    result = QuoteResult(
        match=QuoteMatch(
            origin=origin,
            destination=destination,
            requested_weight=weight,
            volumetric_weight=volumetric,
            billable_weight=billable,
            band_from=rule.weight_from,
            band_to=rule.weight_to,
        ),
        rule_id=priced.rule_id,
        price=priced.price,
        service_type=priced.service_type,
        delivery_type=priced.delivery_type,
        fare_name=priced.fare_name,
        commitment_date=promised,
        evaluated_at=at,
        parcel_type=priced.parcel_type,
        delivery_place=priced.delivery_place,
        payment_forms=priced.payment_forms,
        declared_value=declared_value,
        policy_version=POLICY_VERSION,
    )
    logger.info(
        "Cotización completada: tarifa=%s %s -> %s facturable=%s kg precio=%s",
        result.rule_id, origin, destination, billable, result.price,
    )
    return result


class QuoteEngine:
    """
    Caso de uso 'cotizar envío' (núcleo de aplicación, sin I/O externo).

    Responsabilidades:
      - Tomar UNA referencia al snapshot del catálogo por llamada.
      - Delegar en `resolve` la cadena normalizar → filtrar → tramo → precio → compromiso.
      - Mantener el núcleo independiente del framework HTTP/UI.
    """

    def __init__(
        self,
        catalog: CatalogProvider,
        commitment_policy: CommitmentPolicy,
        *,
        settings: Optional[EngineSettings] = None,
    ) -> None:
        self._catalog = catalog
        self._policy = commitment_policy
        self._settings = settings or get_settings()

    # ------------------------------- API pública -------------------------------

    def resolve(
        self,
        origin: str,
        destination: str,
        weight_kg: Number,
        dimensions_cm: RawDimensions = None,
        declared_value: Optional[Number] = None,
        payment_form: Optional[str] = None,
        parcel_type: Optional[str] = None,
        evaluation_instant: Optional[datetime] = None,
    ) -> QuoteResult:
        """
        Cotiza un envío. Lanza InvalidInputError, NoRouteAvailableError,
        WeightOutOfRangeError o PolicyNotConfiguredError.
        """
        request = QuoteRequest(
            origin=origin,
            destination=destination,
            weight=weight_kg,
            dimensions=dimensions_cm,
            declared_value=declared_value,
            payment_form=payment_form,
            parcel_type=parcel_type,
            evaluation_instant=evaluation_instant,
        )
        return self.resolve_request(request)

    def resolve_request(self, request: QuoteRequest) -> QuoteResult:
        snapshot = self._catalog.current_snapshot()
        return resolve(snapshot, self._policy, request, settings=self._settings)


__all__ = [
    "QuoteStage",
    "QuoteEngine",
    "resolve",
]
