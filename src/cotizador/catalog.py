# src/cotizador/catalog.py
# Snapshot inmutable del catálogo de tarifas, proveedor en memoria con
# reemplazo atómico y mapeo de filas de la tabla `tarifas`. Python 3.11+

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Iterable, Iterator, Mapping, Optional, Tuple

from dateutil.parser import isoparse

from .dto import TariffRule
from .normalize import as_aware, zone
from .ports import InvalidRuleError

logger = logging.getLogger(__name__)

# Valores de `estado` que la tabla usa para tarifas vigentes
_ACTIVE_VALUES = {"ACTIVE", "ACTIVO", "ACTIVA", "A", "1", "TRUE", "SI", "S"}
_INACTIVE_VALUES = {"INACTIVE", "INACTIVO", "INACTIVA", "I", "0", "FALSE", "NO", "N"}

# Origen/destino que la tabla usa como comodín
_WILDCARDS = {"", "*", "TODOS", "CUALQUIERA"}


@dataclass(frozen=True, slots=True)
class CatalogSnapshot:
    """
    Vista inmutable del catálogo en un instante. El orden de `rules` es el del
    catálogo y se conserva en el filtro de candidatas.
    """
    rules: Tuple[TariffRule, ...]
    version: str
    loaded_at: datetime

    def __iter__(self) -> Iterator[TariffRule]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)


def build_snapshot(
    rules: Iterable[TariffRule],
    *,
    version: Optional[str] = None,
    loaded_at: Optional[datetime] = None,
) -> CatalogSnapshot:
    """Congela las tarifas en una tupla; rechaza ids duplicados."""
    frozen = tuple(rules)
    seen = set()
    for rule in frozen:
        if rule.rule_id in seen:
            raise InvalidRuleError(f"Tarifa duplicada en el catálogo: id={rule.rule_id}")
        seen.add(rule.rule_id)
    loaded = loaded_at or datetime.now(timezone.utc)
    return CatalogSnapshot(
        rules=frozen,
        version=version or loaded.strftime("%Y%m%dT%H%M%S%fZ"),
        loaded_at=loaded,
    )


class InMemoryCatalog:
    """
    CatalogProvider en memoria. El colaborador externo llama `replace()` cuando
    refresca; los lectores obtienen siempre un snapshot completo (viejo o nuevo).
    """

    def __init__(self, rules: Iterable[TariffRule] = (), *, version: Optional[str] = None) -> None:
        self._lock = threading.Lock()
        self._snapshot = build_snapshot(rules, version=version)

    def current_snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    def replace(self, rules: Iterable[TariffRule], *, version: Optional[str] = None) -> CatalogSnapshot:
        # Se construye fuera del lock; solo el swap de referencia es crítico
        snapshot = build_snapshot(rules, version=version)
        with self._lock:
            previous = self._snapshot
            self._snapshot = snapshot
        logger.info(
            "Catálogo reemplazado: version=%s tarifas=%s (antes version=%s tarifas=%s)",
            snapshot.version, len(snapshot), previous.version, len(previous),
        )
        return snapshot


# ------------------------------------------------------------------------------
# Mapeo de filas de la tabla `tarifas` → TariffRule
# ------------------------------------------------------------------------------

def _parse_instant(value: Any, *, tz_name: Optional[str]) -> Any:
    # un datetime naive toma `tz_name` si se indica; si no, se lee en la zona del motor
    if value is None or value == "":
        return None
    if isinstance(value, str):
        text = value.strip()
        parsed = isoparse(text)
        # "2025-12-31" es una fecha: abarca el día completo
        value = parsed.date() if len(text) == 10 else parsed
    if isinstance(value, datetime):
        return as_aware(value, zone(tz_name)) if tz_name else value
    if isinstance(value, date):
        return value
    raise InvalidRuleError(f"Fecha no reconocida: {value!r}")


def _parse_status(value: Any) -> str:
    if isinstance(value, bool):
        return "ACTIVE" if value else "INACTIVE"
    text = str(value).strip().upper()
    if text in _ACTIVE_VALUES:
        return "ACTIVE"
    if text in _INACTIVE_VALUES:
        return "INACTIVE"
    raise InvalidRuleError(f"Estado de tarifa desconocido: {value!r}")


def _parse_route(value: Any) -> Optional[str]:
    if value is None or str(value).strip().upper() in _WILDCARDS:
        return None
    return str(value)


def _parse_payment_forms(value: Any) -> frozenset:
    if value is None:
        return frozenset()
    if isinstance(value, str):
        parts = value.replace(";", ",").split(",")
    else:
        parts = list(value)
    return frozenset(p for p in parts if isinstance(p, str) and p.strip())


def tariff_rule_from_row(row: Mapping[str, Any], *, tz_name: Optional[str] = None) -> TariffRule:
    """
    Convierte una fila de `SELECT * FROM tarifas` a TariffRule validada.

    Columnas: id, origen, destino, pesoInicial, pesoFinal, tarifa_pullman_nueva,
    tipo_servicio, tipo_entrega, nombre_tarifa, tipo_encomienda, lugar_entrega,
    formas_pago, vigencia_desde, vigencia_hasta, estado, created_at, updated_at.
    Faltantes requeridas → InvalidRuleError.
    """
    try:
        return TariffRule(
            rule_id=str(row["id"]),
            origin=_parse_route(row.get("origen")),
            destination=_parse_route(row.get("destino")),
            weight_from=row["pesoInicial"],
            weight_to=row["pesoFinal"],
            price=row["tarifa_pullman_nueva"],
            service_type=row["tipo_servicio"],
            delivery_type=row["tipo_entrega"],
            fare_name=row.get("nombre_tarifa") or row["tipo_servicio"],
            valid_from=_parse_instant(row["vigencia_desde"], tz_name=tz_name),
            valid_to=_parse_instant(row["vigencia_hasta"], tz_name=tz_name),
            parcel_type=row.get("tipo_encomienda") or None,
            delivery_place=row.get("lugar_entrega") or None,
            payment_forms=_parse_payment_forms(row.get("formas_pago")),
            status=_parse_status(row.get("estado", "ACTIVE")),
            created_at=_parse_instant(row.get("created_at"), tz_name=tz_name),
            updated_at=_parse_instant(row.get("updated_at"), tz_name=tz_name),
        )
    except KeyError as ex:
        raise InvalidRuleError(f"Fila de tarifa sin columna requerida {ex.args[0]!r}: id={row.get('id')!r}") from ex
    except ValueError as ex:
        if isinstance(ex, InvalidRuleError):
            raise
        raise InvalidRuleError(f"Fila de tarifa inválida id={row.get('id')!r}: {ex}") from ex


def snapshot_from_rows(
    rows: Iterable[Mapping[str, Any]],
    *,
    version: Optional[str] = None,
    tz_name: Optional[str] = None,
) -> CatalogSnapshot:
    return build_snapshot((tariff_rule_from_row(r, tz_name=tz_name) for r in rows), version=version)


__all__ = [
    "CatalogSnapshot",
    "build_snapshot",
    "InMemoryCatalog",
    "tariff_rule_from_row",
    "snapshot_from_rows",
]
