# src/cotizador/commitment.py
# Fecha de compromiso: plazo (días hábiles) por (servicio, entrega) sumado
# con aritmética de calendario. Python 3.11+

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, Mapping, Optional, Tuple

import holidays

from .normalize import normalize_key
from .policy import DEFAULT_COMMITMENT_OFFSETS, HOLIDAY_COUNTRY, SKIP_WEEKENDS
from .ports import CommitmentPolicy, PolicyNotConfiguredError
from .settings import EngineSettings

logger = logging.getLogger(__name__)


class TableCommitmentPolicy:
    """
    Política de compromiso basada en una tabla {(tipo_servicio, tipo_entrega) → días hábiles}.

    La tabla es dato de negocio externo; las claves se normalizan igual que las
    ciudades ("Express", "express " → "EXPRESS"). Los feriados salen de la
    librería `holidays` para `holiday_country` (None = sin feriados) más
    `extra_holidays` (cierres propios de la empresa).
    """

    def __init__(
        self,
        offsets: Mapping[Tuple[str, str], int],
        *,
        skip_weekends: bool = SKIP_WEEKENDS,
        holiday_country: Optional[str] = HOLIDAY_COUNTRY,
        extra_holidays: Iterable[date] = (),
    ) -> None:
        table = {}
        for (service, delivery), days in offsets.items():
            if isinstance(days, bool) or not isinstance(days, int) or days < 0:
                raise ValueError(f"Plazo para ({service}, {delivery}) debe ser int >= 0; valor={days!r}")
            table[(normalize_key(service, field="service_type"),
                   normalize_key(delivery, field="delivery_type"))] = days
        self._offsets = table
        self._skip_weekends = skip_weekends
        self._holidays = holidays.country_holidays(holiday_country) if holiday_country else None
        self._extra = frozenset(extra_holidays)

    @classmethod
    def from_settings(
        cls,
        settings: EngineSettings,
        offsets: Mapping[Tuple[str, str], int] = DEFAULT_COMMITMENT_OFFSETS,
        **kwargs,
    ) -> "TableCommitmentPolicy":
        return cls(
            offsets,
            skip_weekends=settings.skip_weekends,
            holiday_country=settings.holiday_country,
            **kwargs,
        )

    def offset_for(self, service_type: str, delivery_type: str) -> int:
        key = (normalize_key(service_type, field="service_type"),
               normalize_key(delivery_type, field="delivery_type"))
        try:
            return self._offsets[key]
        except KeyError:
            raise PolicyNotConfiguredError(service_type, delivery_type) from None

    def is_business_day(self, day: date) -> bool:
        if self._skip_weekends and day.weekday() >= 5:
            return False
        if day in self._extra:
            return False
        return not (self._holidays is not None and day in self._holidays)


def add_business_days(
    start: datetime,
    days: int,
    is_business_day: Callable[[date], bool],
) -> datetime:
    """
    Avanza `days` días hábiles desde `start` conservando hora local y zona horaria.

    Se suman días de calendario (no bloques de 24 h), así un cambio de horario
    no desplaza la hora comprometida. Los días no hábiles se saltan sin contar.
    days == 0 devuelve `start` tal cual.
    """
    if days < 0:
        raise ValueError(f"days debe ser >= 0; valor={days}")
    current = start
    remaining = days
    skipped = 0
    while remaining > 0:
        current = current + timedelta(days=1)
        if is_business_day(current.date()):
            remaining -= 1
        else:
            skipped += 1
    if skipped:
        logger.debug("Plazo de %s días hábiles saltó %s días no hábiles", days, skipped)
    return current


def commitment_date(
    policy: CommitmentPolicy,
    service_type: str,
    delivery_type: str,
    at: datetime,
) -> datetime:
    """Lookup del plazo en la política + suma de días hábiles desde `at`."""
    days = policy.offset_for(service_type, delivery_type)
    return add_business_days(at, days, policy.is_business_day)


__all__ = [
    "TableCommitmentPolicy",
    "add_business_days",
    "commitment_date",
]
