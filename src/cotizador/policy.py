# src/cotizador/policy.py
# Parámetros de negocio del cotizador (SIN lógica ni I/O).
# Centraliza divisor volumétrico, calendario y plazos por defecto para que
# volumetric.py, commitment.py y quoter.py los usen sin tocar algoritmos.
# Python 3.11+

from __future__ import annotations

from typing import Final, Mapping, Tuple


# ------------------------------------------------------------------------------
# Metadatos
# ------------------------------------------------------------------------------
POLICY_VERSION: Final[str] = "2025-09-01-tarifas-1"
"""
Identificador de la versión de política. Viaja en cada QuoteResult y en logs.
Cambiar cuando ajustes divisor, calendario o plazos.
"""


# ------------------------------------------------------------------------------
# Peso volumétrico
# ------------------------------------------------------------------------------
VOLUMETRIC_DIVISOR: Final[int] = 5000
"""
cm³ por kg. peso_volumetrico = largo * ancho * alto / VOLUMETRIC_DIVISOR.
Un paquete de 40x40x40 cm pesa volumétricamente 12.8 kg.
"""


# ------------------------------------------------------------------------------
# Calendario
# ------------------------------------------------------------------------------
DEFAULT_TIMEZONE: Final[str] = "America/Santiago"
"""
Zona horaria en que se interpretan fechas de vigencia y datetimes naive.
"""

HOLIDAY_COUNTRY: Final[str] = "CL"
"""
Código ISO del país cuyos feriados (librería `holidays`) no cuentan como hábiles.
"""

SKIP_WEEKENDS: Final[bool] = True
"""
- True  → sábado y domingo no cuentan para el plazo de compromiso.
- False → días corridos (solo se saltan feriados, si hay calendario).
"""


# ------------------------------------------------------------------------------
# Plazos de compromiso por defecto (días hábiles)
# ------------------------------------------------------------------------------
DEFAULT_COMMITMENT_OFFSETS: Final[Mapping[Tuple[str, str], int]] = {
    ("EXPRESS", "DOMICILIO"): 1,
    ("EXPRESS", "SUCURSAL"): 1,
    ("NORMAL", "DOMICILIO"): 3,
    ("NORMAL", "SUCURSAL"): 2,
    ("ECONOMICO", "SUCURSAL"): 5,
}
"""
Tabla de ejemplo {(tipo_servicio, tipo_entrega) → días hábiles}.
En producción la entrega el colaborador de catálogo; esta sirve para bootstrap y tests.
"""


# ------------------------------------------------------------------------------
# Validación simple de rangos (llamar desde bootstrap/tests)
# ------------------------------------------------------------------------------
def validate_policy() -> None:
    """
    Chequeos básicos de consistencia de política. No hace I/O.
    """
    if not isinstance(VOLUMETRIC_DIVISOR, int) or VOLUMETRIC_DIVISOR <= 0:
        raise ValueError(f"VOLUMETRIC_DIVISOR debe ser int > 0; valor actual={VOLUMETRIC_DIVISOR}")

    if len(HOLIDAY_COUNTRY) != 2 or not HOLIDAY_COUNTRY.isupper():
        raise ValueError(f"HOLIDAY_COUNTRY debe ser ISO-3166 alfa-2; valor actual={HOLIDAY_COUNTRY}")

    for (service, delivery), days in DEFAULT_COMMITMENT_OFFSETS.items():
        if not isinstance(days, int) or days < 0:
            raise ValueError(f"Plazo para ({service}, {delivery}) debe ser int >= 0; valor actual={days}")


__all__ = [
    "POLICY_VERSION",
    "VOLUMETRIC_DIVISOR",
    "DEFAULT_TIMEZONE",
    "HOLIDAY_COUNTRY",
    "SKIP_WEEKENDS",
    "DEFAULT_COMMITMENT_OFFSETS",
    "validate_policy",
]
