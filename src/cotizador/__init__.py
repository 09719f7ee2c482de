# src/cotizador/__init__.py
# Motor de resolución de tarifas: API pública del núcleo.

from .catalog import CatalogSnapshot, InMemoryCatalog, build_snapshot, snapshot_from_rows, tariff_rule_from_row
from .commitment import TableCommitmentPolicy, add_business_days, commitment_date
from .dto import Dimensions, QuoteMatch, QuoteRequest, QuoteResult, TariffRule
from .ports import (
    CatalogProvider,
    CommitmentPolicy,
    InvalidInputError,
    InvalidRuleError,
    NoRouteAvailableError,
    PolicyNotConfiguredError,
    QuoteError,
    WeightOutOfRangeError,
)
from .quoter import QuoteEngine, QuoteStage, resolve
from .settings import EngineSettings, get_settings

__all__ = [
    "CatalogSnapshot",
    "InMemoryCatalog",
    "build_snapshot",
    "snapshot_from_rows",
    "tariff_rule_from_row",
    "TableCommitmentPolicy",
    "add_business_days",
    "commitment_date",
    "Dimensions",
    "QuoteMatch",
    "QuoteRequest",
    "QuoteResult",
    "TariffRule",
    "CatalogProvider",
    "CommitmentPolicy",
    "InvalidInputError",
    "InvalidRuleError",
    "NoRouteAvailableError",
    "PolicyNotConfiguredError",
    "QuoteError",
    "WeightOutOfRangeError",
    "QuoteEngine",
    "QuoteStage",
    "resolve",
    "EngineSettings",
    "get_settings",
]
