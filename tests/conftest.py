from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest

from cotizador.catalog import InMemoryCatalog
from cotizador.commitment import TableCommitmentPolicy
from cotizador.dto import TariffRule
from cotizador.quoter import QuoteEngine
from cotizador.settings import EngineSettings

SCL = ZoneInfo("America/Santiago")


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def settings():
    """Settings with defaults only (no .env, no COTIZADOR_* env vars)."""
    return EngineSettings(_env_file=None)


@pytest.fixture
def at():
    """Wednesday 2025-09-03 10:00 Santiago, inside every default validity window."""
    return datetime(2025, 9, 3, 10, 0, tzinfo=SCL)


@pytest.fixture
def make_rule():
    """Factory for TariffRule with sensible defaults for the SANTIAGO -> VALPARAISO route."""
    def _make(rule_id="1", **overrides):
        fields = dict(
            rule_id=rule_id,
            origin="SANTIAGO",
            destination="VALPARAISO",
            weight_from=0,
            weight_to=10,
            price=5000,
            service_type="Normal",
            delivery_type="Domicilio",
            fare_name="Tarifa Normal 0-10",
            valid_from=date(2025, 1, 1),
            valid_to=date(2025, 12, 31),
        )
        fields.update(overrides)
        return TariffRule(**fields)
    return _make


@pytest.fixture
def policy():
    """Commitment policy with CL holidays and weekends skipped."""
    return TableCommitmentPolicy(
        {
            ("Normal", "Domicilio"): 3,
            ("Normal", "Sucursal"): 2,
            ("Express", "Domicilio"): 1,
        },
        skip_weekends=True,
        holiday_country="CL",
    )


@pytest.fixture
def engine_for(policy, settings):
    """Build a QuoteEngine over an in-memory catalog holding the given rules."""
    def _engine(*rules):
        return QuoteEngine(InMemoryCatalog(rules, version="test"), policy, settings=settings)
    return _engine
