from datetime import date, datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from cotizador.ports import NoRouteAvailableError, WeightOutOfRangeError
from cotizador.selection import filter_candidates, select_bucket, tie_break_key

SCL = ZoneInfo("America/Santiago")


# =============================================================================
# CANDIDATE FILTER
# =============================================================================

class TestFilterCandidates:
    """Route, status, validity and optional filters."""

    def test_exact_route(self, make_rule, at):
        """Matching route survives; other routes do not."""
        keep = make_rule("1")
        other = make_rule("2", destination="CONCEPCION")
        assert filter_candidates([keep, other], "SANTIAGO", "VALPARAISO", at) == (keep,)

    def test_preserves_snapshot_order(self, make_rule, at):
        """Candidates keep catalog order."""
        rules = [make_rule("3"), make_rule("1"), make_rule("2")]
        result = filter_candidates(rules, "SANTIAGO", "VALPARAISO", at)
        assert [r.rule_id for r in result] == ["3", "1", "2"]

    def test_inactive_excluded(self, make_rule, at):
        """Inactive rules never match."""
        with pytest.raises(NoRouteAvailableError):
            filter_candidates([make_rule(status="INACTIVE")], "SANTIAGO", "VALPARAISO", at)

    def test_expired_excluded(self, make_rule):
        """Evaluation after valid_to means no route."""
        rule = make_rule(valid_to=date(2025, 6, 30))
        with pytest.raises(NoRouteAvailableError) as exc:
            filter_candidates([rule], "SANTIAGO", "VALPARAISO", datetime(2025, 7, 1, 0, 0, tzinfo=SCL))
        assert exc.value.origin == "SANTIAGO"
        assert exc.value.destination == "VALPARAISO"

    def test_validity_bounds_inclusive(self, make_rule):
        """First and last instant of the window both match."""
        rule = make_rule(valid_from=date(2025, 3, 1), valid_to=date(2025, 3, 31))
        first = datetime(2025, 3, 1, 0, 0, tzinfo=SCL)
        last = datetime(2025, 3, 31, 23, 59, 59, tzinfo=SCL)
        assert filter_candidates([rule], "SANTIAGO", "VALPARAISO", first) == (rule,)
        assert filter_candidates([rule], "SANTIAGO", "VALPARAISO", last) == (rule,)

    def test_not_yet_valid(self, make_rule):
        """Evaluation before valid_from means no route."""
        rule = make_rule(valid_from=date(2026, 1, 1), valid_to=date(2026, 12, 31))
        with pytest.raises(NoRouteAvailableError):
            filter_candidates([rule], "SANTIAGO", "VALPARAISO", datetime(2025, 12, 31, 12, tzinfo=SCL))

    def test_wildcard_destination(self, make_rule, at):
        """A None destination matches every destination."""
        rule = make_rule(destination=None)
        assert filter_candidates([rule], "SANTIAGO", "ANTOFAGASTA", at) == (rule,)

    def test_payment_form_filter(self, make_rule, at):
        """Only rules accepting the payment form survive."""
        cash = make_rule("1", payment_forms=frozenset({"Efectivo"}))
        card = make_rule("2", payment_forms=frozenset({"Tarjeta"}))
        result = filter_candidates([cash, card], "SANTIAGO", "VALPARAISO", at, payment_form="TARJETA")
        assert result == (card,)

    def test_unrestricted_payment_forms(self, make_rule, at):
        """A rule declaring no payment forms accepts any."""
        rule = make_rule()
        assert filter_candidates([rule], "SANTIAGO", "VALPARAISO", at, payment_form="EFECTIVO") == (rule,)

    def test_payment_form_without_match(self, make_rule, at):
        """No rule accepts the requested payment form."""
        rule = make_rule(payment_forms=frozenset({"Efectivo"}))
        with pytest.raises(NoRouteAvailableError):
            filter_candidates([rule], "SANTIAGO", "VALPARAISO", at, payment_form="TRANSFERENCIA")

    def test_parcel_type_filter(self, make_rule, at):
        """Typed rules must match; untyped rules apply to any parcel."""
        box = make_rule("1", parcel_type="caja")
        pallet = make_rule("2", parcel_type="pallet")
        any_parcel = make_rule("3")
        result = filter_candidates([box, pallet, any_parcel], "SANTIAGO", "VALPARAISO", at, parcel_type="PALLET")
        assert result == (pallet, any_parcel)


# =============================================================================
# BUCKET SELECTOR
# =============================================================================

class TestSelectBucket:
    """Weight band selection and tie-break."""

    def test_single_match(self, make_rule):
        """One covering band is selected."""
        low = make_rule("1", weight_from=0, weight_to=5)
        high = make_rule("2", weight_from=Decimal("5.01"), weight_to=20)
        assert select_bucket([low, high], Decimal(12)) is high

    def test_out_of_range(self, make_rule):
        """No covering band is a weight error carrying the available bands."""
        rule = make_rule(weight_from=0, weight_to=10)
        with pytest.raises(WeightOutOfRangeError) as exc:
            select_bucket([rule], Decimal("12.8"))
        assert exc.value.billable_weight == Decimal("12.8")
        assert exc.value.bands == ((Decimal(0), Decimal(10)),)

    def test_upper_bound_inclusive(self, make_rule):
        """Weight equal to weight_to is inside the band."""
        rule = make_rule(weight_from=0, weight_to=10)
        assert select_bucket([rule], Decimal(10)) is rule

    def test_narrowest_band_wins(self, make_rule):
        """Overlapping widths 10 and 5: the 5-wide band is selected."""
        wide = make_rule("1", weight_from=0, weight_to=10, price=6000)
        narrow = make_rule("2", weight_from=0, weight_to=5, price=4000)
        assert select_bucket([wide, narrow], Decimal(3)) is narrow
        assert select_bucket([narrow, wide], Decimal(3)) is narrow

    def test_adjacent_boundary_uses_lowest_id(self, make_rule):
        """[0,5] and [5,10] at weight 5: same width, no updated_at, lowest id wins."""
        lower = make_rule("1", weight_from=0, weight_to=5)
        upper = make_rule("2", weight_from=5, weight_to=10)
        assert select_bucket([upper, lower], Decimal(5)) is lower

    def test_adjacent_boundary_uses_recency(self, make_rule):
        """[0,5] and [5,10] at weight 5: the most recently updated wins."""
        lower = make_rule("1", weight_from=0, weight_to=5, updated_at=datetime(2025, 1, 1, tzinfo=SCL))
        upper = make_rule("2", weight_from=5, weight_to=10, updated_at=datetime(2025, 8, 1, tzinfo=SCL))
        assert select_bucket([lower, upper], Decimal(5)) is upper

    def test_missing_updated_at_sorts_last(self, make_rule):
        """A rule with an audit date beats one without."""
        undated = make_rule("1")
        dated = make_rule("2", updated_at=datetime(2024, 1, 1, tzinfo=SCL))
        assert select_bucket([undated, dated], Decimal(3)) is dated

    def test_numeric_ids_compare_as_numbers(self, make_rule):
        """Id 9 beats id 10."""
        nine = make_rule("9")
        ten = make_rule("10")
        assert select_bucket([ten, nine], Decimal(3)) is nine

    def test_narrower_wildcard_band_wins(self, make_rule):
        """Band width outranks route specificity."""
        exact = make_rule("2", weight_from=0, weight_to=10)
        wildcard = make_rule("1", destination=None, weight_from=0, weight_to=5)
        assert select_bucket([wildcard, exact], Decimal(3)) is wildcard
        assert select_bucket([exact, wildcard], Decimal(3)) is wildcard

    def test_exact_route_breaks_remaining_tie(self, make_rule):
        """Same width and no updated_at: the exact route beats the wildcard before ids compare."""
        exact = make_rule("2")
        wildcard = make_rule("1", destination=None)
        assert select_bucket([wildcard, exact], Decimal(3)) is exact

    def test_recency_outranks_route_specificity(self, make_rule):
        """A more recently updated wildcard beats an older exact route of equal width."""
        exact = make_rule("1", updated_at=datetime(2025, 1, 1, tzinfo=SCL))
        wildcard = make_rule("2", origin=None, updated_at=datetime(2025, 8, 1, tzinfo=SCL))
        assert select_bucket([exact, wildcard], Decimal(3)) is wildcard

    def test_non_ascii_digit_ids_compare_as_text(self, make_rule):
        """Ids like '²' are opaque text, sorted after numeric ids."""
        superscript = make_rule("²")
        one = make_rule("1")
        assert select_bucket([superscript, one], Decimal(3)) is one
        assert tie_break_key(superscript)[-1] == (1, 0, "²")

    def test_tie_break_key_is_total(self, make_rule):
        """Distinct rules never share a key."""
        rules = [make_rule(str(i)) for i in range(5)]
        assert len({tie_break_key(r) for r in rules}) == 5
