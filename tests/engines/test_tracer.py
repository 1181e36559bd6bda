"""Tests for the engine tracer decorator and input fingerprinting."""

from decimal import Decimal

from invoicing_engines.discount import DiscountSpec
from invoicing_engines.tracer import compute_input_fingerprint, traced_engine


@traced_engine("sample", "2.1", fingerprint_fields=("amount", "spec"))
def _sample_engine(amount, spec=None, ignored=None):
    return amount


class TestFingerprint:

    def test_deterministic(self):
        args = {"amount": Decimal("1.50"), "spec": DiscountSpec("percentage", "5")}
        assert compute_input_fingerprint(("amount", "spec"), args) == compute_input_fingerprint(
            ("amount", "spec"), args
        )

    def test_decimal_scale_ignored(self):
        assert compute_input_fingerprint(("a",), {"a": Decimal("1.50")}) == (
            compute_input_fingerprint(("a",), {"a": Decimal("1.5")})
        )

    def test_mapping_order_ignored(self):
        first = compute_input_fingerprint(("m",), {"m": {"x": 1, "y": 2}})
        second = compute_input_fingerprint(("m",), {"m": {"y": 2, "x": 1}})
        assert first == second

    def test_value_change_changes_fingerprint(self):
        assert compute_input_fingerprint(("a",), {"a": 1}) != compute_input_fingerprint(
            ("a",), {"a": 2}
        )

    def test_missing_field_recorded_as_null(self):
        assert compute_input_fingerprint(("a",), {}) == compute_input_fingerprint(
            ("a",), {"a": None}
        )


class TestTracedEngine:

    def test_returns_result_unchanged(self):
        assert _sample_engine(Decimal("3")) == Decimal("3")

    def test_positional_and_keyword_fingerprints_match(self, captured_logs):
        _sample_engine(Decimal("3"), DiscountSpec())
        _sample_engine(amount=Decimal("3"), spec=DiscountSpec(), ignored="x")

        traces = [r for r in captured_logs() if r["message"] == "INVOICING_ENGINE_TRACE"]
        assert len(traces) == 2
        assert traces[0]["input_fingerprint"] == traces[1]["input_fingerprint"]
        assert traces[0]["engine_name"] == "sample"
        assert traces[0]["engine_version"] == "2.1"
        assert traces[0]["duration_ms"] >= 0

    def test_preserves_metadata(self):
        assert _sample_engine.__name__ == "_sample_engine"
