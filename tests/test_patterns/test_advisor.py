"""Tests for the advisor — thresholds, ranking and caps."""

from fixcascade.config import PatternsConfig
from fixcascade.patterns.advisor import CODE_DESCRIPTIONS, Advisor, code_descriptions
from fixcascade.patterns.models import FailurePattern, PatternData


def _seed_store(store, *edges: tuple[str, str, int]) -> None:
    patterns = {}
    for source, target, count in edges:
        p = FailurePattern(source_code=source, target_code=target, count=count)
        patterns[p.key] = p
    store.set_project_data(PatternData(patterns=patterns))


class TestAdvise:
    def test_empty_input(self, store):
        assert Advisor(store).advise([]) == []

    def test_no_matches_is_empty(self, store):
        _seed_store(store, ("A", "B", 5))
        assert Advisor(store).advise(["Z"]) == []

    def test_below_threshold_not_advised(self, store):
        _seed_store(store, ("A", "B", 2))
        assert Advisor(store, min_count=3).advise(["A"]) == []

    def test_threshold_reached_by_recording(self, store):
        advisor = Advisor(store, min_count=3)
        for _ in range(2):
            store.record_sequence("A", "B")
        assert advisor.advise(["A"]) == []

        store.record_sequence("A", "B")
        assert len(advisor.advise(["A"])) == 1

    def test_max_per_error_keeps_highest_count(self, store):
        _seed_store(store, ("GIT013", "GIT004", 4), ("GIT013", "GIT006", 9))
        warnings = Advisor(store, max_per_error=1).advise(["GIT013"])
        assert len(warnings) == 1
        assert "GIT006" in warnings[0]

    def test_sorted_by_count_descending(self, store):
        _seed_store(store, ("A", "B", 3), ("A", "C", 7), ("A", "D", 5))
        warnings = Advisor(store).advise(["A"])
        assert [w.split(", ")[1].split(" ")[0] for w in warnings] == ["C", "D", "B"]

    def test_input_order_preserved_across_codes(self, store):
        _seed_store(store, ("A", "B", 3), ("X", "Y", 10))
        warnings = Advisor(store).advise(["A", "X"])
        assert "fixing A" in warnings[0]
        assert "fixing X" in warnings[1]

    def test_max_total_stops_mid_code(self, store):
        _seed_store(store, ("A", "B", 9), ("A", "C", 8), ("A", "D", 7), ("X", "Y", 5))
        warnings = Advisor(store, max_total=2).advise(["A", "X"])
        assert len(warnings) == 2
        assert all("fixing A" in w for w in warnings)

    def test_unlimited_by_default(self, store):
        _seed_store(store, *[("A", f"T{i}", 3 + i) for i in range(6)])
        assert len(Advisor(store).advise(["A"])) == 6

    def test_from_config_applies_caps(self, store):
        _seed_store(store, ("A", "B", 9), ("A", "C", 8), ("A", "D", 7), ("X", "Y", 5))
        cfg = PatternsConfig(
            global_data_dir="/unused", max_warnings_per_error=2, max_warnings_total=3
        )
        warnings = Advisor.from_config(store, cfg).advise(["A", "X"])
        assert len(warnings) == 3
        assert "fixing X" in warnings[2]


class TestFormatting:
    def test_known_codes_use_labels(self, store):
        _seed_store(store, ("GIT013", "GIT004", 5))
        [warning] = Advisor(store).advise(["GIT013"])
        assert warning == (
            "Pattern hint: after fixing GIT013 (conventional format), "
            "GIT004 (title too long) often follows."
        )

    def test_unknown_codes_label_themselves(self, store):
        _seed_store(store, ("CUSTOM1", "CUSTOM2", 5))
        [warning] = Advisor(store).advise(["CUSTOM1"])
        assert warning == (
            "Pattern hint: after fixing CUSTOM1 (CUSTOM1), CUSTOM2 (CUSTOM2) often follows."
        )

    def test_code_descriptions_is_a_copy(self):
        table = code_descriptions()
        table["GIT004"] = "changed"
        assert CODE_DESCRIPTIONS["GIT004"] == "title too long"
