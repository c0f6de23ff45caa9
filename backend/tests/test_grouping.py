"""Tests for seller grouping."""

import copy
from decimal import Decimal

from bidtracker.services.grouping import GroupedRecord, flatten_groups, group_by_seller

from conftest import make_record


class TestGroupBySeller:
    """Tests for group_by_seller()."""

    def test_empty_input_gives_empty_output(self):
        assert group_by_seller([]) == []

    def test_documented_example(self):
        records = [
            make_record(seller_ref="A", reference_value="10", closes_at="2025-01-02", name="a10"),
            make_record(seller_ref="A", reference_value="20", closes_at="2025-01-01", name="a20"),
            make_record(seller_ref="B", reference_value="5", closes_at="2025-01-03", name="b5"),
        ]

        groups = group_by_seller(records)

        assert len(groups) == 2
        seller_a, seller_b = groups

        assert seller_a.seller_ref == "A"
        assert seller_a.name == "a20"
        assert seller_a.reference_value == Decimal("20")
        assert [r.name for r in seller_a.secondary_records] == ["a10"]
        assert seller_a.secondary_records[0].closes_at.isoformat().startswith("2025-01-02")

        assert seller_b.seller_ref == "B"
        assert seller_b.name == "b5"
        assert seller_b.secondary_records is None

    def test_groups_follow_first_appearance_of_seller(self):
        records = [
            make_record(seller_ref="C", name="c1"),
            make_record(seller_ref="A", name="a1"),
            make_record(seller_ref="C", name="c2"),
            make_record(seller_ref="B", name="b1"),
        ]

        assert [g.seller_ref for g in group_by_seller(records)] == ["C", "A", "B"]

    def test_primary_has_highest_reference_value(self):
        records = [
            make_record(seller_ref="A", reference_value="5", name="low"),
            make_record(seller_ref="A", reference_value="50", name="high"),
            make_record(seller_ref="A", reference_value="25", name="mid"),
        ]

        (group,) = group_by_seller(records)

        assert group.name == "high"
        for secondary in group.secondary_records:
            assert secondary.reference_value <= group.reference_value

    def test_tie_keeps_first_encountered_as_primary(self):
        records = [
            make_record(seller_ref="A", reference_value="30", name="first", closes_at="2025-03-01"),
            make_record(seller_ref="A", reference_value="30", name="second", closes_at="2025-01-01"),
        ]

        (group,) = group_by_seller(records)

        assert group.name == "first"
        assert [r.name for r in group.secondary_records] == ["second"]

    def test_secondaries_sorted_by_closing_time(self):
        records = [
            make_record(seller_ref="A", reference_value="100", name="primary"),
            make_record(seller_ref="A", closes_at="2025-05-01", name="may"),
            make_record(seller_ref="A", closes_at="2025-02-01", name="feb"),
            make_record(seller_ref="A", closes_at="2025-03-15", name="mar"),
        ]

        (group,) = group_by_seller(records)

        assert [r.name for r in group.secondary_records] == ["feb", "mar", "may"]

    def test_seller_ref_matched_exactly(self):
        records = [
            make_record(seller_ref="https://seller/1", name="one"),
            make_record(seller_ref="https://seller/1/", name="slash"),
        ]

        assert len(group_by_seller(records)) == 2

    def test_input_is_not_mutated(self):
        records = [
            make_record(seller_ref="A", reference_value="10", closes_at="2025-01-02", name="a10"),
            make_record(seller_ref="A", reference_value="20", closes_at="2025-01-01", name="a20"),
            make_record(seller_ref="B", reference_value="5", name="b5"),
        ]
        snapshot = copy.deepcopy(records)

        groups = group_by_seller(records)
        groups[0].name = "renamed"
        groups[0].secondary_records[0].my_bid = Decimal("999")

        assert records == snapshot
        assert all(not isinstance(r, GroupedRecord) for r in records)

    def test_idempotent_on_same_input(self):
        records = [
            make_record(seller_ref="A", reference_value="10", closes_at="2025-01-02", name="a10"),
            make_record(seller_ref="B", reference_value="7", closes_at="2025-01-05", name="b7"),
            make_record(seller_ref="A", reference_value="20", closes_at="2025-01-01", name="a20"),
            make_record(seller_ref="A", reference_value="20", closes_at="2024-12-30", name="a20b"),
        ]

        assert group_by_seller(records) == group_by_seller(records)

    def test_idempotent_on_flattened_output(self):
        records = [
            make_record(seller_ref="A", reference_value="10", closes_at="2025-01-02", name="a10"),
            make_record(seller_ref="B", reference_value="7", closes_at="2025-01-05", name="b7"),
            make_record(seller_ref="A", reference_value="20", closes_at="2025-01-01", name="a20"),
            make_record(seller_ref="A", reference_value="20", closes_at="2024-12-30", name="a20b"),
            make_record(seller_ref="B", reference_value="7", closes_at="2025-01-04", name="b7b"),
        ]

        first = group_by_seller(records)
        second = group_by_seller(flatten_groups(first))

        assert second == first

    def test_grouping_already_grouped_records_drops_nesting(self):
        records = [
            make_record(seller_ref="A", reference_value="20", name="a20"),
            make_record(seller_ref="A", reference_value="10", name="a10"),
        ]
        groups = group_by_seller(records)

        regrouped = group_by_seller(groups)

        assert len(regrouped) == 1
        assert regrouped[0].name == "a20"
        assert regrouped[0].secondary_records is None
