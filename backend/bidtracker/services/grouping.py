"""Seller grouping for the dashboard view.

Related items from one seller are shown as a single row: the item with
the highest reference ("market") value leads, and the others hang
beneath it ordered by closing time.
"""

from dataclasses import dataclass, fields, replace
from typing import Dict, List, Optional

from bidtracker.scrapers.base import NormalizedRecord


@dataclass
class GroupedRecord(NormalizedRecord):
    """A primary record plus the other records from the same seller.

    ``secondary_records`` is None, not an empty list, when the seller has
    a single record.
    """

    secondary_records: Optional[List[NormalizedRecord]] = None

    @classmethod
    def from_primary(
        cls, primary: NormalizedRecord, secondary: List[NormalizedRecord]
    ) -> "GroupedRecord":
        values = {f.name: getattr(primary, f.name) for f in fields(NormalizedRecord)}
        return cls(**values, secondary_records=secondary or None)

    def primary(self) -> NormalizedRecord:
        """Return the primary record on its own."""
        values = {f.name: getattr(self, f.name) for f in fields(NormalizedRecord)}
        return NormalizedRecord(**values)


def group_by_seller(records: List[NormalizedRecord]) -> List[GroupedRecord]:
    """Group records by seller_ref.

    Groups are returned in the order their seller first appears in the
    input. Within a group the primary is the record with the highest
    reference_value, the first one seen winning ties; the rest follow
    sorted by closes_at ascending. Input records are never mutated.

    Args:
        records: Flat list of records

    Returns:
        One GroupedRecord per distinct seller_ref
    """
    buckets: Dict[str, List[NormalizedRecord]] = {}
    for record in records:
        buckets.setdefault(record.seller_ref, []).append(_copy(record))

    grouped: List[GroupedRecord] = []
    for bucket in buckets.values():
        # Stable sort, so equal values keep their input order
        ranked = sorted(bucket, key=lambda r: r.reference_value, reverse=True)
        primary, rest = ranked[0], ranked[1:]
        secondary = sorted(rest, key=lambda r: r.closes_at)
        grouped.append(GroupedRecord.from_primary(primary, secondary))

    return grouped


def flatten_groups(groups: List[GroupedRecord]) -> List[NormalizedRecord]:
    """Undo group_by_seller: each primary followed by its secondaries."""
    flat: List[NormalizedRecord] = []
    for group in groups:
        flat.append(group.primary())
        flat.extend(_copy(r) for r in group.secondary_records or [])
    return flat


def _copy(record: NormalizedRecord) -> NormalizedRecord:
    """Copy a record, dropping nested groups if it is itself a GroupedRecord."""
    if isinstance(record, GroupedRecord):
        return record.primary()
    return replace(record)
