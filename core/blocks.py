"""
Block moves for parent/subservice lists.

Shared by the admin catalog reorder and the quote day reorder. A parent
row travels with its subservices as one contiguous block, and subservices
only ever land inside their own parent's group.
"""

from dataclasses import dataclass
from typing import Hashable, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class RowInfo:
    """What the block logic needs to know about one row."""

    key: Hashable            # Unique row identity
    kind: Hashable           # Catalog service id of the row
    is_subservice: bool
    parent: Hashable | None  # Parent service id when is_subservice


def block_indices(rows: Sequence[RowInfo], index: int) -> list[int]:
    """
    Indices that move together when the row at index is dragged.

    A subservice moves alone. A parent takes its subservices with it: all of
    them when it is the only row of its kind, otherwise only the contiguous
    run directly below it.
    """
    row = rows[index]
    if row.is_subservice:
        return [index]

    def is_child(candidate: RowInfo) -> bool:
        return candidate.is_subservice and candidate.parent == row.kind

    same_kind = sum(1 for r in rows if r.kind == row.kind and not r.is_subservice)
    if same_kind == 1:
        return [index] + [i for i, r in enumerate(rows) if i != index and is_child(r)]

    indices = [index]
    cursor = index + 1
    while cursor < len(rows) and is_child(rows[cursor]):
        indices.append(cursor)
        cursor += 1
    return indices


def is_valid_drop(dragged: RowInfo, target: RowInfo | None) -> bool:
    """
    Whether dragged may be dropped on target (None = drop zone / empty day).

    Subservices stay inside their parent's group: the target must be a
    sibling subservice or the exact parent. Parents may land on any
    non-subservice row or a drop zone.
    """
    if dragged.is_subservice:
        if target is None:
            return False
        if target.is_subservice:
            return target.parent == dragged.parent
        return target.kind == dragged.parent
    return target is None or not target.is_subservice


def split_block(items: Sequence[T], indices: Sequence[int]) -> tuple[list[T], list[T]]:
    """Split items into (block in original order, remaining items)."""
    chosen = set(indices)
    block = [items[i] for i in sorted(chosen)]
    remaining = [item for i, item in enumerate(items) if i not in chosen]
    return block, remaining


def insertion_index(
    rows: Sequence[RowInfo],
    target_key: Hashable | None,
    dragged: RowInfo,
    insert_after: bool,
) -> int:
    """
    Where to splice the dragged block into rows (dragged block already removed).

    Locating the target by key absorbs the index shift caused by removing the
    block from the same list.
    """
    if target_key is None:
        return len(rows)

    position = next(i for i, r in enumerate(rows) if r.key == target_key)
    target = rows[position]

    if dragged.is_subservice and not target.is_subservice:
        # Dropped on its parent: first slot under the parent
        return position + 1

    if not insert_after:
        return position

    position += 1
    if not target.is_subservice:
        while (
            position < len(rows)
            and rows[position].is_subservice
            and rows[position].parent == target.kind
        ):
            position += 1
    return position
