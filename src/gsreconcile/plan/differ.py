"""Attachment set differ: additions and removals by identity."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Iterable, Optional, TypeVar, Union

from gsreconcile.models import (
    IPAttachment,
    NetworkAttachment,
    PeripheralKind,
    PeripheralRef,
    StorageAttachment,
)

T = TypeVar("T", PeripheralRef, StorageAttachment, NetworkAttachment, IPAttachment)

Identity = tuple[PeripheralKind, str]


@dataclass(frozen=True, slots=True)
class AttachmentDiff(Generic[T]):
    to_remove: tuple[T, ...]
    to_add: tuple[T, ...]

    def is_empty(self) -> bool:
        return not self.to_remove and not self.to_add


def identity_of(item: Union[PeripheralRef, StorageAttachment, NetworkAttachment, IPAttachment]) -> Identity:
    if isinstance(item, PeripheralRef):
        return item.identity
    return item.ref.identity


def diff_attachments(old: Iterable[T], new: Iterable[T]) -> AttachmentDiff[T]:
    """
    Compute removals and additions between two attachment collections.

    Rules:
        - to_remove: items of old whose identity is absent from new.
        - to_add: items of new whose identity is absent from old.
        - Items present in both are left alone, even if a non-identity
          attribute (e.g. is_boot_device) differs.
        - Ordered inputs keep their order; unordered sets are sorted by
          identity so the result never depends on iteration order.
    """
    old_items = _ordered(old)
    new_items = _ordered(new)

    old_ids = {identity_of(item) for item in old_items}
    new_ids = {identity_of(item) for item in new_items}

    return AttachmentDiff(
        to_remove=tuple(item for item in old_items if identity_of(item) not in new_ids),
        to_add=tuple(item for item in new_items if identity_of(item) not in old_ids),
    )


def ref_changed(
    old: Optional[Union[PeripheralRef, IPAttachment]],
    new: Optional[Union[PeripheralRef, IPAttachment]],
) -> bool:
    """True if a single-valued peripheral slot (ISO image, one IP family) changed."""
    old_id = identity_of(old) if old is not None else None
    new_id = identity_of(new) if new is not None else None
    return old_id != new_id


def _ordered(items: Iterable[T]) -> list[T]:
    if isinstance(items, (set, frozenset)):
        return sorted(items, key=identity_of)
    return list(items)
