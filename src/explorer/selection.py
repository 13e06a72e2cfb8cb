# src/explorer/selection.py
"""Bounded, ordered multi-selection of floats for comparison.

Presentation colour follows the slot a float occupies, not its identity:
removing a float shifts the ones after it down a slot, so they change colour.
"""
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence, Tuple

from config import config

DEFAULT_CAPACITY = 5
DEFAULT_PALETTE = ("#ef4444", "#3b82f6", "#10b981", "#f59e0b", "#8b5cf6")


@dataclass(frozen=True)
class SelectionSet:
    order: Tuple[str, ...] = ()
    capacity: int = DEFAULT_CAPACITY
    palette: Tuple[str, ...] = DEFAULT_PALETTE

    def __post_init__(self):
        if self.capacity < 1:
            raise ValueError("Selection capacity must be at least 1")
        order = tuple(self.order)
        if len(set(order)) != len(order):
            raise ValueError("Selection cannot contain duplicate float ids")
        if len(order) > self.capacity:
            raise ValueError(f"Selection holds at most {self.capacity} floats")
        if not self.palette:
            raise ValueError("Selection palette cannot be empty")
        object.__setattr__(self, 'order', order)
        object.__setattr__(self, 'palette', tuple(self.palette))

    @classmethod
    def from_config(cls, float_ids: Sequence[str] = ()) -> "SelectionSet":
        capacity = int(config.get('selection.capacity', DEFAULT_CAPACITY))
        palette = tuple(config.get('selection.palette', DEFAULT_PALETTE))
        return cls(tuple(float_ids), capacity, palette)

    def __len__(self) -> int:
        return len(self.order)

    def __iter__(self) -> Iterator[str]:
        return iter(self.order)

    def __contains__(self, float_id) -> bool:
        return float_id in self.order

    @property
    def is_full(self) -> bool:
        return len(self.order) >= self.capacity

    @property
    def is_empty(self) -> bool:
        return not self.order

    def contains(self, float_id: str) -> bool:
        return float_id in self.order

    def toggle(self, float_id: str) -> "SelectionSet":
        """Remove if selected, append if there is room, otherwise unchanged"""
        if float_id in self.order:
            return self.remove(float_id)
        if self.is_full:
            return self
        return SelectionSet(self.order + (float_id,), self.capacity, self.palette)

    def remove(self, float_id: str) -> "SelectionSet":
        if float_id not in self.order:
            return self
        return SelectionSet(tuple(f for f in self.order if f != float_id), self.capacity, self.palette)

    def clear(self) -> "SelectionSet":
        return SelectionSet((), self.capacity, self.palette)

    def color_index_of(self, float_id: str) -> Optional[int]:
        """Zero-based slot of the float, or None when it is not selected"""
        try:
            return self.order.index(float_id)
        except ValueError:
            return None

    def color_of(self, float_id: str) -> Optional[str]:
        index = self.color_index_of(float_id)
        if index is None:
            return None
        return self.palette[index % len(self.palette)]

    def can_select(self, float_id: str) -> bool:
        """Whether a toggle on this id would change the selection"""
        return float_id in self.order or not self.is_full
