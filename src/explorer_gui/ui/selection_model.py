from __future__ import annotations

"""Multi-selection state for one tree or list view.

The model works on the view's current ordering (after sort and filter),
which the view pushes in with set_items(). `anchor` is the fixed end of a
shift range and `focus` the moving end. Both are indices into that
ordering and are re-checked on every use, since the ordering can change
between two gestures.
"""

from dataclasses import dataclass
from typing import Dict, Hashable, List, Mapping, Optional, Sequence, Set, Tuple

Item = Hashable


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    w: float
    h: float

    @classmethod
    def from_points(cls, x0: float, y0: float, x1: float, y1: float) -> "Rect":
        return cls(min(x0, x1), min(y0, y1), abs(x1 - x0), abs(y1 - y0))

    def intersects(self, other: "Rect") -> bool:
        return (
            self.x < other.x + other.w
            and self.x + self.w > other.x
            and self.y < other.y + other.h
            and self.y + self.h > other.y
        )


@dataclass
class SelectionState:
    selected: Set[Item]
    anchor_index: Optional[int] = None
    focus_index: Optional[int] = None


class SelectionModel:
    def __init__(self, items: Sequence[Item] = ()):
        self._items: List[Item] = list(items)
        self.selected: Set[Item] = set()
        self.anchor: Optional[int] = None
        self.focus: Optional[int] = None
        self._marquee_origin: Optional[Tuple[float, float]] = None
        self.marquee_rect: Optional[Rect] = None

    # ---------- view ordering ----------
    @property
    def items(self) -> List[Item]:
        return list(self._items)

    def set_items(self, items: Sequence[Item]) -> None:
        """Replace the ordering; keep what is still visible, remap anchor/focus by item."""
        anchor_item = self._item_at(self.anchor)
        focus_item = self._item_at(self.focus)
        self._items = list(items)
        index: Dict[Item, int] = {it: i for i, it in enumerate(self._items)}
        self.selected &= set(index)
        self.anchor = index.get(anchor_item) if anchor_item is not None else None
        self.focus = index.get(focus_item) if focus_item is not None else None

    def state(self) -> SelectionState:
        return SelectionState(set(self.selected), self.anchor, self.focus)

    def selected_items(self) -> List[Item]:
        """Selection in view order."""
        return [it for it in self._items if it in self.selected]

    def is_selected(self, item: Item) -> bool:
        return item in self.selected

    # ---------- pointer ----------
    def click(self, index: int) -> None:
        item = self._require(index)
        self.selected = {item}
        self.anchor = self.focus = index

    def ctrl_click(self, index: int) -> None:
        item = self._require(index)
        if item in self.selected:
            self.selected.discard(item)
        else:
            self.selected.add(item)
        self.focus = index
        if self._clamp(self.anchor) is None:
            self.anchor = index

    def shift_click(self, index: int) -> None:
        self._require(index)
        self._select_range_to(index)

    def context_click(self, index: int) -> None:
        """Right-click: keep an existing multi-selection that contains the item."""
        item = self._require(index)
        if item not in self.selected:
            self.click(index)

    # ---------- keyboard ----------
    def key_up(self, shift: bool = False) -> None:
        self._move_focus(-1, shift)

    def key_down(self, shift: bool = False) -> None:
        self._move_focus(1, shift)

    def select_all(self) -> None:
        self.selected = set(self._items)

    def clear(self) -> None:
        self.selected = set()

    def _move_focus(self, delta: int, shift: bool) -> None:
        if not self._items:
            return
        cur = self._clamp(self.focus)
        new = 0 if cur is None else min(max(cur + delta, 0), len(self._items) - 1)
        if shift:
            self._select_range_to(new)
        else:
            self.selected = {self._items[new]}
            self.anchor = self.focus = new

    # ---------- marquee ----------
    def begin_marquee(self, x: float, y: float, scroll_x: float = 0, scroll_y: float = 0) -> None:
        """Start a rubber-band drag at viewport point (x, y)."""
        self.selected = set()
        self._marquee_origin = (x + scroll_x, y + scroll_y)
        self.marquee_rect = Rect(x + scroll_x, y + scroll_y, 0, 0)

    def update_marquee(
        self,
        x: float,
        y: float,
        boxes: Mapping[Item, Rect],
        scroll_x: float = 0,
        scroll_y: float = 0,
    ) -> Optional[Rect]:
        """Recompute the selection from scratch for the new drag point.

        `boxes` holds item bounding boxes in content coordinates; items
        without a box (not laid out) are never selected.
        """
        if self._marquee_origin is None:
            return None
        ox, oy = self._marquee_origin
        rect = Rect.from_points(ox, oy, x + scroll_x, y + scroll_y)
        self.marquee_rect = rect
        visible = set(self._items)
        self.selected = {it for it, box in boxes.items() if it in visible and rect.intersects(box)}
        return rect

    def end_marquee(self) -> None:
        self._marquee_origin = None
        self.marquee_rect = None

    @property
    def marquee_active(self) -> bool:
        return self._marquee_origin is not None

    # ---------- helpers ----------
    def _select_range_to(self, index: int) -> None:
        start = self._clamp(self.anchor)
        if start is None:
            start = self._clamp(self.focus)
        if start is None:
            start = index
        if self._clamp(self.anchor) is None:
            self.anchor = start
        lo, hi = min(start, index), max(start, index)
        self.selected = set(self._items[lo:hi + 1])
        self.focus = index

    def _clamp(self, index: Optional[int]) -> Optional[int]:
        if index is None or not self._items:
            return None
        return min(max(index, 0), len(self._items) - 1)

    def _item_at(self, index: Optional[int]) -> Optional[Item]:
        if index is None or not 0 <= index < len(self._items):
            return None
        return self._items[index]

    def _require(self, index: int) -> Item:
        if not 0 <= index < len(self._items):
            raise IndexError(f"index {index} outside view of {len(self._items)} item(s)")
        return self._items[index]
