"""Tests for click, keyboard and marquee selection."""

import pytest

from explorer_gui.ui.selection_model import Rect, SelectionModel

ITEMS = ["A", "B", "C", "D", "E"]


def row_boxes(items, height=20, width=200):
    return {it: Rect(0, i * height, width, height) for i, it in enumerate(items)}


@pytest.fixture
def model():
    return SelectionModel(ITEMS)


class TestPointer:
    def test_click(self, model):
        model.click(1)
        assert model.selected_items() == ["B"]
        assert model.anchor == model.focus == 1

    def test_shift_range_forward(self, model):
        model.click(1)
        model.shift_click(3)
        assert model.selected_items() == ["B", "C", "D"]
        assert model.anchor == 1
        assert model.focus == 3

    def test_shift_range_recomputed_not_unioned(self, model):
        model.click(1)
        model.shift_click(3)
        model.shift_click(0)
        assert model.selected_items() == ["A", "B"]
        assert model.anchor == 1

    def test_shift_without_anchor(self, model):
        model.shift_click(2)
        assert model.selected_items() == ["C"]
        assert model.anchor == 2

    def test_ctrl_toggles(self, model):
        model.click(0)
        model.ctrl_click(2)
        model.ctrl_click(4)
        assert model.selected_items() == ["A", "C", "E"]
        model.ctrl_click(2)
        assert model.selected_items() == ["A", "E"]
        assert model.anchor == 0
        assert model.focus == 2

    def test_ctrl_then_shift_uses_original_anchor(self, model):
        model.click(1)
        model.ctrl_click(4)
        model.shift_click(2)
        assert model.selected_items() == ["B", "C"]

    def test_ctrl_sets_anchor_when_unset(self, model):
        model.ctrl_click(3)
        assert model.anchor == 3

    def test_context_click_keeps_multi_selection(self, model):
        model.click(1)
        model.shift_click(3)
        model.context_click(2)
        assert model.selected_items() == ["B", "C", "D"]

    def test_context_click_outside_selection_collapses(self, model):
        model.click(1)
        model.shift_click(3)
        model.context_click(4)
        assert model.selected_items() == ["E"]
        assert model.anchor == 4

    def test_out_of_range_index(self, model):
        with pytest.raises(IndexError):
            model.click(5)


class TestKeyboard:
    def test_down_without_focus_starts_at_top(self, model):
        model.key_down()
        assert model.selected_items() == ["A"]
        assert model.focus == 0

    def test_up_without_focus_starts_at_top(self, model):
        model.key_up()
        assert model.focus == 0

    def test_down_moves_and_collapses(self, model):
        model.click(1)
        model.shift_click(2)
        model.key_down()
        assert model.selected_items() == ["D"]
        assert model.anchor == model.focus == 3

    def test_clamped_at_bounds(self, model):
        model.click(4)
        model.key_down()
        assert model.focus == 4
        model.click(0)
        model.key_up()
        assert model.focus == 0

    def test_shift_extends_from_anchor(self, model):
        model.click(2)
        model.key_down(shift=True)
        model.key_down(shift=True)
        assert model.selected_items() == ["C", "D", "E"]
        model.key_up(shift=True)
        model.key_up(shift=True)
        model.key_up(shift=True)
        assert model.selected_items() == ["B", "C"]
        assert model.anchor == 2
        assert model.focus == 1

    def test_empty_view(self):
        model = SelectionModel()
        model.key_down()
        assert model.selected_items() == []
        assert model.focus is None

    def test_select_all_keeps_anchor(self, model):
        model.click(2)
        model.select_all()
        assert model.selected_items() == ITEMS
        assert model.anchor == model.focus == 2

    def test_clear(self, model):
        model.select_all()
        model.clear()
        assert model.selected_items() == []


class TestMarquee:
    def test_selects_intersecting_rows(self, model):
        model.click(0)
        model.begin_marquee(10, 25)
        assert model.selected_items() == []
        # rows B (20..40) and C (40..60); stops short of D at 60
        model.update_marquee(50, 55, row_boxes(ITEMS))
        assert model.selected_items() == ["B", "C"]

    def test_recomputed_on_each_move(self, model):
        model.begin_marquee(10, 5)
        model.update_marquee(50, 95, row_boxes(ITEMS))
        assert model.selected_items() == ITEMS
        model.update_marquee(50, 15, row_boxes(ITEMS))
        assert model.selected_items() == ["A"]

    def test_dragging_upwards_normalises(self, model):
        model.begin_marquee(100, 70)
        rect = model.update_marquee(20, 45, row_boxes(ITEMS))
        assert rect == Rect(20, 45, 80, 25)
        assert model.selected_items() == ["C", "D"]

    def test_touching_edges_do_not_count(self, model):
        model.begin_marquee(10, 40)
        model.update_marquee(50, 40, row_boxes(ITEMS))
        assert model.selected_items() == []

    def test_scroll_offset(self, model):
        # viewport y 5..15 with 60px scrolled is content y 65..75 -> row D
        model.begin_marquee(10, 5, scroll_y=60)
        model.update_marquee(50, 15, row_boxes(ITEMS), scroll_y=60)
        assert model.selected_items() == ["D"]

    def test_scrolling_during_drag(self, model):
        model.begin_marquee(10, 5)
        model.update_marquee(50, 15, row_boxes(ITEMS), scroll_y=40)
        assert model.selected_items() == ["A", "B", "C"]

    def test_items_without_box_ignored(self, model):
        boxes = row_boxes(ITEMS)
        del boxes["B"]
        model.begin_marquee(0, 0)
        model.update_marquee(100, 100, boxes)
        assert model.selected_items() == ["A", "C", "D", "E"]

    def test_end(self, model):
        model.begin_marquee(0, 0)
        assert model.marquee_active
        model.end_marquee()
        assert not model.marquee_active
        assert model.update_marquee(5, 5, row_boxes(ITEMS)) is None


class TestViewChanges:
    def test_resort_remaps_anchor_by_item(self, model):
        model.click(1)
        model.set_items(["E", "D", "C", "B", "A"])
        assert model.anchor == 3
        model.shift_click(1)
        assert model.selected_items() == ["D", "C", "B"]

    def test_filtered_items_leave_selection(self, model):
        model.select_all()
        model.set_items(["A", "C"])
        assert model.selected_items() == ["A", "C"]

    def test_anchor_filtered_out(self, model):
        model.click(4)
        model.set_items(["A", "B"])
        assert model.anchor is None
        model.shift_click(1)
        assert model.selected_items() == ["B"]

    def test_state_snapshot(self, model):
        model.click(2)
        state = model.state()
        model.click(3)
        assert state.selected == {"C"}
        assert state.anchor_index == 2
