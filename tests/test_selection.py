# tests/test_selection.py

import pytest
from pathlib import Path
import sys
import random

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from explorer.selection import SelectionSet
from config import config


class TestSelectionSet:
    """Test cases for the bounded comparison selection"""

    def test_toggle_appends_in_order(self):
        selection = SelectionSet().toggle("a").toggle("b").toggle("c")
        assert selection.order == ("a", "b", "c")
        assert len(selection) == 3
        assert selection.contains("b")
        assert "z" not in selection

    def test_toggle_twice_restores_prior_state(self):
        start = SelectionSet(("a", "b"))
        assert start.toggle("c").toggle("c") == start
        # Toggling an already selected id off and on moves it to the end
        assert start.toggle("a").toggle("a").order == ("b", "a")

    def test_toggle_at_capacity_is_noop(self):
        full = SelectionSet(("1", "2", "3", "4", "5"))
        assert full.is_full
        assert full.toggle("6") == full
        assert full.toggle("6").order == ("1", "2", "3", "4", "5")
        assert not full.can_select("6")
        assert full.can_select("3")

    def test_toggle_removes_when_full(self):
        full = SelectionSet(("1", "2", "3", "4", "5"))
        assert full.toggle("3").order == ("1", "2", "4", "5")

    def test_random_toggles_respect_invariants(self):
        rng = random.Random(7)
        selection = SelectionSet()
        for _ in range(500):
            selection = selection.toggle(str(rng.randint(0, 9)))
            assert len(selection) <= 5
            assert len(set(selection.order)) == len(selection.order)

    def test_remove(self):
        selection = SelectionSet(("a", "b", "c"))
        assert selection.remove("b").order == ("a", "c")
        assert selection.remove("zzz") == selection
        assert selection.clear().is_empty

    def test_color_index_follows_position(self):
        selection = SelectionSet(("a", "b", "c"))
        assert [selection.color_index_of(f) for f in "abc"] == [0, 1, 2]
        assert selection.color_index_of("x") is None

        # Removing a float shifts later floats into earlier slots
        shifted = selection.remove("a")
        assert shifted.color_index_of("b") == 0
        assert shifted.color_of("b") == selection.color_of("a")

        readded = shifted.toggle("a")
        assert readded.color_index_of("a") == 2

    def test_color_of_uses_palette(self):
        selection = SelectionSet(("a", "b"), palette=("red", "blue"))
        assert selection.color_of("a") == "red"
        assert selection.color_of("b") == "blue"
        assert selection.color_of("missing") is None

    def test_invalid_construction(self):
        with pytest.raises(ValueError):
            SelectionSet(("a", "a"))
        with pytest.raises(ValueError):
            SelectionSet(("1", "2", "3"), capacity=2)
        with pytest.raises(ValueError):
            SelectionSet(capacity=0)

    def test_custom_capacity(self):
        selection = SelectionSet(capacity=2).toggle("a").toggle("b").toggle("c")
        assert selection.order == ("a", "b")

    def test_capacity_from_config(self, monkeypatch):
        monkeypatch.setitem(config.settings['selection'], 'capacity', 3)
        selection = SelectionSet.from_config(["a", "b", "c"])
        assert selection.capacity == 3
        assert selection.toggle("d") == selection

    def test_capacity_env_override(self, monkeypatch):
        monkeypatch.setenv("FLOATCHAT_SELECTION_CAPACITY", "2")
        assert SelectionSet.from_config().capacity == 2
