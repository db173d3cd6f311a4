"""
Unit tests for live container objects and tree helpers.
"""

import pytest
from glazeup.objects import (
    LiveContainer,
    find_all_windows,
    find_focused_workspace,
    find_split_containing,
    find_workspace,
    get_node_by_path,
)


def window(id, size=0.5, title=None):
    return LiveContainer(type="window", id=id, tiling_size=size, title=title or id)


def split(id, children, direction="vertical", size=0.5):
    return LiveContainer(
        type="split", id=id, tiling_size=size, tiling_direction=direction, children=children
    )


def workspace(name, children, direction="horizontal", focus=False):
    return LiveContainer(
        type="workspace",
        id=f"ws-{name}",
        name=name,
        tiling_direction=direction,
        children=children,
        has_focus=focus,
    )


@pytest.mark.unit
class TestLiveContainer:
    """Test conversion from GlazeWM JSON."""

    def test_from_dict_reads_camel_case(self):
        data = {
            "type": "workspace",
            "id": "ws",
            "name": "2",
            "tilingDirection": "Horizontal",
            "hasFocus": True,
            "children": [
                {"type": "window", "id": "a", "tilingSize": 0.3, "title": "A", "processName": "a"},
                {
                    "type": "split",
                    "id": "s",
                    "tilingSize": 0.7,
                    "tilingDirection": "vertical",
                    "children": [{"type": "window", "id": "b", "tilingSize": 1}],
                },
            ],
        }

        ws = LiveContainer.from_dict(data)

        assert ws.name == "2"
        assert ws.tiling_direction == "horizontal"
        assert ws.has_focus
        assert [c.type for c in ws.children] == ["window", "split"]
        assert ws.children[0].tiling_size == 0.3
        assert ws.children[0].process_name == "a"
        assert ws.children[1].children[0].id == "b"

    def test_from_dict_tolerates_missing_fields(self):
        node = LiveContainer.from_dict({"type": "window"})

        assert node.id is None
        assert node.tiling_size == 0.0
        assert node.children == []

    def test_to_dict_round_trips_through_from_dict(self):
        ws = workspace("1", [window("a", 0.4), split("s", [window("b", 1.0)], size=0.6)])

        assert LiveContainer.from_dict(ws.to_dict()) == ws


@pytest.mark.unit
class TestFindAllWindows:
    """Test depth-first window collection."""

    def test_depth_first_order(self):
        ws = workspace(
            "1",
            [
                window("a"),
                split("s1", [window("b"), split("s2", [window("c"), window("d")])]),
                window("e"),
            ],
        )

        assert [w.id for w in find_all_windows(ws)] == ["a", "b", "c", "d", "e"]

    def test_never_returns_containers(self):
        ws = workspace("1", [split("s1", [window("a")]), split("s2", [])])

        assert all(w.type == "window" for w in find_all_windows(ws))

    def test_empty_and_missing_trees(self):
        assert find_all_windows(workspace("1", [])) == []
        assert find_all_windows(None) == []

    def test_window_itself(self):
        w = window("a")
        assert find_all_windows(w) == [w]


@pytest.mark.unit
class TestLookups:
    """Test workspace, path and split lookups."""

    def test_find_workspace_by_name(self):
        workspaces = [workspace("1", []), workspace("2", [])]

        assert find_workspace(workspaces, "2").id == "ws-2"
        assert find_workspace(workspaces, "3") is None

    def test_find_focused_workspace(self):
        workspaces = [workspace("1", []), workspace("2", [], focus=True)]

        assert find_focused_workspace(workspaces).name == "2"
        assert find_focused_workspace([workspace("1", [])]) is None

    def test_get_node_by_path(self):
        ws = workspace("1", [window("a"), split("s", [window("b"), window("c")])])

        assert get_node_by_path(ws, []) is ws
        assert get_node_by_path(ws, [1, 1]).id == "c"
        assert get_node_by_path(ws, [2]) is None
        assert get_node_by_path(ws, [0, 0]) is None
        assert get_node_by_path(None, [0]) is None

    def test_find_split_containing_exact_pair(self):
        inner = split("inner", [window("c"), window("d")])
        ws = workspace(
            "1",
            [split("outer", [window("a"), inner, window("b")]), split("pair", [window("b2"), window("a2")])],
        )

        assert find_split_containing(ws, "c", "d") is inner
        assert find_split_containing(ws, "a2", "b2").id == "pair"
        # outer has three children, so it never matches
        assert find_split_containing(ws, "a", "b") is None
