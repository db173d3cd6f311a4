"""
Unit tests for the session config model.
"""

import json

import pytest
from glazeup.config import (
    PLACEHOLDER_APPLICATION,
    Config,
    ConfigError,
    SplitNode,
    WindowNode,
    WorkspaceConfig,
    flatten_applications,
    load_config,
    save_config,
    target_ratios,
)

SAMPLE = {
    "workspaces": [
        {
            "name": "1",
            "tilingDirection": "horizontal",
            "children": [
                {
                    "type": "window",
                    "title": "Browser",
                    "application": "C:\\Apps\\browser.exe",
                    "tilingSize": 0.6,
                    "args": ["--profile", "work"],
                    "link": "https://example.com",
                    "fullscreen": True,
                },
                {
                    "type": "split",
                    "tilingDirection": "vertical",
                    "tilingSize": 0.4,
                    "children": [
                        {"type": "window", "title": "Terminal", "application": "Terminal", "tilingSize": 0.5},
                        {"type": "window", "title": "Notes", "application": "App.Notes!App", "tilingSize": 0.5},
                    ],
                },
            ],
        },
        {"name": "2", "children": [{"type": "window", "title": "Mail", "application": "mail.exe"}]},
    ]
}


@pytest.mark.unit
class TestConfigParsing:
    """Test reading configs from JSON data."""

    def test_from_dict_builds_tree(self):
        config = Config.from_dict(SAMPLE)

        ws = config.workspaces[0]
        assert ws.name == "1"
        assert ws.tiling_direction == "horizontal"
        browser, split = ws.children
        assert isinstance(browser, WindowNode)
        assert browser.args == ["--profile", "work"]
        assert browser.link == "https://example.com"
        assert browser.fullscreen
        assert isinstance(split, SplitNode)
        assert split.tiling_direction == "vertical"
        assert split.is_binary
        assert [c.title for c in split.children] == ["Terminal", "Notes"]

    def test_defaults(self):
        ws = Config.from_dict(SAMPLE).workspaces[1]

        assert ws.tiling_direction == "horizontal"
        mail = ws.children[0]
        assert mail.tiling_size is None
        assert mail.args == []
        assert mail.link is None
        assert not mail.fullscreen

    def test_accepts_snake_case_and_aliases(self):
        data = {
            "workspaces": [
                {
                    "name": "3",
                    "tiling_direction": "Vertical",
                    "children": [{"type": "window", "name": "Editor", "path": "editor.exe", "tiling_size": 1}],
                }
            ]
        }

        ws = Config.from_dict(data).workspaces[0]

        assert ws.tiling_direction == "vertical"
        assert ws.children[0].title == "Editor"
        assert ws.children[0].application == "editor.exe"
        assert ws.children[0].tiling_size == 1.0

    def test_unknown_nodes_and_unnamed_workspaces_are_dropped(self):
        data = {
            "workspaces": [
                {"name": "", "children": []},
                {"name": "1", "children": [{"type": "monitor"}, "junk", {"type": "window", "title": "A"}]},
            ]
        }

        config = Config.from_dict(data)

        assert [ws.name for ws in config.workspaces] == ["1"]
        assert len(config.workspaces[0].children) == 1

    def test_rejects_non_object(self):
        with pytest.raises(ConfigError):
            Config.from_dict([1, 2])
        with pytest.raises(ConfigError):
            Config.from_dict({"workspaces": {"name": "1"}})

    def test_rejects_duplicate_workspace_names(self):
        data = {"workspaces": [{"name": "2", "children": []}, {"name": "2", "children": []}]}

        with pytest.raises(ConfigError, match="Duplicate workspace name: 2"):
            Config.from_dict(data)

    def test_get_workspace(self):
        config = Config.from_dict(SAMPLE)

        assert config.get_workspace("2").children[0].title == "Mail"
        assert config.get_workspace("9") is None


@pytest.mark.unit
class TestFlattenApplications:
    """Test depth-first launch order."""

    def test_order_descends_into_splits(self):
        ws = WorkspaceConfig(
            "1",
            children=[
                WindowNode("A"),
                SplitNode(children=[WindowNode("B"), SplitNode(children=[WindowNode("C")])]),
                WindowNode("D"),
            ],
        )

        assert [w.title for w in flatten_applications(ws)] == ["A", "B", "C", "D"]

    def test_empty_workspace(self):
        assert flatten_applications(WorkspaceConfig("1")) == []


@pytest.mark.unit
class TestTargetRatios:
    """Test configured ratios."""

    def test_explicit_sizes(self):
        assert target_ratios([WindowNode(tiling_size=0.3), WindowNode(tiling_size=0.7)]) == [0.3, 0.7]

    def test_missing_sizes_get_equal_share(self):
        ratios = target_ratios([WindowNode(), WindowNode(), WindowNode(tiling_size=0.5)])

        assert ratios[:2] == [pytest.approx(1 / 3), pytest.approx(1 / 3)]
        assert ratios[2] == 0.5

    def test_no_children(self):
        assert target_ratios([]) == []


@pytest.mark.unit
class TestConfigFiles:
    """Test loading and saving config files."""

    def test_load_config(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps(SAMPLE), encoding="utf-8")

        config = load_config(path)

        assert [ws.name for ws in config.workspaces] == ["1", "2"]

    def test_load_config_with_bom(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_bytes(b"\xef\xbb\xbf" + json.dumps(SAMPLE).encode("utf-8"))

        assert len(load_config(path).workspaces) == 2

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.json")

    def test_load_invalid_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ConfigError, match="Error parsing"):
            load_config(path)

    def test_save_then_load_preserves_config(self, tmp_path):
        path = tmp_path / "out.json"
        config = Config.from_dict(SAMPLE)

        save_config(config, path)

        assert load_config(path) == config
        assert not (tmp_path / "out.json.tmp").exists()

    def test_save_writes_placeholder_application(self, tmp_path):
        path = tmp_path / "out.json"
        config = Config([WorkspaceConfig("1", children=[WindowNode("A", PLACEHOLDER_APPLICATION, 1.0)])])

        save_config(config, path)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["workspaces"][0]["children"][0] == {
            "type": "window",
            "title": "A",
            "application": "FILL ME IN",
            "tilingSize": 1.0,
        }
