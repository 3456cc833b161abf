"""
Unit tests for configuration and flow file loading.
"""

import pytest

from autoprofiler.config.loader import (
    DEFAULT_FLOW_FILENAMES,
    find_flows_file,
    get_config_paths,
    load_flows_file,
    load_main_config,
)
from autoprofiler.validation import ValidationError


@pytest.mark.unit
class TestFlowFileLoading:
    """Test cases for load_flows_file."""

    def test_toml_flows_table(self, config_files, login_flows):
        assert load_flows_file(config_files["flows"]) == login_flows

    def test_yaml_mapping_keeps_order(self, temp_dir):
        flows_file = temp_dir / "react.automation.yml"
        flows_file.write_text(
            "second:\n  - click #b\nfirst:\n  - hover #a\n  - wait 100\n", encoding="utf-8"
        )

        flows = load_flows_file(flows_file)

        assert list(flows) == ["second", "first"]
        assert flows["first"] == ["hover #a", "wait 100"]

    def test_empty_yaml_is_empty_mapping(self, temp_dir):
        flows_file = temp_dir / "react.automation.yaml"
        flows_file.write_text("", encoding="utf-8")

        assert load_flows_file(flows_file) == {}

    def test_missing_file(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            load_flows_file(temp_dir / "react.automation.yml")

    def test_invalid_yaml(self, temp_dir):
        flows_file = temp_dir / "react.automation.yml"
        flows_file.write_text("login: [click #a\n", encoding="utf-8")

        with pytest.raises(ValidationError):
            load_flows_file(flows_file)

    def test_yaml_top_level_must_be_mapping(self, temp_dir):
        flows_file = temp_dir / "react.automation.yml"
        flows_file.write_text("- click #a\n", encoding="utf-8")

        with pytest.raises(ValidationError):
            load_flows_file(flows_file)

    def test_unsupported_extension(self, temp_dir):
        flows_file = temp_dir / "flows.json"
        flows_file.write_text("{}", encoding="utf-8")

        with pytest.raises(ValidationError):
            load_flows_file(flows_file)


@pytest.mark.unit
class TestFindFlowsFile:
    """Test cases for find_flows_file."""

    def test_lookup_order(self, temp_dir):
        for filename in reversed(DEFAULT_FLOW_FILENAMES):
            (temp_dir / filename).write_text("", encoding="utf-8")
            assert find_flows_file(temp_dir) == temp_dir / filename

    def test_nothing_found(self, temp_dir):
        assert find_flows_file(temp_dir) is None


@pytest.mark.unit
class TestMainConfigLoading:
    """Test cases for the main config file."""

    def test_load_main_config(self, config_files):
        data = load_main_config(config_files["config"])

        assert data["automation"]["general"]["average_of"] == 2

    def test_missing_main_config(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            load_main_config(temp_dir / "config.toml")

    def test_get_config_paths(self, temp_dir):
        assert get_config_paths({"paths": {"flows_config": "flows.toml"}}, temp_dir) == {
            "flows": temp_dir / "flows.toml"
        }
        assert get_config_paths({}, temp_dir) == {"flows": None}
