"""
Tests for configuration loading, validation and templates.
"""

import json

import pytest
import yaml

from layerdoc.config import ConfigurationManager, LayerDocConfig, load_config
from layerdoc.errors import ConfigurationError
from layerdoc.templates import TemplateGenerator


class TestLayerDocConfig:
    """Tests for LayerDocConfig."""

    def test_defaults(self):
        config = LayerDocConfig.default()
        assert config.layer_settings.max_layer_lines == 100
        assert config.layer_settings.draft_tag == "draft"
        assert config.consistency_settings.undocumented_severity == "warning"
        assert config.layout_settings.package is None
        assert config.sync_settings.include_findings is True

    def test_no_file_gives_defaults(self):
        assert load_config().to_dict() == LayerDocConfig.default().to_dict()

    def test_load_yaml_file(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text(
            "layers:\n  max_layer_lines: 80\nlayout:\n  package: core\n  unknown_key: 1\n",
            encoding="utf-8",
        )
        config = LayerDocConfig.load(str(path))
        assert config.layer_settings.max_layer_lines == 80
        assert config.layout_settings.package == "core"
        assert config.layout_settings.src_dir == "src"

    def test_default_file_is_found(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "layerdoc.yaml").write_text("layers:\n  max_layer_lines: 70\n", encoding="utf-8")
        assert load_config().layer_settings.max_layer_lines == 70

    def test_load_json_file(self, tmp_path):
        path = tmp_path / "custom.json"
        path.write_text(json.dumps({"sync": {"include_findings": False}}), encoding="utf-8")
        assert LayerDocConfig.from_file(str(path)).sync_settings.include_findings is False

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yaml"
        path.write_text("layers:\n  max_layer_lines: 80\n", encoding="utf-8")
        monkeypatch.setenv("LAYERDOC_MAX_LAYER_LINES", "50")
        monkeypatch.setenv("LAYERDOC_PACKAGE", "envpkg")
        config = load_config(str(path))
        assert config.layer_settings.max_layer_lines == 50
        assert config.layout_settings.package == "envpkg"

    def test_env_ignored_when_disabled(self, monkeypatch):
        monkeypatch.setenv("LAYERDOC_MAX_LAYER_LINES", "50")
        assert load_config(use_env=False).layer_settings.max_layer_lines == 100

    def test_invalid_env_values_ignored(self, monkeypatch):
        monkeypatch.setenv("LAYERDOC_MAX_LAYER_LINES", "many")
        monkeypatch.setenv("LAYERDOC_UNDOCUMENTED_SEVERITY", "fatal")
        config = LayerDocConfig.from_env()
        assert config.layer_settings.max_layer_lines == 100
        assert config.consistency_settings.undocumented_severity == "warning"

    def test_invalid_file_value(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("layers:\n  max_layer_lines: 0\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="max_layer_lines"):
            LayerDocConfig.from_file(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            LayerDocConfig.from_file(str(tmp_path / "nope.yaml"))

    def test_file_must_hold_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="mapping"):
            LayerDocConfig.from_file(str(path))

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Invalid configuration file format"):
            LayerDocConfig.from_file(str(path))

    @pytest.mark.parametrize("file_format", ["yaml", "json"])
    def test_to_file_and_back(self, tmp_path, file_format):
        config = LayerDocConfig.default()
        config.layer_settings.max_layer_lines = 42
        config.consistency_settings.check_extension = False
        path = tmp_path / f"saved.{file_format}"
        config.to_file(str(path), file_format)
        assert LayerDocConfig.from_file(str(path)).to_dict() == config.to_dict()

    def test_section_must_be_mapping(self, tmp_path):
        path = tmp_path / "scalar.yaml"
        path.write_text("layers: 5\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="'layers' must be a mapping"):
            LayerDocConfig.from_file(str(path))

    def test_from_dict_rejects_non_mapping_section(self):
        with pytest.raises(ConfigurationError, match="'sync' must be a mapping"):
            LayerDocConfig.from_dict({"sync": [True]})

    def test_validate(self):
        config = LayerDocConfig.default()
        config.validate()
        config.consistency_settings.extension_severity = "loud"
        with pytest.raises(ConfigurationError, match="extension_severity"):
            config.validate()

    def test_summary(self):
        summary = LayerDocConfig.default().get_config_summary()
        assert "Max layer lines (exclusive): 100" in summary
        assert "Package: (not set)" in summary


class TestConfigurationManager:
    """Tests for ConfigurationManager helpers."""

    def test_merge_is_deep(self):
        merged = ConfigurationManager.merge_configs(
            {"layers": {"max_layer_lines": 80, "draft_tag": "draft"}},
            {},
            {"layers": {"max_layer_lines": 60}, "sync": {"include_findings": False}},
        )
        assert merged == {
            "layers": {"max_layer_lines": 60, "draft_tag": "draft"},
            "sync": {"include_findings": False},
        }

    def test_empty_tag_rejected(self):
        with pytest.raises(ConfigurationError, match="draft_tag"):
            ConfigurationManager.validate_config({"layers": {"draft_tag": " "}})

    def test_negative_first_layer_rejected(self):
        with pytest.raises(ConfigurationError, match="first_layer_number"):
            ConfigurationManager.validate_config({"layers": {"first_layer_number": -1}})


class TestTemplateGenerator:
    """Tests for the bundled configuration templates."""

    def test_templates_are_valid(self):
        for name in TemplateGenerator.list_templates():
            data = TemplateGenerator.render(name)
            assert TemplateGenerator.validate_template(data) == []
            assert "_description" not in data

    def test_strict_template(self):
        data = TemplateGenerator.render("strict")
        config = LayerDocConfig.from_dict(data)
        assert config.layer_settings.max_layer_lines == 60
        assert config.consistency_settings.undocumented_severity == "error"

    def test_customizations(self):
        data = TemplateGenerator.render("relaxed", {"layout": {"package": "core"}})
        assert data["layout"]["package"] == "core"
        assert data["layout"]["src_dir"] == "src"

    def test_invalid_customization(self):
        with pytest.raises(ConfigurationError):
            TemplateGenerator.render("default", {"layers": {"max_layer_lines": -5}})

    def test_unknown_template(self):
        with pytest.raises(ConfigurationError, match="Unknown template"):
            TemplateGenerator.load_template("lenient")

    def test_description(self):
        assert "60 lines" in TemplateGenerator.get_template_description("strict")

    def test_generate_config(self, tmp_path):
        yaml_path = tmp_path / "strict.yaml"
        TemplateGenerator.generate_config("strict", str(yaml_path))
        assert yaml.safe_load(yaml_path.read_text(encoding="utf-8"))["layers"]["max_layer_lines"] == 60

        json_path = tmp_path / "relaxed.json"
        TemplateGenerator.generate_config("relaxed", str(json_path), format="json")
        config = LayerDocConfig.from_file(str(json_path))
        assert config.consistency_settings.check_extension is False

    def test_missing_section(self):
        errors = TemplateGenerator.validate_template({"layers": {}})
        assert "Missing required section: sync" in errors
