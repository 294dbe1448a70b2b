# tests/dataloader/test_config_loader.py

from pathlib import Path

import pytest
import yaml

from campcheck.dataloader.config_loader import ConfigLoader
from campcheck.errors import ConfigError
from campcheck.schemas.models import Config


@pytest.fixture()
def tmp_yaml(tmp_path: Path) -> Path:
    """Write a temporary YAML file with valid Config fields."""
    path = tmp_path / "config.yaml"
    cfg = {
        "required_activities": ["lunch", "swim"],
        "time_format": "24h",
        "validation": {"fail_on_warnings": True},
    }
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(cfg, f)
    return path


def test_load_valid_yaml_returns_config(tmp_yaml: Path):
    """
    @brief
    Verify that valid YAML is parsed and defaults fill the omitted fields.
    """
    # --- Arrange ---
    loader = ConfigLoader()

    # --- Act ---
    cfg = loader.load(tmp_yaml)

    # --- Assert ---
    assert isinstance(cfg, Config)
    assert cfg.required_activities == ["lunch", "swim"]
    assert cfg.time_format == "24h"
    assert cfg.validation.fail_on_warnings is True
    assert cfg.validation.write_report is True
    assert "no field" in cfg.ignored_resources
    assert cfg.output_dir == "data/output"


def test_missing_file_raises_configerror(tmp_path: Path):
    # --- Arrange ---
    loader = ConfigLoader()

    # --- Act / Assert ---
    with pytest.raises(ConfigError) as e:
        loader.load(tmp_path / "no_such.yaml")

    assert "Configuration file not found" in str(e.value)


def test_wrong_extension_raises_configerror(tmp_path: Path):
    # --- Arrange ---
    path = tmp_path / "config.json"
    path.write_text("{}", encoding="utf-8")

    # --- Act / Assert ---
    with pytest.raises(ConfigError) as e:
        ConfigLoader().load(path)

    assert "extension" in str(e.value)


def test_empty_yaml_raises_configerror(tmp_path: Path):
    # --- Arrange ---
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")

    # --- Act / Assert ---
    with pytest.raises(ConfigError) as e:
        ConfigLoader().load(path)

    assert "empty" in str(e.value)


def test_yaml_with_extra_field_raises_configerror(tmp_yaml: Path):
    """
    @brief
    Unknown top-level keys are rejected by the strict schema.
    """
    # --- Arrange ---
    data = yaml.safe_load(tmp_yaml.read_text(encoding="utf-8"))
    data["solver"] = {"num_workers": 4}
    tmp_yaml.write_text(yaml.safe_dump(data), encoding="utf-8")

    # --- Act / Assert ---
    with pytest.raises(ConfigError) as e:
        ConfigLoader().load(tmp_yaml)

    msg = str(e.value)
    assert "Invalid configuration structure" in msg
    assert "extra fields are forbidden" in msg


def test_invalid_time_format_raises_configerror(tmp_path: Path):
    # --- Arrange ---
    path = tmp_path / "config.yaml"
    path.write_text("time_format: military\n", encoding="utf-8")

    # --- Act / Assert ---
    with pytest.raises(ConfigError):
        ConfigLoader().load(path)


def test_invalid_path_type_raises_configerror():
    with pytest.raises(ConfigError) as e:
        ConfigLoader().load("config.yaml")  # type: ignore[arg-type]

    assert "expected pathlib.Path" in str(e.value)


def test_yaml_parsing_error_raises_configerror(tmp_path: Path):
    # --- Arrange ---
    path = tmp_path / "config.yaml"
    path.write_text("ignored_resources: [free, lunch\n", encoding="utf-8")

    # --- Act / Assert ---
    with pytest.raises(ConfigError) as e:
        ConfigLoader().load(path)

    assert "YAML parsing failed" in str(e.value)


def test_unable_to_read_file_raises_configerror(monkeypatch, tmp_path: Path):
    """
    @brief
    Simulates OSError when opening file.
    """
    # --- Arrange ---
    path = tmp_path / "config.yaml"
    path.write_text("time_format: 12h", encoding="utf-8")

    def fake_open(*args, **kwargs):
        raise OSError("Permission denied")

    monkeypatch.setattr(Path, "open", fake_open)

    # --- Act / Assert ---
    with pytest.raises(ConfigError) as e:
        ConfigLoader()._read_yaml(path)

    msg = str(e.value)
    assert "Unable to read configuration file" in msg
    assert "Permission denied" in msg


def test_yaml_root_not_mapping_raises_configerror(tmp_path: Path):
    # --- Arrange ---
    path = tmp_path / "config.yaml"
    path.write_text("- free\n- lunch\n", encoding="utf-8")

    # --- Act / Assert ---
    with pytest.raises(ConfigError) as e:
        ConfigLoader()._read_yaml(path)

    assert "Configuration root must be a mapping" in str(e.value)


def test_repository_config_matches_defaults():
    """
    @brief
    The shipped config/config.yaml loads and mirrors the built-in defaults.
    """
    # --- Arrange ---
    path = Path(__file__).resolve().parents[2] / "config" / "config.yaml"

    # --- Act ---
    cfg = ConfigLoader().load(path)

    # --- Assert ---
    assert cfg == Config()


@pytest.mark.parametrize(
    ("list_name", "keywords", "expected"),
    [
        ("ignored_activities", ["lunch", "  "], "ignored_activities contains a blank keyword"),
        ("required_activities", ["Lunch", "lunch "], "required_activities lists 'lunch '"),
        ("ignored_resources", ["Free", "Bus", "FREE"], "ignored_resources lists 'FREE'"),
    ],
)
def test_unusable_rule_keywords_raise_configerror(
    tmp_path: Path, list_name: str, keywords: list[str], expected: str
):
    """
    @brief
    A blank keyword would match every activity; a repeated one is a slip.
    """
    # --- Arrange ---
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({list_name: keywords}), encoding="utf-8")

    # --- Act ---
    with pytest.raises(ConfigError) as e:
        ConfigLoader().load(path)

    # --- Assert ---
    assert expected in str(e.value)
    assert e.value.source == "ConfigLoader._check_rule_lists"
