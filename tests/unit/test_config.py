"""Unit tests for configuration."""

from pathlib import Path

import pytest

from procfilter.config import Config, load_config, save_config
from procfilter.exceptions import ConfigParseError, ConfigValidationError


def test_default_config() -> None:
    """Test that default config has sensible values."""
    config = Config()
    assert config.colored_output is True
    assert config.ignore_case is True
    assert config.whole_word is False
    assert config.use_regex is False
    assert config.sort == "-cpu"


def test_load_missing_config(temp_dir: Path) -> None:
    """Test loading when config file doesn't exist."""
    config_path = temp_dir / "nonexistent.toml"
    config, warnings = load_config(config_path)

    assert config is not None
    assert config.config_path is None
    assert any("No config file found" in w for w in warnings)


def test_load_valid_config(sample_config: Path) -> None:
    """Test loading a valid config file."""
    config, warnings = load_config(sample_config)

    assert warnings == []
    assert config.whole_word is True
    assert config.ignore_case is False
    assert config.colored_output is False
    assert config.sort == "pid"
    assert config.columns == "pid,name,cpu"
    assert config.interval == 0.0
    assert config.config_path == sample_config.resolve()


def test_partial_config_keeps_defaults(temp_dir: Path) -> None:
    config_path = temp_dir / "partial.toml"
    config_path.write_text("[search]\nuse_regex = true\n")

    config, _ = load_config(config_path)

    assert config.use_regex is True
    assert config.ignore_case is True
    assert config.columns == Config().columns


def test_load_invalid_toml(temp_dir: Path) -> None:
    """Test loading invalid TOML raises error."""
    config_path = temp_dir / "invalid.toml"
    config_path.write_text("this is not valid [ toml")

    with pytest.raises(ConfigParseError):
        load_config(config_path)


@pytest.mark.parametrize(
    ("content", "key"),
    [
        ('[search]\nwhole_word = "yes"\n', "search.whole_word"),
        ("[display]\nsort = 3\n", "display.sort"),
        ('[sampling]\ninterval = "fast"\n', "sampling.interval"),
        ("[sampling]\ninterval = true\n", "sampling.interval"),
    ],
)
def test_config_validation_invalid_type(temp_dir: Path, content: str, key: str) -> None:
    """Test that invalid types raise validation error."""
    config_path = temp_dir / "bad_types.toml"
    config_path.write_text(content)

    with pytest.raises(ConfigValidationError) as excinfo:
        load_config(config_path)
    assert excinfo.value.key == key


def test_negative_interval_warns(temp_dir: Path) -> None:
    config_path = temp_dir / "negative.toml"
    config_path.write_text("[sampling]\ninterval = -1\n")

    config, warnings = load_config(config_path)

    assert config.interval == 0.0
    assert any("negative" in w for w in warnings)


def test_save_and_reload(temp_dir: Path) -> None:
    config = Config(whole_word=True, use_regex=True, sort="name", interval=1.5)
    config_path = temp_dir / "nested" / "config.toml"

    save_config(config, config_path)
    loaded, warnings = load_config(config_path)

    assert warnings == []
    assert loaded.whole_word is True
    assert loaded.use_regex is True
    assert loaded.sort == "name"
    assert loaded.interval == 1.5
