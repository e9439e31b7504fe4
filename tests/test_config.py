"""
Unit tests for smarttrak/config.py.

Covers defaults, config.yaml sections, CLI overrides and validation.
"""

import pytest

from smarttrak.config import DecoderConfig, load_effective_config, parse_device_id


def _write_config(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text)
    return str(path)


class TestDecoderConfig:
    """Validation of decoder options."""

    def test_defaults(self):
        config = DecoderConfig()
        assert config.variant == "tagged"
        assert config.workers == 1
        assert config.device_id is None

    def test_unknown_variant(self):
        with pytest.raises(ValueError):
            DecoderConfig(variant="binary")

    def test_zero_workers(self):
        with pytest.raises(ValueError):
            DecoderConfig(workers=0)

    def test_device_id_too_wide(self):
        with pytest.raises(ValueError):
            DecoderConfig(device_id=1 << 32)


class TestParseDeviceId:

    @pytest.mark.parametrize("value, expected", [
        ("0x04692c61", 0x04692C61),
        (" 73960545 ", 73960545),
        (0x04692C61, 0x04692C61),
        (None, None),
    ])
    def test_accepted_forms(self, value, expected):
        assert parse_device_id(value) == expected

    def test_garbage(self):
        with pytest.raises(ValueError):
            parse_device_id("device")


class TestLoadEffectiveConfig:
    """Resolution order: defaults, then config.yaml, then CLI."""

    def test_missing_file_uses_defaults(self, tmp_path):
        settings = load_effective_config(config_path=str(tmp_path / "absent.yaml"))
        assert settings["decoder"] == DecoderConfig()
        assert settings["location"] == ""
        assert settings["site"] == ""
        assert settings["source"] == "default"

    def test_reads_decoder_and_export_sections(self, tmp_path):
        path = _write_config(tmp_path, (
            "decoder:\n"
            "  variant: legacy\n"
            "  workers: 4\n"
            "  device_id: '0x04692c61'\n"
            "export:\n"
            "  location: Murner See\n"
            "  site: Turm\n"
        ))
        settings = load_effective_config(config_path=path)
        assert settings["decoder"] == DecoderConfig(variant="legacy", workers=4, device_id=0x04692C61)
        assert settings["location"] == "Murner See"
        assert settings["site"] == "Turm"
        assert settings["config_path"] == path
        assert settings["source"] == "config"

    def test_empty_file(self, tmp_path):
        settings = load_effective_config(config_path=_write_config(tmp_path, ""))
        assert settings["source"] == "default"

    def test_export_only_keeps_default_source(self, tmp_path):
        path = _write_config(tmp_path, "export:\n  site: Turm\n")
        settings = load_effective_config(config_path=path)
        assert settings["site"] == "Turm"
        assert settings["source"] == "default"

    def test_cli_overrides_config(self, tmp_path):
        path = _write_config(tmp_path, "decoder:\n  variant: legacy\n  workers: 4\n")
        settings = load_effective_config(config_path=path, variant="tagged", device_id="0x10")
        assert settings["decoder"].variant == "tagged"
        assert settings["decoder"].workers == 4
        assert settings["decoder"].device_id == 0x10
        assert settings["source"] == "cli"

    def test_invalid_value_in_file(self, tmp_path):
        path = _write_config(tmp_path, "decoder:\n  workers: 0\n")
        with pytest.raises(ValueError):
            load_effective_config(config_path=path)
