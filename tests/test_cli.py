"""
End-to-end tests for the parse_asd command line.
"""

import pytest

import parse_asd
from divelogs import from_xml

from builders import make_header, make_record

BLOCK = bytes([0xFA, 0x00, 0x32, 0xE8, 0xC2, 0x7F, 0xFB, 6, 32, 32, 0, 0, 0])


@pytest.fixture
def no_config(tmp_path):
    return str(tmp_path / "absent.yaml")


@pytest.fixture
def logbook_file(tmp_path):
    path = tmp_path / "dives.asd"
    path.write_bytes(
        make_header(name="Logbook 2021")
        + make_record(BLOCK, sequence=1)
        + make_record(BLOCK, sequence=2)
    )
    return str(path)


class TestShow:

    def test_prints_header_and_dives(self, logbook_file, no_config, capsys):
        assert parse_asd.main(["show", logbook_file, "--config", no_config]) == 0
        out = capsys.readouterr().out
        assert "Logbook: Logbook 2021" in out
        assert "=== Dive #1 ===" in out
        assert "=== Dive #2 ===" in out
        assert "Gas: 32% O2, 0% He" in out
        assert "Samples: 5" in out

    def test_scan_command(self, logbook_file, no_config, capsys):
        argv = ["scan", logbook_file, "--config", no_config, "--device-id", "0x04692c61", "--workers", "2"]
        assert parse_asd.main(argv) == 0
        out = capsys.readouterr().out
        assert "Logbook:" not in out
        assert out.count("=== Dive #") == 2

    def test_scan_needs_device_id(self, logbook_file, no_config, capsys):
        assert parse_asd.main(["scan", logbook_file, "--config", no_config]) == 1
        assert "ERROR" in capsys.readouterr().out


class TestExport:

    def test_writes_xml_file(self, logbook_file, no_config, tmp_path, capsys):
        output = tmp_path / "dive.xml"
        argv = ["export", logbook_file, "--config", no_config, "--index", "2",
                "--location", "Murner See", "-o", str(output)]
        assert parse_asd.main(argv) == 0
        data = from_xml(output.read_text(encoding="utf-8"))
        assert data.location == "Murner See"
        assert data.dive_number == 2
        assert len(data.samples) == 5
        assert "Wrote 5 samples" in capsys.readouterr().out

    def test_export_defaults_from_config(self, logbook_file, tmp_path, capsys):
        config = tmp_path / "config.yaml"
        config.write_text("export:\n  site: Turm\n")
        assert parse_asd.main(["export", logbook_file, "--config", str(config)]) == 0
        out = capsys.readouterr().out
        assert "<DIVELOGSDATA>" in out
        assert "<SITE><![CDATA[Turm]]></SITE>" in out

    def test_index_out_of_range(self, logbook_file, no_config, capsys):
        assert parse_asd.main(["export", logbook_file, "--config", no_config, "--index", "3"]) == 1
        assert "out of range" in capsys.readouterr().out


class TestPlot:

    def test_saves_png(self, logbook_file, no_config, tmp_path):
        output = tmp_path / "profile.png"
        assert parse_asd.main(["plot", logbook_file, "--config", no_config, "-o", str(output)]) == 0
        assert output.read_bytes()[:4] == b"\x89PNG"


class TestErrors:

    def test_missing_input(self, tmp_path, no_config, capsys):
        missing = str(tmp_path / "missing.asd")
        assert parse_asd.main(["show", missing, "--config", no_config]) == 1
        assert "ERROR" in capsys.readouterr().out

    def test_truncated_input(self, tmp_path, no_config, capsys):
        path = tmp_path / "short.asd"
        path.write_bytes(make_header() + make_record(BLOCK)[:60])
        assert parse_asd.main(["show", str(path), "--config", no_config]) == 1
        assert "ERROR" in capsys.readouterr().out

    def test_no_command_prints_help(self, capsys):
        assert parse_asd.main([]) == 0
        assert "usage" in capsys.readouterr().out.lower()
