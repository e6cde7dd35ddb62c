"""Tests for the xdgicon2dci batch converter."""

import os
import stat
import subprocess
import pytest
from unittest.mock import patch
from pathlib import Path

from src.core.hicolor_converter import (
    HicolorConverter, parse_size_dir, file_md5, main, TEMP_DIR_MAIN
)


def fake_dci_tool(cmd, **kwargs):
    """Stands in for dci-icon-theme: one <name>.dci per input icon."""
    source_dir, output_dir = Path(cmd[1]), Path(cmd[3])
    output_dir.mkdir(parents=True, exist_ok=True)
    for icon in sorted(source_dir.rglob("*")):
        if icon.suffix in (".svg", ".png"):
            (output_dir / f"{icon.stem}.dci").write_bytes(icon.read_bytes())
    return subprocess.CompletedProcess(cmd, 0, stdout=None, stderr="")


def write(path: Path, data: bytes):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


@pytest.fixture
def hicolor(tmp_path):
    root = tmp_path / "hicolor"
    write(root / "16x16" / "apps" / "firefox.png", b"PNG firefox")
    write(root / "48x48" / "apps" / "firefox.png", b"PNG firefox")
    write(root / "48x48" / "apps" / "gimp.png", b"PNG gimp")
    write(root / "48x48" / "mimetypes" / "text-plain.png", b"PNG text")
    write(root / "scalable" / "apps" / "firefox.svg", b"<svg>firefox</svg>")
    write(root / "scalable" / "apps" / "inkscape.svg", b"<svg>inkscape</svg>")
    write(root / "symbolic" / "apps" / "inkscape-symbolic.svg", b"<svg>symbolic</svg>")
    return root


@pytest.fixture
def dci_tool(tmp_path):
    tool = tmp_path / "bin" / "dci-icon-theme"
    write(tool, b"#!/bin/sh\n")
    tool.chmod(tool.stat().st_mode | stat.S_IXUSR)
    return tool


@pytest.fixture
def make_converter(tmp_path, hicolor, dci_tool):
    created = []

    def factory():
        converter = HicolorConverter(
            source_dir=hicolor,
            target_dir=tmp_path / "target",
            record_file=tmp_path / "lib" / "xdgicon2dci-record",
            log_file=tmp_path / "log" / "xdgicon2dci.log",
            dci_tool=str(dci_tool),
            temp_root=tmp_path / "tmp",
            show_progress=False,
        )
        created.append(converter)
        return converter

    yield factory
    for converter in created:
        converter.close()


def run_converter(converter):
    assert converter.initialize() is True
    with patch('src.core.hicolor_converter.subprocess.run', side_effect=fake_dci_tool):
        assert converter.run() == 0
    return converter


class TestHelpers:

    @pytest.mark.parametrize("name, expected", [
        ("48x48", "48"),
        ("256x256", "256"),
        ("48x32", None),
        ("0x0", None),
        ("scalable", None),
        ("axa", None),
        ("48x48x48", None),
    ])
    def test_parse_size_dir(self, name, expected):
        assert parse_size_dir(name) == expected

    def test_file_md5_missing_file(self, tmp_path):
        assert file_md5(tmp_path / "missing") == ""

    def test_first_name_is_copied(self, tmp_path):
        copied = set()
        assert HicolorConverter._should_copy_file(tmp_path / "a.png", tmp_path, copied) is True
        assert copied == {"a"}

    def test_svg_replaces_png(self, tmp_path):
        (tmp_path / "a.png").write_bytes(b"png")
        copied = {"a"}

        assert HicolorConverter._should_copy_file(tmp_path / "src" / "a.svg", tmp_path, copied) is True
        assert not (tmp_path / "a.png").exists()

    def test_png_does_not_replace_svg(self, tmp_path):
        (tmp_path / "a.svg").write_text("<svg/>")
        copied = {"a"}

        assert HicolorConverter._should_copy_file(tmp_path / "src" / "a.png", tmp_path, copied) is False
        assert (tmp_path / "a.svg").exists()


class TestHicolorConverter:
    """Test cases for HicolorConverter."""

    def test_initialize_without_tool(self, tmp_path, hicolor):
        converter = HicolorConverter(hicolor, tmp_path / "target", tmp_path / "record",
                                     log_file=None, dci_tool=str(tmp_path / "missing-tool"))
        assert converter.initialize() is False

    def test_initialize_tool_not_executable(self, tmp_path, hicolor):
        tool = tmp_path / "dci-icon-theme"
        tool.write_text("")
        tool.chmod(0o644)
        converter = HicolorConverter(hicolor, tmp_path / "target", tmp_path / "record",
                                     log_file=None, dci_tool=str(tool))
        if os.access(tool, os.X_OK):
            pytest.skip("running with permissions that ignore mode bits")
        assert converter.initialize() is False

    def test_directory_cache(self, make_converter, hicolor):
        converter = make_converter()
        assert converter.initialize() is True

        cache = converter.dir_cache
        assert cache.size_directories == [hicolor / "16x16" / "apps", hicolor / "48x48" / "apps"]
        assert cache.app_directories == [hicolor / "scalable" / "apps", hicolor / "symbolic" / "apps"]
        assert cache.all_icon_names == {"firefox", "gimp", "inkscape", "inkscape-symbolic"}

    def test_convert(self, make_converter, tmp_path):
        converter = run_converter(make_converter())
        target = tmp_path / "target"

        assert sorted(p.name for p in target.iterdir()) == [
            "firefox.dci", "gimp.dci", "inkscape-symbolic.dci", "inkscape.dci",
        ]
        # multi-size build wins over the scalable one
        assert (target / "firefox.dci").read_bytes() == b"PNG firefox"
        assert converter.total_converted == 4
        assert converter.total_failed == 0
        assert not (tmp_path / "tmp" / TEMP_DIR_MAIN).exists()

    def test_record_file(self, make_converter, tmp_path):
        run_converter(make_converter())

        lines = (tmp_path / "lib" / "xdgicon2dci-record").read_text(encoding="utf-8").splitlines()
        assert [line.split("|")[0] for line in lines] == [
            "firefox", "gimp", "inkscape", "inkscape-symbolic",
        ]
        assert lines[0] == f"firefox|{file_md5(tmp_path / 'target' / 'firefox.dci')}"

    def test_second_run_skips_unchanged(self, make_converter):
        run_converter(make_converter())
        converter = run_converter(make_converter())

        assert converter.total_converted == 0
        assert converter.total_skipped == 4

    def test_changed_icon_is_copied_again(self, make_converter, hicolor, tmp_path):
        run_converter(make_converter())
        write(hicolor / "scalable" / "apps" / "inkscape.svg", b"<svg>inkscape v2</svg>")

        converter = run_converter(make_converter())

        assert converter.total_converted == 1
        assert (tmp_path / "target" / "inkscape.dci").read_bytes() == b"<svg>inkscape v2</svg>"

    def test_orphans_removed(self, make_converter, hicolor, tmp_path):
        run_converter(make_converter())
        (hicolor / "scalable" / "apps" / "inkscape.svg").unlink()

        run_converter(make_converter())

        assert not (tmp_path / "target" / "inkscape.dci").exists()
        record = (tmp_path / "lib" / "xdgicon2dci-record").read_text(encoding="utf-8")
        assert "inkscape|" not in record
        assert "inkscape-symbolic|" in record

    def test_failed_conversion_counted(self, make_converter, tmp_path):
        converter = make_converter()
        assert converter.initialize() is True

        def failing(cmd, **kwargs):
            return subprocess.CompletedProcess(cmd, 1, stdout=None, stderr="bad svg")

        with patch('src.core.hicolor_converter.subprocess.run', side_effect=failing):
            assert converter.run() == 0

        # 2 multi-size names + 3 scalable/symbolic svgs
        assert converter.total_failed == 5
        assert converter.total_converted == 0
        assert not (tmp_path / "target" / "firefox.dci").exists()

    def test_log_file_written(self, make_converter, tmp_path):
        converter = run_converter(make_converter())
        converter.close()

        log_text = (tmp_path / "log" / "xdgicon2dci.log").read_text(encoding="utf-8")
        assert "Converted 4, skipped 0, failed 0" in log_text


class TestMain:

    @patch('src.core.hicolor_converter.HicolorConverter._check_dci_tool', return_value=False)
    def test_missing_tool_exit_code(self, mock_check, tmp_path):
        assert main(["-s", str(tmp_path), "-t", str(tmp_path / "target")]) == 1

    @patch('src.core.hicolor_converter.HicolorConverter')
    def test_paths_from_arguments(self, mock_converter_class, tmp_path):
        converter = mock_converter_class.return_value
        converter.initialize.return_value = True
        converter.run.return_value = 0

        assert main(["--source", str(tmp_path / "src"), "--target", str(tmp_path / "dst")]) == 0

        mock_converter_class.assert_called_once_with(str(tmp_path / "src"), str(tmp_path / "dst"))
        converter.close.assert_called_once()

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["--version"])
        assert exc.value.code == 0
        assert "xdgicon2dci" in capsys.readouterr().out
