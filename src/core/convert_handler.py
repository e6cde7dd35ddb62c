"""Icon theme package verification and XDG icon to DCI conversion."""

import hashlib
import re
import shutil
import subprocess
import time
from pathlib import Path
from typing import Iterable, List, Optional

from PySide6.QtCore import QObject, Signal, Slot

from .config import Config
from .logger import setup_logger

logger = setup_logger("ConvertHandler")

HICOLOR_THEME = "hicolor"


class ConvertHandler(QObject):
    """Unpacks an icon theme .deb, converts its icons to DCI and repackages it.

    Every public step reports success as a bool; external tool failures are
    logged and never raised to the caller.
    """

    check_finished = Signal(bool)
    convert_finished = Signal(bool)
    convert_progress_changed = Signal(int)

    def __init__(self, work_dir=None, parent=None):
        super().__init__(parent)
        self.work_dir = Path(work_dir) if work_dir else Config.TMP_DIR
        self.unpack_dir = self.work_dir / Config.UNPACK_DIR.name
        self.xdg_icon_dir = self.work_dir / Config.XDG_ICON_DIR.name

    @property
    def icon_themes_dir(self) -> Path:
        return self.unpack_dir / Config.ICON_THEMES_SUBDIR

    def dci_output_dir(self, theme_id: str) -> Path:
        return self.unpack_dir / Config.DCI_OUTPUT_SUBDIR / theme_id

    # ------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------
    @Slot(str)
    def check_deb_valid(self, deb_file_path: str) -> bool:
        """Check that the package unpacks and ships a real icon theme."""
        try:
            ok = self._check_deb_valid(deb_file_path)
        except (OSError, ValueError) as e:
            logger.error(f"check deb failed: {e}")
            ok = False
        self.check_finished.emit(ok)
        return ok

    def _check_deb_valid(self, deb_file_path: str) -> bool:
        if not deb_file_path:
            logger.warning("deb file path is empty")
            return False

        if not Path(deb_file_path).exists():
            logger.warning(f"deb file not exists: {deb_file_path}")
            return False

        if not self.unpack_deb(deb_file_path):
            return False

        if not self.icon_themes_dir.is_dir():
            logger.warning(f"icon dir not exists: {self.icon_themes_dir}")
            return False

        themes = self.list_theme_dirs()
        if not themes:
            logger.warning(f"no theme dir found in: {self.icon_themes_dir}")
            return False
        if [theme.name for theme in themes] == [HICOLOR_THEME]:
            logger.warning("only hicolor theme found, invalid icon theme package")
            return False

        return True

    @Slot(str, str)
    def xdg_icon_to_dci_deb(self, deb_file_path: str, out_dir: str) -> bool:
        """Convert the package's XDG icons to DCI and build a new package in out_dir."""
        try:
            ok = self._xdg_icon_to_dci_deb(deb_file_path, out_dir)
        except (OSError, ValueError) as e:
            logger.error(f"convert deb failed: {e}")
            ok = False
        self.convert_finished.emit(ok)
        return ok

    def _xdg_icon_to_dci_deb(self, deb_file_path: str, out_dir: str) -> bool:
        self.convert_progress_changed.emit(0)

        if not deb_file_path:
            logger.warning("deb file path is empty")
            return False

        if not self.unpack_dir.exists():
            logger.info("unpack dir not exists, unpacking first")
            if not self.unpack_deb(deb_file_path):
                return False
        self.convert_progress_changed.emit(20)

        theme_dir = self.select_theme_dir()
        if theme_dir is None:
            logger.warning(f"no theme dir found in: {self.icon_themes_dir}")
            return False
        theme_id = theme_dir.name
        logger.info(f"theme ID: {theme_id}")

        self.ensure_convert_xdg_icon_dir(theme_dir, self.xdg_icon_dir)
        self.convert_progress_changed.emit(30)

        if not self.do_convert(self.xdg_icon_dir, self.dci_output_dir(theme_id)):
            return False
        self.convert_progress_changed.emit(60)

        if not self.prepare_deb_dir(self.unpack_dir):
            return False
        self.convert_progress_changed.emit(80)

        if not self.do_package_deb(self.unpack_dir, out_dir):
            return False
        self.convert_progress_changed.emit(100)

        return True

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------
    def list_theme_dirs(self) -> List[Path]:
        if not self.icon_themes_dir.is_dir():
            return []
        return sorted(p for p in self.icon_themes_dir.iterdir() if p.is_dir())

    def select_theme_dir(self) -> Optional[Path]:
        """First theme directory, preferring anything over hicolor."""
        themes = self.list_theme_dirs()
        if not themes:
            return None
        if len(themes) > 1:
            logger.warning(f"multiple theme dirs found: {[t.name for t in themes]}")
        for theme in themes:
            if theme.name != HICOLOR_THEME:
                return theme
        return themes[0]

    def unpack_deb(self, deb_file_path: str) -> bool:
        logger.info(f"unpack deb: {deb_file_path}")

        if self.unpack_dir.exists():
            shutil.rmtree(self.unpack_dir)
        self.unpack_dir.mkdir(parents=True)

        if self._run_tool([Config.DPKG_TOOL, "-R", str(deb_file_path), str(self.unpack_dir)],
                          Config.UNPACK_TIMEOUT, "unpack deb"):
            logger.info("unpack deb success")
            return True
        return False

    def prepare_deb_dir(self, src_deb_unpack_dir) -> bool:
        """Bump the package version and regenerate DEBIAN/md5sums."""
        src_deb_unpack_dir = Path(src_deb_unpack_dir)
        logger.info(f"prepare deb dir: {src_deb_unpack_dir}")

        control_file = src_deb_unpack_dir / "DEBIAN" / "control"
        md5sums_file = src_deb_unpack_dir / "DEBIAN" / "md5sums"

        if not control_file.exists():
            logger.warning(f"control file not exists: {control_file}")
            return False

        try:
            with open(control_file, 'r', encoding='utf-8', errors='surrogateescape', newline='') as f:
                control_lines = f.readlines()
        except OSError as e:
            logger.warning(f"failed to open control file for reading: {e}")
            return False

        version_updated = False
        for i, line in enumerate(control_lines):
            # Keep every other line untouched
            if line.startswith("Version:"):
                version_part = line[len("Version:"):].strip()
                new_version = self.increment_version(version_part)
                control_lines[i] = f"Version: {new_version}\n"
                version_updated = True
                logger.info(f"bump version: {version_part} -> {new_version}")

        try:
            with open(control_file, 'w', encoding='utf-8', errors='surrogateescape', newline='') as f:
                f.writelines(control_lines)
        except OSError as e:
            logger.warning(f"failed to open control file for writing: {e}")
            return False

        if not version_updated:
            logger.warning("version not found or updated in control file")

        try:
            self.generate_md5sums(src_deb_unpack_dir, md5sums_file)
        except OSError as e:
            logger.warning(f"failed to generate md5sums: {e}")
            return False

        logger.info("prepare deb dir finished")
        return True

    def ensure_convert_xdg_icon_dir(self, xdg_icon_theme_dir, out_dir):
        """Copy the theme to the conversion input dir without cursor entries."""
        xdg_icon_theme_dir = Path(xdg_icon_theme_dir)
        out_dir = Path(out_dir)
        logger.info(f"ensure convert xdg icon dir: {xdg_icon_theme_dir} {out_dir}")

        if not xdg_icon_theme_dir.is_dir():
            logger.warning(f"source directory not exists: {xdg_icon_theme_dir}")
            return

        if out_dir.exists():
            shutil.rmtree(out_dir)
        self.copy_directory_contents(xdg_icon_theme_dir, out_dir, Config.CONVERT_EXCLUDES)
        logger.info("copy directory finished")

    def do_convert(self, xdg_icon_dir, out_dir) -> bool:
        logger.info(f"convert xdg icon to dci: {xdg_icon_dir} {out_dir}")
        start = time.monotonic()
        cmd = [
            Config.DCI_THEME_TOOL,
            str(xdg_icon_dir),
            "-o", str(out_dir),
            "-O", f"3={Config.DCI_COMPRESSION_LEVEL}",
        ]
        if not self._run_tool(cmd, Config.CONVERT_TIMEOUT, "convert xdg icon to dci"):
            return False
        logger.info(f"convert finished, elapsed time: {int((time.monotonic() - start) * 1000)} ms")
        return True

    def do_package_deb(self, deb_dir, out_dir) -> bool:
        logger.info(f"package deb: {deb_dir} {out_dir}")
        if self._run_tool([Config.DPKG_TOOL, "-Zxz", "-b", str(deb_dir), str(out_dir)],
                          Config.PACKAGE_TIMEOUT, "package deb"):
            logger.info("package deb success")
            return True
        return False

    def _run_tool(self, cmd: List[str], timeout: int, what: str) -> bool:
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
        except FileNotFoundError:
            logger.error(f"{what} failed: tool not found: {cmd[0]}")
            return False
        except subprocess.TimeoutExpired:
            logger.error(f"{what} failed: timed out after {timeout}s")
            return False

        if result.returncode != 0:
            logger.warning(f"{what} failed: {result.stderr.strip()}")
            return False
        return True

    # ------------------------------------------------------------------
    # Utils
    # ------------------------------------------------------------------
    @staticmethod
    def increment_version(version: str) -> str:
        """Increment the last number in a Debian version string.

        Leading zeros keep their width: ``1.0-009`` becomes ``1.0-010``.
        """
        if not version.strip():
            return version

        matches = list(re.finditer(r"\d+", version))
        if not matches:
            logger.warning(f"no numeric part found in version: {version}, falling back to original")
            return version

        last = matches[-1]
        num_str = last.group(0)
        new_num = str(int(num_str) + 1)
        if num_str.startswith("0") and len(num_str) > 1:
            new_num = new_num.zfill(len(num_str))
        return version[:last.start()] + new_num + version[last.end():]

    @staticmethod
    def copy_directory_contents(src, dst, exclude_list: Iterable[str] = ()) -> bool:
        src = Path(src)
        dst = Path(dst)
        if not src.is_dir():
            return False

        exclude = set(exclude_list)
        dst.mkdir(parents=True, exist_ok=True)

        for entry in sorted(src.iterdir()):
            if entry.name in exclude:
                logger.info(f"exclude entry: {entry.name}")
                continue
            target = dst / entry.name
            if entry.is_dir():
                if not ConvertHandler.copy_directory_contents(entry, target, exclude):
                    return False
            elif entry.exists():
                if target.exists() or target.is_symlink():
                    target.unlink()
                shutil.copyfile(entry, target)
            else:
                logger.warning(f"skip broken link: {entry}")
        return True

    @staticmethod
    def generate_md5sums(root_dir, md5sums_file):
        """Write ``<md5>  <relative path>`` lines for every regular file outside DEBIAN."""
        root_dir = Path(root_dir)
        with open(md5sums_file, 'w', encoding='utf-8') as out:
            for path in _walk_files(root_dir, root_dir):
                relative_path = path.relative_to(root_dir).as_posix()
                md5_hex = _file_md5(path)
                out.write(f"{md5_hex}  {relative_path}\n")
                logger.debug(f"md5: {md5_hex} {relative_path}")


def _walk_files(root_dir: Path, current_dir: Path):
    for entry in sorted(current_dir.iterdir()):
        if current_dir == root_dir and entry.name == "DEBIAN":
            continue
        if entry.is_symlink():
            continue
        if entry.is_dir():
            yield from _walk_files(root_dir, entry)
        elif entry.is_file():
            yield entry


def _file_md5(path: Path) -> str:
    digest = hashlib.md5()
    with open(path, 'rb') as f:
        for chunk in iter(lambda: f.read(65536), b''):
            digest.update(chunk)
    return digest.hexdigest()
