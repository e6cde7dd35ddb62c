#!/usr/bin/env python3
"""
xdgicon2dci: converts the hicolor theme's application icons to DCI.

Multi-size icons (``NxN/apps``) are converted together so one DCI file holds
every size; single-size icons (``scalable/apps``, ``symbolic/apps``, ...) are
converted per directory. An md5 record of the installed DCI files avoids
re-copying unchanged icons and lets orphaned DCI files be removed.
"""

import argparse
import hashlib
import os
import shutil
import subprocess
import sys
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Set

from tqdm import tqdm

from .config import Config
from .logger import setup_logger, add_file_handler
from .version import get_version

logger = setup_logger("xdgicon2dci")

DEFAULT_SOURCE_DIR = "/usr/share/icons/hicolor"
DEFAULT_TARGET_DIR = "/usr/share/dsg/icons/convert"
DEFAULT_RECORD_FILE = "/var/lib/deepin-desktop-theme/xdgicon2dci-record"
DEFAULT_LOG_FILE = "/var/log/xdgicon2dci.log"

TEMP_DIR_MAIN = "xdgicon2dci-temp"
TEMP_DIR_MULTISIZE = "xdgicon2dci-temp-multisize"
TEMP_DIR_SINGLESIZE = "xdgicon2dci-temp-singlesize"

SUPPORTED_CONTEXTS = ("apps",)
ICON_EXTENSIONS = (".svg", ".png")

# Where a converted icon is taken from when several builds exist, best first
ICON_PRIORITIES = (
    "multisize",
    "singlesize/scalable/apps",
    "singlesize/symbolic/apps",
    "singlesize/apps",
)


@dataclass
class ConvertTask:
    source_file: Path
    relative_path: str


@dataclass
class MultiSizeConvertTask:
    icon_name: str
    source_files: List[Path] = field(default_factory=list)
    sizes: List[str] = field(default_factory=list)


@dataclass
class DirectoryCache:
    size_directories: List[Path] = field(default_factory=list)   # 16x16/apps, 24x24/apps
    app_directories: List[Path] = field(default_factory=list)    # scalable/apps, symbolic/apps
    icon_files_by_dir: Dict[Path, List[Path]] = field(default_factory=dict)
    all_icon_names: Set[str] = field(default_factory=set)
    is_initialized: bool = False


def parse_size_dir(name: str) -> Optional[str]:
    """'48x48' -> '48'; None for anything that is not a square size."""
    parts = name.split("x")
    if len(parts) != 2 or parts[0] != parts[1]:
        return None
    try:
        if int(parts[0]) > 0:
            return parts[0]
    except ValueError:
        pass
    return None


def file_md5(path) -> str:
    digest = hashlib.md5()
    try:
        with open(path, 'rb') as f:
            for chunk in iter(lambda: f.read(65536), b''):
                digest.update(chunk)
    except OSError:
        return ""
    return digest.hexdigest()


class HicolorConverter:
    """Batch converter from an XDG icon directory to a flat DCI directory."""

    def __init__(self, source_dir=DEFAULT_SOURCE_DIR, target_dir=DEFAULT_TARGET_DIR,
                 record_file=DEFAULT_RECORD_FILE, log_file=DEFAULT_LOG_FILE,
                 dci_tool=Config.DCI_THEME_TOOL, temp_root=None, show_progress=True):
        self.source_dir = Path(source_dir)
        self.target_dir = Path(target_dir)
        self.record_file = Path(record_file)
        self.log_file = Path(log_file) if log_file else None
        self.dci_tool = dci_tool
        self.temp_root = Path(temp_root) if temp_root else Path(tempfile.gettempdir())
        self.show_progress = show_progress

        self.total_converted = 0
        self.total_skipped = 0
        self.total_failed = 0

        self.record_cache: Dict[str, str] = {}
        self.record_cache_loaded = False
        self.record_cache_modified = False

        self.dir_cache = DirectoryCache()
        self._log_handler = None

    def set_source_dir(self, source_dir):
        self.source_dir = Path(source_dir)

    def set_target_dir(self, target_dir):
        self.target_dir = Path(target_dir)

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------
    def initialize(self) -> bool:
        if not self._check_dci_tool():
            return False

        if not self._create_directories():
            return False

        if self.log_file is not None and self._log_handler is None:
            self._log_handler = add_file_handler(logger, self.log_file)
            if self._log_handler is None:
                return False

        self._initialize_directory_cache()
        self._load_record_cache()
        return True

    def close(self):
        if self._log_handler is not None:
            logger.removeHandler(self._log_handler)
            self._log_handler.close()
            self._log_handler = None

    def _check_dci_tool(self) -> bool:
        tool = Path(self.dci_tool)
        if not tool.exists():
            logger.critical(f"Error: DCI tool not found: {tool}")
            return False
        if not os.access(tool, os.X_OK):
            logger.critical(f"Error: DCI tool not executable: {tool}")
            return False
        return True

    def _create_directories(self) -> bool:
        if not self._ensure_directory_exists(self.target_dir):
            logger.critical(f"Cannot create target directory: {self.target_dir}")
            return False
        if not self._ensure_directory_exists(self.record_file.parent):
            logger.critical(f"Cannot create record file directory: {self.record_file.parent}")
            return False
        if self.log_file is not None and not self._ensure_directory_exists(self.log_file.parent):
            logger.critical(f"Cannot create log file directory: {self.log_file.parent}")
            return False
        return True

    @staticmethod
    def _ensure_directory_exists(dir_path) -> bool:
        try:
            Path(dir_path).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.debug(f"Cannot create directory: {dir_path}: {e}")
            return False
        return True

    def _initialize_directory_cache(self):
        if self.dir_cache.is_initialized:
            return

        self.dir_cache = DirectoryCache()
        entries = sorted(p for p in self.source_dir.iterdir() if p.is_dir()) if self.source_dir.is_dir() else []

        for entry in entries:
            for context in SUPPORTED_CONTEXTS:
                context_dir = entry / context
                if not context_dir.is_dir():
                    continue

                if parse_size_dir(entry.name) is not None:
                    self.dir_cache.size_directories.append(context_dir)
                else:
                    self.dir_cache.app_directories.append(context_dir)

                icon_files = self._get_supported_icon_files(context_dir)
                self.dir_cache.icon_files_by_dir[context_dir] = icon_files
                for icon_file in icon_files:
                    self.dir_cache.all_icon_names.add(icon_file.stem)

        self.dir_cache.is_initialized = True

    @staticmethod
    def _get_supported_icon_files(directory: Path) -> List[Path]:
        if not directory.is_dir():
            return []
        return sorted(
            p for p in directory.iterdir()
            if p.is_file() and p.suffix.lower() in ICON_EXTENSIONS
        )

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------
    def _load_record_cache(self):
        if self.record_cache_loaded:
            return

        try:
            with open(self.record_file, 'r', encoding='utf-8') as f:
                for line in f:
                    parts = line.rstrip("\n").split("|")
                    if len(parts) >= 2:
                        self.record_cache[parts[0]] = parts[1]
        except OSError:
            logger.debug("Record file not found or unreadable, using empty cache")

        self.record_cache_loaded = True
        self.record_cache_modified = False

    def _flush_record_cache(self):
        if not self.record_cache_loaded or not self.record_cache_modified:
            return

        try:
            with open(self.record_file, 'w', encoding='utf-8') as f:
                for icon_name in sorted(self.record_cache):
                    f.write(f"{icon_name}|{self.record_cache[icon_name]}\n")
        except OSError as e:
            logger.debug(f"Warning: Cannot write record file: {self.record_file}: {e}")
            return

        self.record_cache_modified = False

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------
    @staticmethod
    def _should_copy_file(source_file: Path, dest_dir: Path, copied_names: Set[str]) -> bool:
        """One icon per name in a directory; SVG replaces PNG/JPG, never the reverse."""
        base_name = source_file.stem
        extension = source_file.suffix.lower()

        if base_name not in copied_names:
            copied_names.add(base_name)
            return True

        svg_file = dest_dir / f"{base_name}.svg"
        if extension == ".svg":
            existing = [dest_dir / f"{base_name}{ext}" for ext in (".png", ".jpg", ".jpeg")]
            existing = [p for p in existing if p.exists()]
            if existing:
                for path in existing:
                    path.unlink()
                return True
            return not svg_file.exists()

        return not svg_file.exists()

    def _run_dci_tool(self, source_dir: Path, output_dir: Path):
        cmd = [self.dci_tool, str(source_dir), "-o", str(output_dir),
               "-O", f"3={Config.DCI_COMPRESSION_LEVEL}"]
        return subprocess.run(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.PIPE, text=True)

    def scan_and_convert(self):
        multi_size_tasks: Dict[str, MultiSizeConvertTask] = {}

        for size_dir in self.dir_cache.size_directories:
            size = parse_size_dir(size_dir.parent.name)
            for source_file in self.dir_cache.icon_files_by_dir.get(size_dir, []):
                task = multi_size_tasks.setdefault(source_file.stem, MultiSizeConvertTask(source_file.stem))
                task.source_files.append(source_file)
                task.sizes.append(size)

        main_temp_dir = self.temp_root / TEMP_DIR_MAIN
        multi_size_temp_dir = main_temp_dir / "multisize"
        single_size_temp_dir = main_temp_dir / "singlesize"
        self._ensure_directory_exists(multi_size_temp_dir)
        self._ensure_directory_exists(single_size_temp_dir)

        if multi_size_tasks:
            self._convert_multi_size_icon_batch(list(multi_size_tasks.values()), multi_size_temp_dir)

        single_size_tasks = []
        for app_dir in self.dir_cache.app_directories:
            for source_file in self.dir_cache.icon_files_by_dir.get(app_dir, []):
                relative_path = source_file.relative_to(self.source_dir).as_posix()
                single_size_tasks.append(ConvertTask(source_file, relative_path))

        if single_size_tasks:
            self._convert_single_size_icon_batch(single_size_tasks, single_size_temp_dir)

        self._copy_all_dci_files(main_temp_dir)

        shutil.rmtree(main_temp_dir, ignore_errors=True)

    def _convert_multi_size_icon_batch(self, tasks: List[MultiSizeConvertTask], output_dir: Path):
        if not tasks:
            return

        temp_dir = self.temp_root / TEMP_DIR_MULTISIZE
        self._ensure_directory_exists(temp_dir)

        copied_by_dir: Dict[Path, Set[str]] = {}
        # Layout expected by the DCI tool: 16/ 24/ 32/ ... 256/
        for task in tasks:
            for source_file, size in zip(task.source_files, task.sizes):
                size_dir = temp_dir / size
                if size_dir not in copied_by_dir:
                    self._ensure_directory_exists(size_dir)
                    copied_by_dir[size_dir] = set()

                if not self._should_copy_file(source_file, size_dir, copied_by_dir[size_dir]):
                    continue

                dest_file = size_dir / source_file.name
                try:
                    shutil.copyfile(source_file, dest_file)
                except OSError as e:
                    logger.debug(f"Copy failed: {source_file} -> {dest_file}: {e}")

        if output_dir.exists():
            shutil.rmtree(output_dir)

        result = self._run_dci_tool(temp_dir, output_dir)
        if result.returncode != 0:
            logger.debug(f"Multisize convert failed: {result.stderr}")
            self.total_failed += len(tasks)

        shutil.rmtree(temp_dir, ignore_errors=True)

    def _convert_single_size_icon_batch(self, tasks: List[ConvertTask], output_dir: Path):
        if not tasks:
            return

        temp_source_dir = self.temp_root / TEMP_DIR_SINGLESIZE
        self._ensure_directory_exists(temp_source_dir)

        copied_by_dir: Dict[Path, Set[str]] = {}
        for task in tasks:
            target_dir = temp_source_dir / Path(task.relative_path).parent
            if target_dir not in copied_by_dir:
                self._ensure_directory_exists(target_dir)
                copied_by_dir[target_dir] = set()

            if not self._should_copy_file(task.source_file, target_dir, copied_by_dir[target_dir]):
                continue

            dest_file = target_dir / task.source_file.name
            try:
                shutil.copyfile(task.source_file, dest_file)
            except OSError as e:
                logger.debug(f"Copy failed: {task.source_file} -> {dest_file}: {e}")

        if output_dir.exists():
            shutil.rmtree(output_dir)

        converted_count = 0
        failed_count = 0
        sub_dirs = sorted(p for p in temp_source_dir.rglob("*") if p.is_dir())
        for sub_dir in tqdm(sub_dirs, desc="Converting", unit="dir", disable=not self.show_progress):
            svg_files = list(sub_dir.glob("*.svg"))
            if not svg_files:
                continue

            relative_dir = sub_dir.relative_to(temp_source_dir)
            result = self._run_dci_tool(sub_dir, output_dir / relative_dir)
            if result.returncode == 0:
                converted_count += len(svg_files)
            else:
                logger.debug(f"Convert failed: {relative_dir.as_posix()} - {result.stderr}")
                failed_count += len(svg_files)

        self.total_failed += failed_count
        shutil.rmtree(temp_source_dir, ignore_errors=True)

    def _copy_all_dci_files(self, temp_dir: Path):
        copied_count = 0
        skipped_count = 0
        total_found = 0
        processed_icons: Set[str] = set()

        for priority in ICON_PRIORITIES:
            priority_dir = temp_dir / priority
            if not priority_dir.is_dir():
                continue

            for source_path in sorted(priority_dir.rglob("*.dci")):
                if not source_path.is_file():
                    continue
                icon_name = source_path.stem
                total_found += 1

                if icon_name in processed_icons:
                    continue

                target_path = self.target_dir / source_path.name
                new_hash = file_md5(source_path)

                if target_path.exists() and self.record_cache.get(icon_name) == new_hash:
                    skipped_count += 1
                    self.total_skipped += 1
                else:
                    try:
                        if target_path.exists():
                            target_path.unlink()
                        shutil.copyfile(source_path, target_path)
                    except OSError as e:
                        logger.debug(f"Copy failed: {source_path} -> {target_path}: {e}")
                        self.total_failed += 1
                    else:
                        copied_count += 1
                        self.record_cache[icon_name] = new_hash
                        self.record_cache_modified = True
                        self.total_converted += 1
                processed_icons.add(icon_name)

        logger.debug(f"Copy stats: found {total_found}, copied {copied_count}, skipped {skipped_count}")

    def cleanup_orphaned_dci(self):
        cleaned_count = 0
        to_remove = [name for name in self.record_cache if name not in self.dir_cache.all_icon_names]

        for icon_name in to_remove:
            target_file = self.target_dir / f"{icon_name}.dci"
            if target_file.exists():
                try:
                    target_file.unlink()
                    cleaned_count += 1
                except OSError as e:
                    logger.debug(f"Cannot remove {target_file}: {e}")
            del self.record_cache[icon_name]
            self.record_cache_modified = True

        if cleaned_count > 0:
            logger.info(f"Cleaned {cleaned_count} orphaned files")

    def run(self) -> int:
        self.scan_and_convert()
        self.cleanup_orphaned_dci()
        self._flush_record_cache()
        logger.info(
            f"Converted {self.total_converted}, skipped {self.total_skipped}, failed {self.total_failed}"
        )
        return 0


def main(argv=None):
    """Entry point for the xdgicon2dci command."""
    version, _ = get_version()
    parser = argparse.ArgumentParser(prog="xdgicon2dci", description="Convert hicolor app icons to DCI")
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {version}")
    parser.add_argument("-s", "--source", metavar="path", default=DEFAULT_SOURCE_DIR, help="src path")
    parser.add_argument("-t", "--target", metavar="path", default=DEFAULT_TARGET_DIR, help="target path")
    args = parser.parse_args(argv)

    converter = HicolorConverter(args.source, args.target)
    try:
        if not converter.initialize():
            return 1
        return converter.run()
    finally:
        converter.close()


if __name__ == "__main__":
    sys.exit(main())
