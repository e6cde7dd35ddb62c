#!/usr/bin/env python3
"""
Translation file generation script.
Updates the `.ts` catalogs from the sources (lupdate), checks that every
message is translated, and compiles them to `.qm` (lrelease).

Tool discovery: PATH first, then `QT_BIN` when set, then the PySide6 wheel.
"""

import os
import subprocess
import sys
from pathlib import Path

from src.core.config import Config
from src.core.ts_catalog import TranslationCatalog, TsFormatError

LANGUAGES = ["zh_CN"]  # English is the source language


def _which(cmd):
    """Return cmd if it runs."""
    for flag in ("-version", "--version"):
        try:
            res = subprocess.run([cmd, flag], capture_output=True, text=True, timeout=5)
        except (OSError, subprocess.TimeoutExpired):
            continue
        if res.returncode == 0:
            return cmd
    return None


def find_tool(names):
    """Find a Qt linguist tool by trying each name in order."""
    for name in names:
        found = _which(name)
        if found:
            print(f"Found {name} on PATH: {found}")
            return found

    qt_bin = os.environ.get("QT_BIN")
    if qt_bin:
        for name in names:
            found = _which(os.path.join(qt_bin, name))
            if found:
                print(f"Found {name} via QT_BIN: {found}")
                return found

    try:
        import PySide6
        pyside_dir = Path(PySide6.__file__).parent
        for name in names:
            for candidate in (pyside_dir / name, pyside_dir / "Qt" / "libexec" / name):
                found = _which(str(candidate))
                if found:
                    print(f"Found {name} in PySide6: {found}")
                    return found
    except ImportError:
        pass

    return None


def ts_file_for(language):
    return Config.TRANSLATIONS_DIR / f"{Config.APP_NAME}_{language}.ts"


def generate_translation_files():
    """Update translation sources from the Python files."""
    lupdate = find_tool(["pyside6-lupdate", "lupdate"])
    if not lupdate:
        print("Error: lupdate not found. Please install PySide6.")
        return False

    project_root = Path(__file__).parent
    python_files = [str(p) for p in (project_root / "src").rglob("*.py")]
    python_files.append(str(project_root / "main.py"))
    print(f"Found {len(python_files)} Python files")

    Config.TRANSLATIONS_DIR.mkdir(exist_ok=True)
    success = True
    for lang in LANGUAGES:
        ts_file = ts_file_for(lang)
        print(f"Updating translation file for {lang}: {ts_file}")
        cmd = [lupdate, *python_files, "-ts", str(ts_file), "-no-obsolete"]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=60)
        except subprocess.TimeoutExpired:
            print(f"[ERROR] Timeout generating {ts_file}")
            success = False
            continue

        if result.returncode == 0:
            print(f"[OK] Successfully updated {ts_file}")
        else:
            print(f"[ERROR] Failed to update {ts_file}")
            print(f"Error: {result.stderr}")
            success = False
    return success


def check_translations():
    """Report messages that still need a translation."""
    complete = True
    for lang in LANGUAGES:
        ts_file = ts_file_for(lang)
        try:
            catalog = TranslationCatalog.load(ts_file)
        except TsFormatError as e:
            print(f"[ERROR] {e}")
            return False

        problems = catalog.validate()
        if problems:
            complete = False
            print(f"[WARN] {ts_file.name}: {len(problems)} problem(s)")
            for problem in problems:
                print(f"  - {problem}")
        else:
            print(f"[OK] {ts_file.name}: {len(catalog)} messages translated")
    return complete


def compile_translations():
    """Compile .ts files to .qm files."""
    lrelease = find_tool(["pyside6-lrelease", "lrelease"])
    if not lrelease:
        print("Warning: lrelease not found. .ts kept but not compiled to .qm.")
        print("The application falls back to reading the .ts catalog directly.")
        return True

    success = True
    for ts_file in Config.TRANSLATIONS_DIR.glob("*.ts"):
        qm_file = ts_file.with_suffix(".qm")
        print(f"Compiling {ts_file} -> {qm_file}")
        result = subprocess.run([lrelease, str(ts_file), "-qm", str(qm_file)],
                                capture_output=True, text=True, timeout=60)
        if result.returncode == 0 and qm_file.exists():
            print(f"[OK] {qm_file}")
        else:
            print(f"[ERROR] Failed to compile {ts_file}")
            print(result.stdout)
            print(result.stderr)
            success = False
    return success


def main():
    """Main function."""
    print("=== Translation File Generator ===")
    print()

    if "--no-update" not in sys.argv:
        print("Step 1: Updating translation source files (.ts)")
        if not generate_translation_files():
            print("Failed to generate translation files")
            return 1
        print()

    print("Step 2: Checking translations")
    check_translations()
    print()

    print("Step 3: Compiling translation files (.qm)")
    if not compile_translations():
        print("Failed to compile translation files")
        return 1

    print()
    print("=== Translation files generated successfully! ===")
    return 0


if __name__ == "__main__":
    sys.exit(main())
