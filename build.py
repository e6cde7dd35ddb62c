#!/usr/bin/env python3
"""
Build script for deepin-xdgicon-convert.
Usage: python build.py [--onefile]
"""

import sys
import subprocess
import argparse


def build(onefile=False):
    """Build the GUI application with PyInstaller."""
    print("Building deepin-xdgicon-convert...")
    cmd = [
        "pyinstaller", "--noconfirm", "--windowed",
        "--name", "deepin-xdgicon-convert",
        "--add-data", "translations:translations",
    ]
    if onefile:
        cmd.append("--onefile")
    cmd.append("main.py")
    subprocess.run(cmd, check=True)
    print("✓ Build complete")
    print("  Output: dist/deepin-xdgicon-convert" + ("" if onefile else "/"))


def main():
    """Main build function."""
    parser = argparse.ArgumentParser(description="Build deepin-xdgicon-convert")
    parser.add_argument("--onefile", action="store_true", help="Bundle into a single executable")
    args = parser.parse_args()

    print("-" * 50)
    try:
        build(args.onefile)
        print("-" * 50)
        print("✓ Build completed successfully!")
    except subprocess.CalledProcessError as e:
        print(f"✗ Build failed: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n✗ Build interrupted")
        sys.exit(1)


if __name__ == "__main__":
    main()
