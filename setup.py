"""Setup script for deepin-xdgicon-convert."""

from setuptools import setup, find_namespace_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="deepin-xdgicon-convert",
    version="1.0.0",
    author="deepin",
    description="Convert XDG icon theme packages to DCI icon theme packages",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_namespace_packages(include=["src", "src.*"]),
    py_modules=["main"],
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: GNU General Public License v3 or later (GPLv3+)",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Topic :: Desktop Environment",
    ],
    python_requires=">=3.11",
    install_requires=[
        "PySide6>=6.5.0",
        "tqdm>=4.66.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-mock>=3.11.0",
            "pyinstaller>=6.0.0",
        ],
    },
    entry_points={
        "gui_scripts": [
            "deepin-xdgicon-convert=main:main",
        ],
        "console_scripts": [
            "xdgicon2dci=src.core.hicolor_converter:main",
        ],
    },
    data_files=[
        ("share/deepin-xdgicon-convert/translations",
         ["translations/deepin-xdgicon-convert_zh_CN.ts"]),
    ],
)
