"""Configuration and settings management."""

import json
import platform
import sys
from pathlib import Path


class Config:
    """Configuration manager for the application."""

    APP_NAME = "deepin-xdgicon-convert"

    # Platform-specific paths
    if platform.system() == "Darwin":  # macOS
        APPDATA_DIR = Path.home() / "Library" / "Application Support" / APP_NAME
    else:  # Linux
        APPDATA_DIR = Path.home() / ".local" / "share" / APP_NAME

    CONFIG_FILE = APPDATA_DIR / "config.json"
    LOGS_DIR = APPDATA_DIR / "logs"

    # Bundled translation catalogs live next to the sources
    TRANSLATIONS_DIR = Path(__file__).resolve().parent.parent.parent / "translations"
    PREFIX_TRANSLATIONS_DIR = Path(sys.prefix) / "share" / APP_NAME / "translations"
    SYSTEM_TRANSLATIONS_DIR = Path("/usr/share") / APP_NAME / "translations"

    # External tools
    DPKG_TOOL = "/usr/bin/dpkg-deb"
    DCI_THEME_TOOL = "/usr/libexec/dtk6/DGui/bin/dci-icon-theme"
    DCI_COMPRESSION_LEVEL = 95

    # Timeouts in seconds
    UNPACK_TIMEOUT = 100
    PACKAGE_TIMEOUT = 100
    CONVERT_TIMEOUT = 60

    # Work directories used while converting a package
    TMP_DIR = Path("/tmp/xdgiconconvert")
    UNPACK_DIR = TMP_DIR / "deb_unpack"
    XDG_ICON_DIR = TMP_DIR / "xdgicon"
    DCI_OUTPUT_SUBDIR = Path("usr") / "share" / "dsg" / "icons"
    ICON_THEMES_SUBDIR = Path("usr") / "share" / "icons"

    # Theme entries that are not icons and must not be converted
    CONVERT_EXCLUDES = ("cursors", "cursors.theme")

    DEFAULT_CONFIG = {
        "version": "1.0.0",
        "language": "",
        "last_output_dir": "",
    }

    @classmethod
    def ensure_directories(cls):
        """Create necessary directories if they don't exist."""
        cls.APPDATA_DIR.mkdir(parents=True, exist_ok=True)
        cls.LOGS_DIR.mkdir(parents=True, exist_ok=True)

    @classmethod
    def load_config(cls):
        """Load configuration from file."""
        if cls.CONFIG_FILE.exists():
            with open(cls.CONFIG_FILE, 'r', encoding='utf-8') as f:
                config = json.load(f)
                # Merge with defaults
                for key, value in cls.DEFAULT_CONFIG.items():
                    if key not in config:
                        config[key] = value
                return config
        return cls.DEFAULT_CONFIG.copy()

    @classmethod
    def save_config(cls, config):
        """Save configuration to file."""
        cls.APPDATA_DIR.mkdir(parents=True, exist_ok=True)
        with open(cls.CONFIG_FILE, 'w', encoding='utf-8') as f:
            json.dump(config, f, indent=2, ensure_ascii=False)

    @classmethod
    def update_config(cls, **values):
        """Merge values into the saved configuration."""
        config = cls.load_config()
        config.update(values)
        cls.save_config(config)
        return config

    @classmethod
    def get_translations_dirs(cls):
        """Directories searched for translation catalogs, in order."""
        return [cls.TRANSLATIONS_DIR, cls.PREFIX_TRANSLATIONS_DIR, cls.SYSTEM_TRANSLATIONS_DIR]

