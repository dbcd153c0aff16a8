"""
Persistent user settings.

Settings live in a small JSON document under the per-user config directory
reported by platformdirs. They are loaded once per invocation and handed to
the scanner and organizer explicitly.
"""
import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from platformdirs import user_config_dir

from . import config
from .exceptions import ArgumentError, ConfigError


def normalize_extension(ext: str) -> str:
    return ext.strip().lstrip(".").lower()


def is_safe_category_name(name: str) -> bool:
    """Custom category names become folders under the target: one plain path part only."""
    if name in ("", ".", ".."):
        return False
    if os.path.isabs(name) or "/" in name or os.sep in name:
        return False
    return not (os.altsep and os.altsep in name)


@dataclass
class Settings:
    ignore_patterns: List[str] = field(default_factory=lambda: list(config.DEFAULT_IGNORE_PATTERNS))
    custom_categories: Dict[str, List[str]] = field(default_factory=dict)
    recent_directories: List[str] = field(default_factory=list)
    default_organization: str = config.DEFAULT_SCHEME

    def is_ignored(self, path: Union[str, Path]) -> bool:
        text = str(path)
        return any(pattern in text for pattern in self.ignore_patterns)

    def add_recent_directory(self, directory: Union[str, Path]):
        """Moves `directory` to the front of the recent list, keeping at most 10 entries."""
        entry = str(directory)
        self.recent_directories = [d for d in self.recent_directories if d != entry]
        self.recent_directories.insert(0, entry)
        del self.recent_directories[config.MAX_RECENT_DIRECTORIES:]

    def add_ignore_pattern(self, pattern: str) -> bool:
        if not pattern:
            raise ArgumentError("Ignore pattern must not be empty")
        if pattern in self.ignore_patterns:
            return False
        self.ignore_patterns.append(pattern)
        return True

    def remove_ignore_pattern(self, pattern: str) -> bool:
        if pattern not in self.ignore_patterns:
            return False
        self.ignore_patterns = [p for p in self.ignore_patterns if p != pattern]
        return True

    def add_category(self, spec: str) -> Tuple[str, List[str]]:
        """
        Parses 'NAME:ext1,ext2' and stores it as a custom category.

        Re-adding an existing name replaces its extensions. An extension that
        already belongs to a different custom category is rejected so that
        classification never depends on dict ordering.
        """
        name, sep, ext_part = spec.partition(":")
        name = name.strip()
        if not sep or not name:
            raise ArgumentError(f"Invalid category format '{spec}'. Use 'category:ext1,ext2'")
        if not is_safe_category_name(name):
            raise ArgumentError(f"Invalid category name '{name}': it must be a plain folder name")

        extensions = []
        for raw in ext_part.split(","):
            ext = normalize_extension(raw)
            if ext and ext not in extensions:
                extensions.append(ext)
        if not extensions:
            raise ArgumentError(f"No extensions specified for category '{name}'")

        claimed = self._extension_owners(exclude=name)
        clashes = sorted(ext for ext in extensions if ext in claimed)
        if clashes:
            owners = ", ".join(f".{ext} -> {claimed[ext]}" for ext in clashes)
            raise ArgumentError(f"Extensions already assigned to another category: {owners}")

        self.custom_categories[name] = extensions
        return name, extensions

    def set_default_organization(self, scheme: str):
        if scheme not in config.SCHEMES:
            raise ArgumentError(
                f"Invalid organization method '{scheme}'. Use one of: {', '.join(config.SCHEMES)}"
            )
        self.default_organization = scheme

    def validate(self):
        """Raises ConfigError if the settings cannot be used as-is."""
        if not isinstance(self.ignore_patterns, list) or not all(isinstance(p, str) for p in self.ignore_patterns):
            raise ConfigError("'ignore_patterns' must be a list of strings")
        if not isinstance(self.recent_directories, list) or not all(isinstance(d, str) for d in self.recent_directories):
            raise ConfigError("'recent_directories' must be a list of strings")
        if not isinstance(self.custom_categories, dict):
            raise ConfigError("'custom_categories' must be an object")
        for name, exts in self.custom_categories.items():
            if not is_safe_category_name(name):
                raise ConfigError(f"Invalid custom category name '{name}': it must be a plain folder name")
            if not isinstance(exts, list) or not all(isinstance(e, str) for e in exts):
                raise ConfigError(f"Custom category '{name}' must map to a list of extensions")
        if self.default_organization not in config.SCHEMES:
            raise ConfigError(f"Unknown default organization '{self.default_organization}'")

        seen: Dict[str, str] = {}
        for name, exts in self.custom_categories.items():
            for ext in {normalize_extension(e) for e in exts}:
                if ext in seen and seen[ext] != name:
                    raise ConfigError(
                        f"Extension '.{ext}' is assigned to both '{seen[ext]}' and '{name}'"
                    )
                seen[ext] = name

    def _extension_owners(self, exclude: Optional[str] = None) -> Dict[str, str]:
        owners = {}
        for name, exts in self.custom_categories.items():
            if name == exclude:
                continue
            for ext in exts:
                owners[normalize_extension(ext)] = name
        return owners

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        if not isinstance(data, dict):
            raise ConfigError("Settings file must contain a JSON object")
        defaults = cls()
        settings = cls(
            ignore_patterns=data.get("ignore_patterns", defaults.ignore_patterns),
            custom_categories=data.get("custom_categories", defaults.custom_categories),
            recent_directories=data.get("recent_directories", defaults.recent_directories),
            default_organization=data.get("default_organization", defaults.default_organization),
        )
        settings.validate()
        del settings.recent_directories[config.MAX_RECENT_DIRECTORIES:]
        return settings


def default_config_path() -> Path:
    override = os.environ.get(config.CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path(user_config_dir(config.APP_NAME)) / config.CONFIG_FILE_NAME


class SettingsStore:
    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else default_config_path()

    def load(self) -> Settings:
        """
        Reads the settings file, writing defaults first if it does not exist.
        Any read or parse failure is fatal: there is no partial fallback.
        """
        if not self.path.exists():
            logging.info(f"No settings found, writing defaults to {self.path}")
            settings = Settings()
            self.save(settings)
            return settings

        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ConfigError(f"Malformed settings file {self.path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Cannot read settings file {self.path}: {e}") from e

        logging.debug(f"Loaded settings from {self.path}")
        return Settings.from_dict(data)

    def save(self, settings: Settings):
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as f:
                json.dump(settings.to_dict(), f, indent=2)
                f.write("\n")
        except OSError as e:
            raise ConfigError(f"Cannot write settings file {self.path}: {e}") from e
