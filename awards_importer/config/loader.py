"""Configuration loading helpers for the awards importer."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import yaml

from .models import CeremonyProfile, ImporterConfig

CONFIG_EXTENSIONS = (".yaml", ".yml", ".json")
CONFIG_FILENAME = "importer.yaml"
PROFILE_SUFFIX = ".yaml"
HOME_ENV = "AWARDS_IMPORTER_HOME"
BUILTIN_PROFILES_DIR = Path(__file__).resolve().parent / "profiles"


def _slugify(name: str) -> str:
    return "".join(ch.lower() if ch.isalnum() else "-" for ch in name).strip("-")


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def _write_file(path: Path, payload: dict) -> None:
    with path.open("w", encoding="utf-8") as stream:
        if path.suffix in (".yaml", ".yml"):
            yaml.safe_dump(payload, stream, allow_unicode=True, sort_keys=False)
        else:
            json.dump(payload, stream, indent=2, ensure_ascii=False)


@dataclass(slots=True)
class ConfigLocator:
    """Resolve important paths from project root."""

    project_root: Path | None = None
    data_dir: Path | None = None
    profiles_dir: Path | None = None
    logs_dir: Path | None = None

    def __post_init__(self) -> None:
        env_root = os.environ.get(HOME_ENV)
        if env_root:
            root = Path(env_root).expanduser().resolve()
        else:
            root = (self.project_root or Path(__file__).resolve().parents[2]).resolve()
        self.project_root = root
        self.data_dir = (root / "data").resolve()
        self.profiles_dir = (self.data_dir / "ceremonies").resolve()
        self.logs_dir = (root / "logs").resolve()
        self.ensure_directories()

    def ensure_directories(self) -> None:
        for directory in (self.data_dir, self.profiles_dir, self.logs_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def config_path(self) -> Path:
        return self.data_dir / CONFIG_FILENAME


class ConfigRepository:
    """Repository encapsulating config IO and schema validation."""

    def __init__(self, locator: ConfigLocator | None = None) -> None:
        self.locator = locator or ConfigLocator()
        self._config_cache: ImporterConfig | None = None

    # ------------------------------------------------------------------
    # Importer configuration
    # ------------------------------------------------------------------
    def load_config(self) -> ImporterConfig:
        if self._config_cache is not None:
            return self._config_cache
        path = self.locator.config_path()
        if path.exists():
            config = ImporterConfig.model_validate(_read_file(path))
        else:
            config = ImporterConfig()
            self.save_config(config)
        self._config_cache = config
        return config

    def save_config(self, config: ImporterConfig) -> None:
        _write_file(self.locator.config_path(), config.model_dump(mode="json"))
        self._config_cache = config

    def database_path(self) -> Path:
        return self.load_config().resolved_database_path(self.locator.project_root)

    # ------------------------------------------------------------------
    # Ceremony profiles
    # ------------------------------------------------------------------
    def profile_path(self, name: str) -> Path:
        return self.locator.profiles_dir / f"{_slugify(name)}{PROFILE_SUFFIX}"

    def list_profile_files(self) -> Iterable[Path]:
        seen: set[str] = set()
        for directory in (self.locator.profiles_dir, BUILTIN_PROFILES_DIR):
            if not directory.exists():
                continue
            for path in sorted(directory.glob("*")):
                if path.is_file() and path.suffix in CONFIG_EXTENSIONS and path.stem not in seen:
                    seen.add(path.stem)
                    yield path

    def list_profiles(self) -> list[CeremonyProfile]:
        return [CeremonyProfile.model_validate(_read_file(path)) for path in self.list_profile_files()]

    def load_profile(self, name: str) -> CeremonyProfile:
        """Load a profile from the data directory, falling back to built-ins."""

        for path in (self.profile_path(name), BUILTIN_PROFILES_DIR / f"{_slugify(name)}{PROFILE_SUFFIX}"):
            if path.exists():
                return CeremonyProfile.model_validate(_read_file(path))
        raise FileNotFoundError(f"Ceremony profile not found: {name}")

    def save_profile(self, profile: CeremonyProfile) -> Path:
        path = self.profile_path(profile.name)
        _write_file(path, profile.model_dump(mode="json"))
        return path

    def delete_profile(self, name: str) -> None:
        path = self.profile_path(name)
        if path.exists():
            path.unlink()


__all__ = ["BUILTIN_PROFILES_DIR", "CONFIG_EXTENSIONS", "ConfigLocator", "ConfigRepository", "HOME_ENV"]
