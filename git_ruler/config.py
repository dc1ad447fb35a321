"""Configuration loading for git-ruler rule files."""

from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from git_ruler.rules import build_rules
from git_ruler.rules.base import Rule
from git_ruler.scoring import total_available_score

CONFIG_FILENAMES = ("gitrules.json", "gitrules.toml")
RULES_KEY = "rules"
SETUP_FILES_KEY = "setup-files"


@dataclass(slots=True)
class RulerConfig:
    """Rules and first-run setup files resolved from a rules file."""

    rules: list[Rule] = field(default_factory=list)
    setup_files: dict[str, str] = field(default_factory=dict)
    source: str | None = None

    def total_available_score(self) -> float:
        return total_available_score(self.rules)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "rule_count": len(self.rules),
            "rule_kinds": [rule.kind for rule in self.rules],
            "setup_files": sorted(self.setup_files),
            "total_available_score": self.total_available_score(),
        }


def load_config(repo: Path, config_path: Path | None = None) -> RulerConfig:
    """Load rules from an explicit path or the repository's default rules file.

    Relative explicit paths resolve against the repository. Every problem
    (missing file, bad syntax, malformed rule) raises ``ValueError``.
    """
    repo = repo.resolve()
    if config_path is not None:
        resolved = config_path if config_path.is_absolute() else (repo / config_path)
        if not resolved.exists():
            raise ValueError(f"Config file does not exist: {resolved}")
        return _from_loaded(_load_file(resolved), source=str(resolved))

    for filename in CONFIG_FILENAMES:
        resolved = repo / filename
        if resolved.exists():
            return _from_loaded(_load_file(resolved), source=str(resolved))

    joined = ", ".join(CONFIG_FILENAMES)
    raise ValueError(f"No rules file found in {repo} (looked for {joined})")


def _load_file(path: Path) -> Any:
    if path.suffix == ".toml":
        return _load_toml(path)
    return _load_json(path)


def _load_json(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ValueError(f"Could not read configuration from {path}") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"JSON formatting error in {path}: {exc}") from exc


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as file_obj:
            loaded = tomllib.load(file_obj)
    except OSError as exc:
        raise ValueError(f"Could not read configuration from {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in {path}: {exc}") from exc
    return loaded


def _from_loaded(loaded: Any, *, source: str) -> RulerConfig:
    if isinstance(loaded, list):
        raw_rules = _as_table_list(loaded, RULES_KEY)
        setup_files: dict[str, str] = {}
    elif isinstance(loaded, dict):
        raw_rules = _as_table_list(loaded.get(RULES_KEY), RULES_KEY)
        setup_files = _as_str_mapping(loaded.get(SETUP_FILES_KEY), SETUP_FILES_KEY)
    else:
        raise ValueError("Config must be a list of rules or a table with a 'rules' list")

    return RulerConfig(rules=build_rules(raw_rules), setup_files=setup_files, source=source)


def _as_table_list(value: Any, field_name: str) -> list[dict[str, Any]]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{field_name} must be a list of tables")
    output: list[dict[str, Any]] = []
    for item in value:
        if not isinstance(item, dict):
            raise ValueError(f"{field_name} must be a list of tables")
        output.append(item)
    return output


def _as_str_mapping(value: Any, field_name: str) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{field_name} must be a table/object")

    parsed: dict[str, str] = {}
    for key, raw in value.items():
        if not isinstance(raw, str):
            raise ValueError(f"{field_name}.{key} must be a string")
        parsed[str(key)] = raw
    return parsed
