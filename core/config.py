"""
Configuration for FIFM.

Settings live in a YAML file, either as a bare mapping or under a top-level
``fifm:`` key. A missing file means defaults.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigError


PARENT_ENTRY = ".."

COLLISION_STRATEGIES = ("count", "probe")
NAVIGATION_ERROR_MODES = ("silent", "report")

DEFAULT_CONFIG_PATH = "fifm.yaml"
DEFAULT_AUDIT_LOG = "~/.fifm/audit_log.jsonl"


def _flag(data: Dict[str, Any], key: str, default: bool, prefix: str = "") -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"'{prefix}{key}' must be true or false, got {value!r}")
    return value


@dataclass
class Config:
    """Effective FIFM settings."""
    show_parent_entry: bool = True
    collision_naming: str = "count"
    navigation_errors: str = "silent"
    protected_names: List[str] = field(default_factory=lambda: [PARENT_ENTRY])
    audit_enabled: bool = True
    audit_log_path: str = DEFAULT_AUDIT_LOG
    source_path: Optional[Path] = None

    def __post_init__(self):
        if self.collision_naming not in COLLISION_STRATEGIES:
            raise ConfigError(
                f"collision_naming must be one of {', '.join(COLLISION_STRATEGIES)}, "
                f"got {self.collision_naming!r}"
            )
        if self.navigation_errors not in NAVIGATION_ERROR_MODES:
            raise ConfigError(
                f"navigation_errors must be one of {', '.join(NAVIGATION_ERROR_MODES)}, "
                f"got {self.navigation_errors!r}"
            )
        # '..' can never be unprotected
        if PARENT_ENTRY not in self.protected_names:
            self.protected_names = [PARENT_ENTRY] + list(self.protected_names)

    @property
    def report_navigation_errors(self) -> bool:
        return self.navigation_errors == "report"

    @property
    def resolved_audit_log_path(self) -> Path:
        return Path(self.audit_log_path).expanduser()

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source_path: Optional[Path] = None) -> "Config":
        """Build a Config from a parsed YAML mapping."""
        if not isinstance(data, dict):
            raise ConfigError("Configuration root must be a mapping")

        data = data.get("fifm", data) or {}
        if not isinstance(data, dict):
            raise ConfigError("'fifm' must be a mapping")
        audit = data.get("audit", {}) or {}
        if not isinstance(audit, dict):
            raise ConfigError("'audit' must be a mapping")

        protected = data.get("protected_names", [PARENT_ENTRY])
        if not isinstance(protected, list) or not all(isinstance(p, str) for p in protected):
            raise ConfigError("'protected_names' must be a list of names")

        return cls(
            show_parent_entry=_flag(data, "show_parent_entry", True),
            collision_naming=str(data.get("collision_naming", "count")),
            navigation_errors=str(data.get("navigation_errors", "silent")),
            protected_names=list(protected),
            audit_enabled=_flag(audit, "enabled", True, prefix="audit."),
            audit_log_path=str(audit.get("log_path", DEFAULT_AUDIT_LOG)),
            source_path=source_path,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fifm": {
                "show_parent_entry": self.show_parent_entry,
                "collision_naming": self.collision_naming,
                "navigation_errors": self.navigation_errors,
                "protected_names": list(self.protected_names),
                "audit": {
                    "enabled": self.audit_enabled,
                    "log_path": self.audit_log_path,
                },
            }
        }

    def save(self, path: Optional[str] = None) -> Path:
        """
        Write the configuration back as YAML.

        Args:
            path: Target file, defaults to the file this config was loaded from

        Returns:
            The path written
        """
        target = Path(path) if path else (self.source_path or Path(DEFAULT_CONFIG_PATH))
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w", encoding="utf-8") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False)
        self.source_path = target
        return target


def load_config(path: Optional[str] = None) -> Config:
    """
    Load configuration from a YAML file.

    Args:
        path: Path to the YAML file (default: fifm.yaml in the current directory)

    Returns:
        The loaded Config, or defaults when the file does not exist

    Raises:
        ConfigError: If the file cannot be parsed or holds invalid values
    """
    config_path = Path(path or DEFAULT_CONFIG_PATH).expanduser()
    if not config_path.exists():
        return Config(source_path=config_path)

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read {config_path}: {e}") from e

    return Config.from_dict(data, source_path=config_path)
