"""Journal configuration loader.

Priority (high → low):
  1. CLI flags           (handled at call site — not in this module)
  2. Environment variables  (JOURNAL_EMBEDDING_PROVIDER, JOURNAL_PROJECT_PATH,
                             JOURNAL_USER_PATH, JOURNAL_INDEX_PATH)
  3. Per-project journal.yaml  (current working directory)
  4. Global ~/.private-journal/config.yaml
  5. Hardcoded defaults

Config files must never contain API keys; use environment variables instead.
All YAML reads use yaml.safe_load() — never yaml.load().
"""

from __future__ import annotations

import os
import re
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from private_journal.embeddings.gateway import PROVIDERS, GatewayConfig
from private_journal.embeddings.local import DEFAULT_LOCAL_MODEL

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_GLOBAL_CONFIG_DIR: Path = Path.home() / ".private-journal"
_GLOBAL_CONFIG_PATH: Path = _GLOBAL_CONFIG_DIR / "config.yaml"
_PROJECT_CONFIG_NAME: str = "journal.yaml"

# Fields that suggest an API key — forbidden in every config file.
# Matches: api_key, apikey, api-key, api_secret, _token (suffix), standalone token,
# standalone secret, _secret (suffix), password, passwd, credential(s).
_API_KEY_RE: re.Pattern[str] = re.compile(
    r"api[_\-]?(?:key|secret)"  # api_key, api-key, api_secret, apikey
    r"|_token$"                  # github_token, access_token (suffix)
    r"|^token$"                  # exactly "token" (standalone)
    r"|_secret$"                 # client_secret (suffix)
    r"|^secret$"                 # exactly "secret" (standalone)
    r"|passw(?:ord|d)"           # password, passwd
    r"|credential",              # credential, credentials
    re.IGNORECASE,
)

# Known top-level sections — unknown keys produce a warning
_KNOWN_SECTIONS: frozenset[str] = frozenset(["settings", "embedding", "index", "search"])


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """Raised when a config file contains an invalid or forbidden value."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class SettingsCfg:
    """Journal locations (journal.yaml: settings:).

    Attributes:
        project_journal_path: Project journal root, relative to the CWD.
        user_journal_path: User journal root; a leading ``~`` is the home dir.
    """

    project_journal_path: str = ".private-journal"
    user_journal_path: str = "~/.private-journal"


@dataclass
class EmbeddingCfg:
    """Embedding provider configuration (journal.yaml: embedding:)."""

    provider: str = "local"
    local_model: str = DEFAULT_LOCAL_MODEL
    openai_model: str = "text-embedding-3-small"
    gemini_model: str = "text-embedding-004"
    dimensions: int | None = None

    def to_gateway_config(self) -> GatewayConfig:
        """Build the gateway config; API keys are looked up from the environment."""
        return GatewayConfig(
            provider=self.provider,
            local_model=self.local_model,
            openai_model=self.openai_model,
            gemini_model=self.gemini_model,
            dimensions=self.dimensions,
        )


@dataclass
class IndexCfg:
    """Vector index location (journal.yaml: index:)."""

    path: str = "~/.private-journal/.index.db"


@dataclass
class SearchCfg:
    """CLI defaults for search and list (journal.yaml: search:)."""

    limit: int = 10
    days: int = 30


@dataclass
class JournalConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    settings: SettingsCfg = field(default_factory=SettingsCfg)
    embedding: EmbeddingCfg = field(default_factory=EmbeddingCfg)
    index: IndexCfg = field(default_factory=IndexCfg)
    search: SearchCfg = field(default_factory=SearchCfg)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _check_no_api_keys(data: dict[str, Any], source: Path) -> None:
    """Raise ConfigError if *data* contains any API-key-like key names."""

    def _scan(obj: Any, path: str) -> None:
        if isinstance(obj, dict):
            for k, v in obj.items():
                full = f"{path}.{k}" if path else k
                if _API_KEY_RE.search(str(k)):
                    raise ConfigError(
                        f"Config '{source}' contains a forbidden key '{full}'.\n"
                        f"  API keys must be set via environment variables, not config files.\n"
                        f"  Remove '{full}' from {source.name} and use:\n"
                        f"    export {str(k).upper().replace('-', '_')}=<value>"
                    )
                _scan(v, full)

    _scan(data, "")


def _validate_provider(provider: str) -> None:
    if provider not in PROVIDERS:
        raise ConfigError(
            f"embedding.provider must be one of {', '.join(PROVIDERS)}, got '{provider}'."
        )


def _warn_unknown_keys(data: dict[str, Any], source: Path) -> None:
    """Emit a UserWarning for unrecognised top-level keys."""
    for key in data:
        if key not in _KNOWN_SECTIONS:
            warnings.warn(
                f"Unknown config key '{key}' in '{source}' — ignored.",
                UserWarning,
                stacklevel=4,
            )


def _read_layer(path: Path) -> dict[str, Any]:
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config '{path}' must be a YAML mapping.")
    _check_no_api_keys(raw, path)
    _warn_unknown_keys(raw, path)
    return raw


# ---------------------------------------------------------------------------
# Merge + build
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict that is *base* deep-merged with *override*."""
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _cfg_from_dict(data: dict[str, Any]) -> JournalConfig:
    """Build a *JournalConfig* from a merged raw YAML dict."""
    cfg = JournalConfig()

    if "settings" in data:
        s = data["settings"] or {}
        cfg.settings = SettingsCfg(
            project_journal_path=str(
                s.get("project_journal_path", cfg.settings.project_journal_path)
            ),
            user_journal_path=str(s.get("user_journal_path", cfg.settings.user_journal_path)),
        )

    if "embedding" in data:
        e = data["embedding"] or {}
        dims = e.get("dimensions")
        cfg.embedding = EmbeddingCfg(
            provider=str(e.get("provider", cfg.embedding.provider)),
            local_model=str(e.get("local_model", cfg.embedding.local_model)),
            openai_model=str(e.get("openai_model", cfg.embedding.openai_model)),
            gemini_model=str(e.get("gemini_model", cfg.embedding.gemini_model)),
            dimensions=int(dims) if dims is not None else None,
        )

    if "index" in data:
        i = data["index"] or {}
        cfg.index = IndexCfg(path=str(i.get("path", cfg.index.path)))

    if "search" in data:
        q = data["search"] or {}
        cfg.search = SearchCfg(
            limit=int(q.get("limit", cfg.search.limit)),
            days=int(q.get("days", cfg.search.days)),
        )

    return cfg


def _apply_env_overrides(cfg: JournalConfig) -> JournalConfig:
    """Apply JOURNAL_* environment variable overrides (layer 2)."""
    if provider := os.environ.get("JOURNAL_EMBEDDING_PROVIDER"):
        cfg.embedding.provider = provider
    if path := os.environ.get("JOURNAL_PROJECT_PATH"):
        cfg.settings.project_journal_path = path
    if path := os.environ.get("JOURNAL_USER_PATH"):
        cfg.settings.user_journal_path = path
    if path := os.environ.get("JOURNAL_INDEX_PATH"):
        cfg.index.path = path
    return cfg


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    project_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> JournalConfig:
    """Load and return a merged *JournalConfig*.

    Applies layers in order: global → per-project → env vars.
    CLI flag overrides must be applied by the caller after this function.

    Args:
        project_dir: Directory to search for *journal.yaml*. Defaults to CWD.
        global_config_path: Override the global config path (for testing).

    Returns:
        Fully merged *JournalConfig* with env var overrides applied.

    Raises:
        ConfigError: If a config file contains API-key-like fields, is not a
            mapping, or names an unknown embedding provider.
    """
    global_path = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    search_dir = project_dir if project_dir is not None else Path.cwd()

    merged: dict[str, Any] = {}

    # Layer 1: global config
    if global_path.exists():
        merged = _deep_merge(merged, _read_layer(global_path))

    # Layer 2: per-project config
    project_cfg_path = search_dir / _PROJECT_CONFIG_NAME
    if project_cfg_path.exists():
        merged = _deep_merge(merged, _read_layer(project_cfg_path))

    # Layer 3: env var overrides
    cfg = _apply_env_overrides(_cfg_from_dict(merged))

    _validate_provider(cfg.embedding.provider)
    return cfg


def ensure_global_config(
    global_config_path: Path | None = None,
) -> Path:
    """Create ``~/.private-journal/config.yaml`` with defaults if it does not exist.

    Creates parent directory with mode 0o700 and the config file with
    mode 0o600 (owner-readable only).

    Args:
        global_config_path: Override path (for testing).

    Returns:
        Path to the global config file.
    """
    target = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    target.parent.mkdir(mode=0o700, parents=True, exist_ok=True)

    if not target.exists():
        content = (
            "# Private journal global configuration.\n"
            "# NEVER store API keys here — use environment variables:\n"
            "#   export OPENAI_API_KEY=sk-...\n"
            "#   export GEMINI_API_KEY=...\n"
            "\n"
            "settings:\n"
            "  project_journal_path: .private-journal\n"
            "  user_journal_path: ~/.private-journal\n"
            "\n"
            "embedding:\n"
            "  provider: local  # local | openai | gemini\n"
        )
        target.write_text(content, encoding="utf-8")
        target.chmod(0o600)

    return target
