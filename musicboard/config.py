import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

_DEFAULT_CONFIG_PATH = Path("config.toml")
_DEFAULT_ENV_PATH = Path("secrets")

DEFAULT_DEV_HOST = "127.0.0.1"
DEFAULT_DEV_PORT = 8787


def load(path: Path = _DEFAULT_CONFIG_PATH, env_path: Path = _DEFAULT_ENV_PATH) -> dict[str, Any]:
    """Load config from TOML (if present), then overlay environment overrides."""
    cfg: dict[str, Any] = {}
    if path.exists():
        with open(path, "rb") as f:
            cfg = tomllib.load(f)
    _load_env(env_path, cfg)
    return cfg


def _load_env(env_path: Path, cfg: dict) -> None:
    """
    Parse a .env-style file and inject values into the config dict.

    Supported variable names:
      MUSICBOARD_DATA_DIR    -> cfg["data"]["dir"]
      MUSICBOARD_FLYERS_DIR  -> cfg["data"]["flyers_dir"]
      MUSICBOARD_DEV_PORT    -> cfg["devserver"]["port"]

    Shell environment variables take precedence over .env values.
    """
    _apply_env_vars(cfg)

    if not env_path.exists():
        return

    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key not in os.environ:
                os.environ[key] = value

    _apply_env_vars(cfg)


def _apply_env_vars(cfg: dict) -> None:
    data = cfg.setdefault("data", {})
    if v := os.environ.get("MUSICBOARD_DATA_DIR"):
        data["dir"] = v
    if v := os.environ.get("MUSICBOARD_FLYERS_DIR"):
        data["flyers_dir"] = v
    if v := os.environ.get("MUSICBOARD_DEV_PORT"):
        try:
            cfg.setdefault("devserver", {})["port"] = int(v)
        except ValueError:
            raise ValueError(f"MUSICBOARD_DEV_PORT must be an integer, got {v!r}") from None


@dataclass(frozen=True)
class DataFiles:
    """Locations of the three JSON collections and the flyer directory."""
    events: Path
    venues: Path
    partners: Path
    flyers: Path

    @classmethod
    def in_dir(cls, data_dir: Path, flyers_dir: Path) -> "DataFiles":
        return cls(
            events=data_dir / "events.json",
            venues=data_dir / "venues.json",
            partners=data_dir / "partners.json",
            flyers=flyers_dir,
        )


def get_site(cfg: dict) -> dict:
    return cfg.get("site", {})


def get_output_dir(cfg: dict) -> Path:
    return Path(get_site(cfg).get("output_dir", "output"))


def get_data_files(cfg: dict) -> DataFiles:
    data = cfg.get("data", {})
    return DataFiles.in_dir(
        Path(data.get("dir", "data")),
        Path(data.get("flyers_dir", "public/flyers")),
    )


def get_devserver(cfg: dict) -> tuple[str, int]:
    dev = cfg.get("devserver", {})
    return dev.get("host", DEFAULT_DEV_HOST), int(dev.get("port", DEFAULT_DEV_PORT))
