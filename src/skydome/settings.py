"""Environment-driven settings. Entry points call load_dotenv() before from_env()."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

_ROOT = Path(__file__).parent.parent.parent


@dataclass(frozen=True)
class Settings:
    catalog_path: Path  # HYG CSV
    constellations_path: Path  # d3-celestial constellation lines GeoJSON
    max_magnitude: float
    fov_deg: float
    log_level: str

    @classmethod
    def from_env(cls) -> "Settings":
        """Read SKYDOME_* variables, falling back to the bundled resources/ files.

        Raises:
            ValueError: A numeric variable does not parse, or the log level is
                not a logging level name.
        """
        return cls(
            catalog_path=Path(
                os.environ.get("SKYDOME_CATALOG", _ROOT / "resources" / "hyg.csv")
            ),
            constellations_path=Path(
                os.environ.get(
                    "SKYDOME_CONSTELLATIONS", _ROOT / "resources" / "constellations.json"
                )
            ),
            max_magnitude=_env_float("SKYDOME_MAX_MAGNITUDE", 6.0),
            fov_deg=_env_float("SKYDOME_FOV", 60.0),
            log_level=_env_log_level("SKYDOME_LOG_LEVEL", "INFO"),
        )


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def _env_log_level(name: str, default: str) -> str:
    level = os.environ.get(name, default).strip().upper() or default
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"{name} must be a logging level name, got {level!r}")
    return level
