"""Network build configuration and model document discovery.

Provides the settings the RC network builder is parameterized by, and
locates the model document from an explicit path, an environment
variable, or the working directory.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .exceptions import ModelFileNotFoundError
from .thermal.convection import STILL_AIR
from .units import SPEED, Quantity, checked

logger = logging.getLogger(__name__)

MODEL_ENV_VAR = "HOMETHERM_MODEL"
DEFAULT_MODEL_FILENAME = "model.json5"


@dataclass(frozen=True, slots=True)
class NetworkConfig:
    """Settings for building an RC network.

    Attributes:
        wind_speed: Air speed used for every convective film coefficient,
            stored in m/s. Still air unless the caller knows better.
    """

    wind_speed: Quantity = STILL_AIR

    def __post_init__(self) -> None:
        object.__setattr__(self, "wind_speed", checked(self.wind_speed, SPEED, "wind_speed"))
        if self.wind_speed.magnitude < 0:
            msg = f"Wind speed must be non-negative, got {self.wind_speed}"
            raise ValueError(msg)


# ---------------------------------------------------------------------------
# Public discovery function
# ---------------------------------------------------------------------------


def find_model_file(path: str | Path | None = None) -> Path:
    """Find the model document.

    Discovery order:
        1. Explicit *path* argument.
        2. ``HOMETHERM_MODEL`` environment variable.
        3. ``model.json5`` in the current working directory.

    Args:
        path: Explicit path to the model document.

    Returns:
        Resolved path of an existing file.

    Raises:
        ModelFileNotFoundError: If no candidate exists.
    """
    searched: list[str] = []

    # 1. Explicit path
    if path is not None:
        p = Path(path).resolve()
        searched.append(str(p))
        if p.is_file():
            return p
        raise ModelFileNotFoundError(searched)

    # 2-3. Environment variable, then working directory
    for candidate in _discovery_candidates():
        searched.append(str(candidate))
        if candidate.is_file():
            logger.debug("Found model document at %s", candidate)
            return candidate

    raise ModelFileNotFoundError(searched)


def _discovery_candidates() -> list[Path]:
    """Collect candidate paths from the env var and the working directory.

    Returns:
        Ordered list of candidate paths to try.
    """
    candidates: list[Path] = []

    env_path = os.environ.get(MODEL_ENV_VAR)
    if env_path:
        candidates.append(Path(env_path).resolve())

    candidates.append((Path.cwd() / DEFAULT_MODEL_FILENAME).resolve())
    return candidates
