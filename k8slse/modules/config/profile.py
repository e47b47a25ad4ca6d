from __future__ import annotations

import logging
import os
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger("k8slse.config.profile")

DEFAULT_SHELLS = ["sh", "bash"]

# stat exits non-zero when the file is missing, so each probe doubles as a
# presence check for stat itself.
DEFAULT_UTILITIES = ["stat /usr/bin/find", "stat /bin/cat", "stat /bin/grep"]

PROFILE_FILENAME = "k8slse-profile.yaml"


class ProbeProfile(BaseModel):
    """Which shells to look for and which utilities a container must have."""

    shells: List[str] = Field(default_factory=lambda: list(DEFAULT_SHELLS))
    utilities: List[str] = Field(default_factory=lambda: list(DEFAULT_UTILITIES))

    @field_validator("shells")
    @classmethod
    def shells_not_empty(cls, v: List[str]) -> List[str]:
        shells = [s.strip() for s in v if s and s.strip()]
        if not shells:
            raise ValueError("at least one candidate shell is required")
        if any(len(s.split()) != 1 for s in shells):
            raise ValueError("shell entries must be single words")
        return shells

    @field_validator("utilities")
    @classmethod
    def utilities_are_commands(cls, v: List[str]) -> List[str]:
        utilities = [u.strip() for u in v]
        if any(not u for u in utilities):
            raise ValueError("utility probes must be non-empty commands")
        return utilities


def _load_spec(path: str) -> ProbeProfile:
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid probe profile {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Invalid probe profile {path}: expected a mapping")
    return ProbeProfile(**data)


def _candidate_paths(explicit: Optional[str]) -> List[Optional[str]]:
    """Return candidate file paths to search for the probe profile."""
    return [
        explicit,
        os.getenv("K8SLSE_PROFILE_FILE"),
        os.path.join(os.getcwd(), PROFILE_FILENAME),
        f"/etc/k8slse/{PROFILE_FILENAME}",
    ]


def load_profile(path: Optional[str] = None) -> ProbeProfile:
    """
    Load the probe profile.

    An explicitly given path must exist and parse. The implicit locations
    are optional; the built-in defaults apply when none of them exists.

    Raises:
        FileNotFoundError: explicit path does not exist
        ValueError: profile content is invalid
    """
    if path and not os.path.isfile(path):
        raise FileNotFoundError(f"Probe profile not found: {path}")

    for candidate in _candidate_paths(path):
        if candidate and os.path.isfile(candidate):
            logger.debug(f"Loading probe profile from {candidate}")
            return _load_spec(candidate)

    return ProbeProfile()
