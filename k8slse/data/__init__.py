"""Audit script shipped with the package."""
from importlib import resources
from typing import Optional

SCRIPT_NAME = "audit.sh"


def get_script(path: Optional[str] = None) -> bytes:
    """Return the audit script, either the embedded one or the file at path."""
    if path:
        with open(path, "rb") as f:
            return f.read()
    return resources.files(__name__).joinpath(SCRIPT_NAME).read_bytes()
