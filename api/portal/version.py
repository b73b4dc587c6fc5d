import os
from importlib.metadata import PackageNotFoundError, version as dist_version
from pathlib import Path

DIST_NAME = "case-portal"

def get_version(default: str = "0.1.0-dev") -> str:
    """APP_VERSION, then a VERSION file next to the service, then the installed distribution."""
    if v := os.getenv("APP_VERSION"):
        return v
    version_file = Path(__file__).resolve().parents[1] / "VERSION"
    if version_file.is_file():
        return version_file.read_text().strip() or default
    try:
        return dist_version(DIST_NAME)
    except PackageNotFoundError:
        return default
