"""
Version resolution for drand-beacon.

Order of preference:
1) the installed distribution metadata (``importlib.metadata``),
2) ``git describe --tags --long --dirty --match "v*"`` when running from a checkout,
3) the static BASE_VERSION with a ``+no-git`` local label.

The result is always a PEP 440 string.
"""
from __future__ import annotations

import re
import subprocess
from functools import lru_cache
from importlib.metadata import PackageNotFoundError, version as _dist_version
from pathlib import Path
from typing import Optional, Tuple

BASE_VERSION = "0.2.0"

DIST_NAME = "drand-beacon"

_DESCRIBE_RE = re.compile(
    r"^v(?P<tag>\d+\.\d+\.\d+(?:[abrc]\d+)?)-(?P<distance>\d+)-g(?P<commit>[0-9a-f]+)(?P<dirty>-dirty)?$"
)


def _checkout_root(start: Path) -> Optional[Path]:
    for parent in (start, *start.parents):
        if (parent / ".git").exists():
            return parent
    return None


def _describe(root: Path) -> Optional[Tuple[str, int, str, bool]]:
    try:
        out = subprocess.check_output(
            ["git", "-C", str(root), "describe", "--tags", "--long", "--dirty", "--match", "v*"],
            stderr=subprocess.DEVNULL,
            text=True,
        ).strip()
    except (OSError, subprocess.CalledProcessError):
        return None
    m = _DESCRIBE_RE.match(out)
    if not m:
        return None
    return m.group("tag"), int(m.group("distance")), m.group("commit"), bool(m.group("dirty"))


def pep440_from_describe(tag: str, distance: int, commit: str, dirty: bool) -> str:
    """
    Map a ``git describe`` result to PEP 440.

    An exact, clean tag maps to the tag itself; anything else becomes
    ``{tag}.post{distance}+g{commit}[.dirty]``.
    """
    if distance == 0 and not dirty:
        return tag
    local = f"+g{commit}" + (".dirty" if dirty else "")
    return f"{tag}.post{distance}{local}"


@lru_cache(maxsize=1)
def get_version() -> str:
    try:
        return _dist_version(DIST_NAME)
    except PackageNotFoundError:
        pass

    root = _checkout_root(Path(__file__).resolve().parent)
    described = _describe(root) if root else None
    if described:
        return pep440_from_describe(*described)
    return f"{BASE_VERSION}+no-git"


__version__ = get_version()
__all__ = ["__version__", "get_version", "pep440_from_describe", "BASE_VERSION"]
