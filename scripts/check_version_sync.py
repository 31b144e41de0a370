#!/usr/bin/env python3
"""Check that beaconlog.__version__ matches [project].version in pyproject.toml."""

import re
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent

VERSION_SOURCES = {
    "beaconlog/__init__.py": r'__version__\s*=\s*"([^"]+)"',
    "pyproject.toml": r'(?m)^version\s*=\s*"([^"]+)"',
}


def read_version(relative_path: str, pattern: str) -> str:
    match = re.search(pattern, (ROOT / relative_path).read_text(encoding="utf-8"))
    return match.group(1) if match else ""


def main() -> int:
    versions = {path: read_version(path, pattern) for path, pattern in VERSION_SOURCES.items()}

    missing = [path for path, version in versions.items() if not version]
    for path in missing:
        print(f"ERROR: Could not find version in {path}")
    if missing:
        return 1

    if len(set(versions.values())) > 1:
        details = " vs ".join(f"{path}={version}" for path, version in versions.items())
        print(f"VERSION MISMATCH: {details}")
        return 1

    print(f"version OK: {versions['pyproject.toml']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
