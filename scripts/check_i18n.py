#!/usr/bin/env python3
"""Validate the console string tables.

Checks that strings_fi.py and strings_en.py define the same keys and that
every t("...") key used in the package exists.

Exit code 0 = all OK, 1 = problems found.
"""

import ast
import sys
from pathlib import Path

PACKAGE = Path(__file__).resolve().parent.parent / "beaconlog"


def table_keys(filepath: Path) -> set[str]:
    """Return the keys of the STRINGS dict literal in a strings module."""
    tree = ast.parse(filepath.read_text(encoding="utf-8"), filename=str(filepath))

    for node in ast.walk(tree):
        if isinstance(node, (ast.Assign, ast.AnnAssign)) and isinstance(node.value, ast.Dict):
            targets = node.targets if isinstance(node, ast.Assign) else [node.target]
            if any(isinstance(target, ast.Name) and target.id == "STRINGS" for target in targets):
                return {
                    key.value
                    for key in node.value.keys
                    if isinstance(key, ast.Constant) and isinstance(key.value, str)
                }

    return set()


def used_keys(package: Path) -> dict[str, set[str]]:
    """Map each literal t("key") call to the modules using it."""
    usage: dict[str, set[str]] = {}
    for path in sorted(package.rglob("*.py")):
        tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
        for node in ast.walk(tree):
            if (
                isinstance(node, ast.Call)
                and isinstance(node.func, ast.Name)
                and node.func.id == "t"
                and node.args
                and isinstance(node.args[0], ast.Constant)
            ):
                usage.setdefault(node.args[0].value, set()).add(path.name)
    return usage


def report(title: str, keys: set[str]) -> None:
    print(f"{title} ({len(keys)}):")
    for key in sorted(keys):
        print(f"  - {key}")


def main() -> int:
    fi_path = PACKAGE / "strings_fi.py"
    en_path = PACKAGE / "strings_en.py"

    if not fi_path.exists() or not en_path.exists():
        print("String files not found")
        return 1

    fi_keys = table_keys(fi_path)
    en_keys = table_keys(en_path)
    usage = used_keys(PACKAGE)
    undefined = {key for key in usage if key not in fi_keys or key not in en_keys}

    problems = [
        ("Keys missing from strings_en.py", fi_keys - en_keys),
        ("Keys missing from strings_fi.py", en_keys - fi_keys),
        ("Keys used but not defined", undefined),
    ]
    ok = True
    for title, keys in problems:
        if keys:
            ok = False
            report(title, keys)

    if ok:
        print(f"i18n OK: {len(fi_keys)} keys in sync, {len(usage)} used")

    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
