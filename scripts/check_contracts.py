#!/usr/bin/env python3
"""AST-based enforcement for the tessera.contracts package.

Records, enums and other plain data types that travel between subsystems
(widgets, engine, schemas, core, cli) belong in `tessera.contracts`. This
script finds dataclasses, Enums, TypedDicts and NamedTuples defined
elsewhere and reports those imported by a different subsystem, unless the
whitelist names them.

Usage:
    python scripts/check_contracts.py [SRC_DIR] [WHITELIST]

Defaults: src/tessera and .contracts-whitelist.yaml

Exit codes:
    0: All shared types live in contracts/ or are whitelisted
    1: Violations found
"""

from __future__ import annotations

import ast
import sys
from dataclasses import dataclass, field
from pathlib import Path

import yaml  # type: ignore[import-untyped]

DATA_TYPE_BASES = {
    "Enum": "Enum",
    "StrEnum": "Enum",
    "IntEnum": "Enum",
    "TypedDict": "TypedDict",
    "NamedTuple": "NamedTuple",
}


@dataclass
class DataType:
    """A data type definition found outside contracts/."""

    name: str
    line: int
    kind: str
    module: str
    subsystem: str


@dataclass
class Violation:
    """A shared data type defined outside contracts/."""

    path: Path
    data_type: DataType
    importers: list[Path] = field(default_factory=list)

    @property
    def key(self) -> str:
        return f"{self.data_type.module.replace('.', '/')}:{self.data_type.name}"


def load_whitelist(path: Path) -> set[str]:
    """Return whitelisted `<module/path>:<TypeName>` entries."""
    if not path.exists():
        return set()
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    return set(data.get("allowed_external_types", []))


def _is_dataclass_decorator(node: ast.expr) -> bool:
    target = node.func if isinstance(node, ast.Call) else node
    if isinstance(target, ast.Name):
        return target.id == "dataclass"
    if isinstance(target, ast.Attribute):
        return target.attr == "dataclass"
    return False


def _base_name(node: ast.expr) -> str | None:
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return None


def subsystem_of(relative: Path) -> str:
    """Top-level subsystem of a module path relative to the package root.

    widgets/base.py -> widgets, cli.py -> cli
    """
    return relative.parts[0].removesuffix(".py")


def find_data_types(path: Path, src_dir: Path) -> list[DataType]:
    """Find data type definitions in one source file."""
    try:
        tree = ast.parse(path.read_text(encoding="utf-8"))
    except (SyntaxError, UnicodeDecodeError):
        return []

    relative = path.relative_to(src_dir)
    module = relative.with_suffix("").as_posix().replace("/", ".")
    subsystem = subsystem_of(relative)

    found: list[DataType] = []
    for node in ast.walk(tree):
        if not isinstance(node, ast.ClassDef):
            continue
        kind: str | None = None
        if any(_is_dataclass_decorator(d) for d in node.decorator_list):
            kind = "dataclass"
        else:
            for base in node.bases:
                kind = DATA_TYPE_BASES.get(_base_name(base) or "")
                if kind:
                    break
        if kind:
            found.append(DataType(node.name, node.lineno, kind, module, subsystem))
    return found


def find_importers(src_dir: Path, package: str, data_type: DataType) -> list[Path]:
    """Files in other subsystems that import data_type from its module."""
    qualified = f"{package}.{data_type.module}"
    importers: list[Path] = []
    for path in sorted(src_dir.rglob("*.py")):
        if subsystem_of(path.relative_to(src_dir)) == data_type.subsystem:
            continue
        try:
            tree = ast.parse(path.read_text(encoding="utf-8"))
        except (SyntaxError, UnicodeDecodeError):
            continue
        for node in ast.walk(tree):
            if (
                isinstance(node, ast.ImportFrom)
                and node.module == qualified
                and any(alias.name == data_type.name for alias in node.names)
            ):
                importers.append(path)
                break
    return importers


def scan(src_dir: Path, whitelist: set[str]) -> list[Violation]:
    """Return every non-whitelisted shared data type outside contracts/."""
    package = src_dir.name
    contracts_dir = src_dir / "contracts"
    violations: list[Violation] = []

    for path in sorted(src_dir.rglob("*.py")):
        if contracts_dir in path.parents:
            continue
        for data_type in find_data_types(path, src_dir):
            violation = Violation(path, data_type)
            if violation.key in whitelist:
                continue
            violation.importers = find_importers(src_dir, package, data_type)
            if violation.importers:
                violations.append(violation)
    return violations


def main(argv: list[str]) -> int:
    """Run the contracts check."""
    src_dir = Path(argv[0]) if argv else Path("src/tessera")
    whitelist_path = Path(argv[1]) if len(argv) > 1 else Path(".contracts-whitelist.yaml")

    violations = scan(src_dir, load_whitelist(whitelist_path))
    if not violations:
        print("All shared data types live in contracts/ or are whitelisted")  # noqa: T201
        return 0

    print("Contract violations found:\n")  # noqa: T201
    for v in violations:
        print(f"  {v.path}:{v.data_type.line}: {v.data_type.kind} '{v.data_type.name}'")  # noqa: T201
        print(f"    Imported by: {', '.join(str(p) for p in v.importers[:3])}")  # noqa: T201
        print(f"    Fix: move to {src_dir}/contracts/ or whitelist '{v.key}'\n")  # noqa: T201
    return 1


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
