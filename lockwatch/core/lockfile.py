import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from lockwatch.core.errors import DependencyTreeError, LockfileError
from lockwatch.core.graph import DependencyTree
from lockwatch.core.model import PackageRef

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


@dataclass
class Lockfile:
    """Packages pinned by a Cargo.lock, with their raw dependency entries."""

    packages: List[PackageRef] = field(default_factory=list)
    dependencies: Dict[PackageRef, List[str]] = field(default_factory=dict)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "Lockfile":
        path = Path(path)
        logging.debug(f"Parsing {path}...")

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except FileNotFoundError:
            raise LockfileError(f"{path} not found.") from None
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise LockfileError(f"Error reading {path}: {e}") from e

        lockfile = cls.from_dict(data)
        logging.debug(f"{path}: {len(lockfile.packages)} packages.")
        return lockfile

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Lockfile":
        lockfile = cls()

        for pkg in data.get("package", []):
            name = pkg.get("name")
            version = pkg.get("version")
            if not name or not version:
                raise LockfileError(f"Package entry without name or version: {pkg!r}")

            package = PackageRef(name, version, pkg.get("source"))
            lockfile.packages.append(package)
            lockfile.dependencies[package] = list(pkg.get("dependencies", []))

        return lockfile

    def dependency_tree(self) -> DependencyTree:
        """Resolve every dependency entry to a package and build the graph."""
        by_name: Dict[str, List[PackageRef]] = {}
        for package in self.packages:
            by_name.setdefault(package.name, []).append(package)

        edges = []
        for package in self.packages:
            for entry in self.dependencies.get(package, []):
                edges.append((package, self._resolve(entry, package, by_name)))

        return DependencyTree(self.packages, edges)

    @staticmethod
    def _resolve(entry: str, parent: PackageRef, by_name: Dict[str, List[PackageRef]]) -> PackageRef:
        name, version, source = _split_entry(entry)

        candidates = [
            p for p in by_name.get(name, [])
            if (version is None or p.version == version) and (source is None or p.source == source)
        ]

        if not candidates:
            raise DependencyTreeError(f"{parent} depends on '{entry}', which is not in the lockfile.")
        if len(candidates) > 1:
            raise DependencyTreeError(f"{parent} depends on '{entry}', which matches {len(candidates)} packages.")

        return candidates[0]


def _split_entry(entry: str) -> Tuple[str, Optional[str], Optional[str]]:
    # Accepts "name", "name version" and "name version (source)"
    parts = entry.strip().split(" ", 2)
    name = parts[0]
    version = parts[1] if len(parts) >= 2 else None
    source = None

    if len(parts) == 3:
        source = parts[2].strip()
        if source.startswith("(") and source.endswith(")"):
            source = source[1:-1]

    return name, version, source
