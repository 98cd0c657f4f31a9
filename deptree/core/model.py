from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional


@dataclass
class DependencyNode:
    name: str
    version: str
    children: List['DependencyNode'] = field(default_factory=list)

    # Edge flags, set by whoever introduced this node
    is_dev: bool = False
    is_peer: bool = False

    # Placeholder for an edge that loops back into its own ancestor chain
    is_circular: bool = False
    depth: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "dependencies": [child.to_dict() for child in self.children],
            "isDev": self.is_dev,
            "isPeer": self.is_peer,
            "isCircular": self.is_circular,
            "depth": self.depth,
        }

    def walk(self):
        """Yields this node and every descendant, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass(frozen=True)
class PackageMetadata:
    name: str
    version: str
    dependencies: Optional[Mapping[str, str]] = None
    dev_dependencies: Optional[Mapping[str, str]] = None
    peer_dependencies: Optional[Mapping[str, str]] = None

    @classmethod
    def from_registry(cls, data: Any) -> 'PackageMetadata':
        """
        Builds metadata from a registry document.
        Raises ValueError when the document is not usable.
        """
        if not isinstance(data, dict):
            raise ValueError("registry document is not an object")

        name = data.get("name")
        version = data.get("version")
        if not isinstance(name, str) or not isinstance(version, str):
            raise ValueError("registry document has no name/version")

        return cls(
            name=name,
            version=version,
            dependencies=_dependency_map(data, "dependencies"),
            dev_dependencies=_dependency_map(data, "devDependencies"),
            peer_dependencies=_dependency_map(data, "peerDependencies"),
        )


def _dependency_map(data: Dict[str, Any], key: str) -> Optional[Dict[str, str]]:
    raw = data.get(key)
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ValueError(f"{key} is not an object")

    deps = {}
    for dep_name, dep_range in raw.items():
        if not isinstance(dep_range, str):
            raise ValueError(f"{key}.{dep_name} is not a string")
        deps[dep_name] = dep_range
    return deps


@dataclass(frozen=True)
class RootPackage:
    name: str
    version: str = "latest"
    is_dev: bool = False
    is_peer: bool = False
