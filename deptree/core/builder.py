import asyncio
import logging
from typing import AbstractSet, Iterable, List, Mapping, Optional

from deptree import config
from deptree.core.model import DependencyNode, PackageMetadata, RootPackage
from deptree.core.version import normalize


class TreeBuilder:
    """
    Rebuilds dependency trees by walking the registry.

    Each call to build_node gets its own ancestor set (`visited`); children
    receive a new set with the parent added, so two siblings that both depend
    on the same package are expanded twice instead of being flagged circular.
    """

    def __init__(self, registry, max_depth: int = config.MAX_DEPTH) -> None:
        self.registry = registry
        self.max_depth = max_depth

    async def build_forest(self, roots: Iterable[RootPackage]) -> List[DependencyNode]:
        tasks = [
            self.build_node(root.name, root.version, 0, frozenset(), root.is_dev, root.is_peer)
            for root in roots
        ]
        trees = await asyncio.gather(*tasks)
        forest = [tree for tree in trees if tree is not None]
        logging.info(f"Resolved {len(forest)} of {len(tasks)} root packages.")
        return forest

    async def build_node(
        self,
        name: str,
        version_spec: str,
        depth: int = 0,
        visited: AbstractSet[str] = frozenset(),
        is_dev: bool = False,
        is_peer: bool = False,
    ) -> Optional[DependencyNode]:
        if depth > self.max_depth:
            return None

        key = f"{name}@{version_spec}"
        if key in visited and depth > 0:
            logging.debug(f"Circular dependency: {key} at depth {depth}")
            return DependencyNode(
                name, version_spec, is_dev=is_dev, is_peer=is_peer, is_circular=True, depth=depth
            )

        child_visited = frozenset(visited) | {key}

        try:
            metadata = await self.registry.fetch_metadata(name, version_spec)
            if metadata is None:
                return None

            children = await self._expand(metadata, depth, child_visited)
        except Exception:
            logging.exception(f"Error building tree for {name}")
            return None

        return DependencyNode(
            name, metadata.version, children, is_dev=is_dev, is_peer=is_peer, depth=depth
        )

    async def _expand(self, metadata: PackageMetadata, depth: int, visited: AbstractSet[str]) -> List[DependencyNode]:
        # (dependency map, is_dev, is_peer); dev/peer only count for roots
        groups = [(metadata.dependencies, False, False)]
        if depth == 0:
            groups.append((metadata.dev_dependencies, True, False))
            groups.append((metadata.peer_dependencies, False, True))

        tasks = []
        for deps, is_dev, is_peer in groups:
            tasks.extend(self._edges(deps, depth, visited, is_dev, is_peer))

        # gather keeps input order whatever the completion order
        results = await asyncio.gather(*tasks)
        return [child for child in results if child is not None]

    def _edges(self, deps: Optional[Mapping[str, str]], depth, visited, is_dev, is_peer):
        for dep_name, dep_range in (deps or {}).items():
            yield self.build_node(dep_name, normalize(dep_range), depth + 1, visited, is_dev, is_peer)
