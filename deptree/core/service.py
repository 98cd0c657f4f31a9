"""
Request boundary for dependency tree resolution.

Takes an already-decoded request body ({"packages": [...]}) and produces the
response body together with an HTTP-like status code.
"""

import logging
from typing import Any, Dict, List, Tuple

from deptree.core.builder import TreeBuilder
from deptree.core.cache import MetadataCache
from deptree.core.errors import InputError, InternalError
from deptree.core.model import DependencyNode, RootPackage
from deptree.core.registry import RegistryClient

INVALID_INPUT_MESSAGE = "Invalid packages data"
INTERNAL_ERROR_MESSAGE = "Failed to build dependency tree"


def parse_packages(payload: Any) -> List[RootPackage]:
    if not isinstance(payload, dict):
        raise InputError(INVALID_INPUT_MESSAGE)

    packages = payload.get("packages")
    if not isinstance(packages, list):
        raise InputError(INVALID_INPUT_MESSAGE)

    roots = []
    for descriptor in packages:
        if not isinstance(descriptor, dict) or not isinstance(descriptor.get("name"), str):
            raise InputError(INVALID_INPUT_MESSAGE)

        version = descriptor.get("version")
        roots.append(RootPackage(
            name=descriptor["name"],
            version=version if isinstance(version, str) and version else "latest",
            is_dev=bool(descriptor.get("isDev", False)),
            is_peer=bool(descriptor.get("isPeer", False)),
        ))
    return roots


async def resolve(payload: Any, builder: TreeBuilder) -> Dict[str, Any]:
    """
    Resolves every root package of the request.
    Raises InputError for a malformed request and InternalError for anything
    else that escapes per-package resolution.
    """
    roots = parse_packages(payload)
    try:
        forest = await builder.build_forest(roots)
    except Exception as e:
        logging.exception("Dependency tree error:")
        raise InternalError(INTERNAL_ERROR_MESSAGE) from e

    return {"dependencyTrees": [tree.to_dict() for tree in forest]}


async def handle_request(payload: Any, builder: TreeBuilder) -> Tuple[int, Dict[str, Any]]:
    try:
        return 200, await resolve(payload, builder)
    except InputError as e:
        logging.warning(f"Rejected request: {e}")
        return InputError.status, {"error": INVALID_INPUT_MESSAGE}
    except InternalError:
        return InternalError.status, {"error": INTERNAL_ERROR_MESSAGE}


async def build_trees(roots: List[RootPackage], cache: MetadataCache) -> List[DependencyNode]:
    """Opens a registry session and resolves `roots` with the default settings."""
    async with RegistryClient(cache) as registry:
        return await TreeBuilder(registry).build_forest(roots)
