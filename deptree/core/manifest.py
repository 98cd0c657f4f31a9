import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

from deptree.core.errors import InputError
from deptree.core.model import RootPackage
from deptree.core.version import normalize

MANIFEST_FILE = "package.json"


@dataclass
class ManifestAnalysis:
    name: str
    roots: List[RootPackage] = field(default_factory=list)
    production: int = 0
    dev: int = 0
    peer: int = 0
    duplicates: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.roots)


def analyze_manifest(data: Dict[str, Any]) -> ManifestAnalysis:
    if not isinstance(data, dict):
        raise InputError(f"{MANIFEST_FILE} must contain an object")

    analysis = ManifestAnalysis(name=data.get("name") or MANIFEST_FILE)
    sections = [
        ("dependencies", False, False),
        ("devDependencies", True, False),
        ("peerDependencies", False, True),
    ]

    seen = set()
    for section, is_dev, is_peer in sections:
        deps = data.get(section) or {}
        if not isinstance(deps, dict):
            raise InputError(f"{section} must be an object")

        for name, spec in deps.items():
            version = normalize(str(spec)).strip() or "latest"
            analysis.roots.append(RootPackage(name, version, is_dev=is_dev, is_peer=is_peer))

            # Same package listed in more than one section
            if name in seen:
                analysis.duplicates.append(name)
            seen.add(name)

        if is_dev:
            analysis.dev = len(deps)
        elif is_peer:
            analysis.peer = len(deps)
        else:
            analysis.production = len(deps)

    logging.debug(
        f"{analysis.name}: {analysis.production} prod, {analysis.dev} dev, "
        f"{analysis.peer} peer, {len(analysis.duplicates)} duplicated"
    )
    return analysis


def load_manifest(path: Union[str, Path] = MANIFEST_FILE) -> ManifestAnalysis:
    logging.debug(f"Parsing {path}...")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise InputError(f"{path} not found.")
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise InputError(f"Error reading {path}: {e}")

    return analyze_manifest(data)
