from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

import yaml

from iconprep.errors import ManifestError

MANIFEST_PATH = Path(__file__).resolve().parent / "manifest.yaml"
DEVICON_BASE = "https://raw.githubusercontent.com/devicons/devicon/master/icons"
GENERIC_IDENTIFIER = "generic"

_IDENTIFIER_RE = re.compile(r"^[a-z0-9][a-z0-9_-]*$")


@dataclass(frozen=True)
class ManifestEntry:
    identifier: str
    remote_path: str
    base_url: str = DEVICON_BASE

    @property
    def url(self) -> str:
        return f"{self.base_url.rstrip('/')}/{self.remote_path.lstrip('/')}"

    @property
    def filename(self) -> str:
        return f"{self.identifier}.svg"


def parse_manifest(data) -> tuple[ManifestEntry, ...]:
    if not isinstance(data, dict) or not isinstance(data.get("icons"), list):
        raise ManifestError("manifest must be a mapping with an 'icons' list")
    default_base = str(data.get("base_url") or DEVICON_BASE)

    entries: list[ManifestEntry] = []
    seen: set[str] = set()
    for item in data["icons"]:
        if not isinstance(item, dict):
            raise ManifestError(f"manifest entry is not a mapping: {item!r}")
        identifier = str(item.get("identifier") or "").strip()
        remote_path = str(item.get("remote_path") or "").strip()
        if not _IDENTIFIER_RE.match(identifier):
            raise ManifestError(f"invalid identifier: {identifier!r}")
        if not remote_path:
            raise ManifestError(f"{identifier}: remote_path missing")
        if identifier == GENERIC_IDENTIFIER:
            raise ManifestError(f"{identifier!r} is generated locally and cannot be fetched")
        if identifier in seen:
            raise ManifestError(f"duplicate identifier: {identifier}")
        seen.add(identifier)
        entries.append(
            ManifestEntry(
                identifier=identifier,
                remote_path=remote_path,
                base_url=str(item.get("base_url") or default_base),
            )
        )
    return tuple(entries)


@lru_cache
def load_manifest(path: Path = MANIFEST_PATH) -> tuple[ManifestEntry, ...]:
    try:
        data = yaml.safe_load(path.read_text())
    except (OSError, yaml.YAMLError) as exc:
        raise ManifestError(f"cannot read manifest {path}: {exc}") from exc
    return parse_manifest(data)


def expected_identifiers(entries) -> list[str]:
    return [entry.identifier for entry in entries] + [GENERIC_IDENTIFIER]
