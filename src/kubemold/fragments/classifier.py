#!/usr/bin/env python3
"""
KUBEMOLD FILENAME CLASSIFIER
----------------------------
Reads intent out of a fragment's filename.

    myapp-svc.yaml   -> name 'myapp', kind Service
    rc.yml           -> no name (taken from the app), kind ReplicationController
    backend.json     -> name 'backend', kind must come from the file content

Author: KubeMold Team
Date: 2026-10-18
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from kubemold.core.errors import InvalidFragmentName, MalformedFilename
from kubemold.core.kinds import KindTable

FILENAME_PATTERN = re.compile(
    r'^(?P<name>.*?)(-(?P<type>[^-]+))?\.(?P<ext>yaml|yml|json)$', re.IGNORECASE
)
PROFILES_PATTERN = re.compile(r'^profiles?\.ya?ml$')


@dataclass(frozen=True)
class Classification:
    """What a filename says about the resource inside it."""
    name: Optional[str]
    type: Optional[str]
    ext: str
    kind: Optional[str]


class FilenameClassifier:
    """Maps fragment filenames onto (name, type, ext, kind)."""

    def __init__(self, kinds: KindTable):
        self.kinds = kinds

    def classify(self, filename: str) -> Classification:
        match = FILENAME_PATTERN.match(filename)
        if not match:
            raise MalformedFilename(filename)

        name = match.group("name")
        type_token = match.group("type")
        ext = match.group("ext").lower()

        if type_token is not None:
            kind = self.kinds.kind_for(type_token)
            if kind is None:
                raise InvalidFragmentName(type_token, filename, self.kinds.tokens)
        else:
            # The whole name may be a type token, e.g. "svc.yml"
            kind = self.kinds.kind_for(name)
            if kind is not None:
                name = None

        return Classification(name=name, type=type_token, ext=ext, kind=kind)

    def name_with_suffix(self, name: str, kind: str) -> str:
        """Inverse of classify: 'myapp' + Service -> 'myapp-svc'."""
        suffix = self.kinds.token_for(kind)
        return f"{name}-{suffix}" if suffix else name


def is_excluded(filename: str) -> bool:
    """profile(s).yml holds build profiles, not resources."""
    return PROFILES_PATTERN.match(filename) is not None


def list_fragments(resource_dir: Union[str, Path]) -> List[Path]:
    """Candidate fragment files in a directory, sorted by name."""
    directory = Path(resource_dir)
    if not directory.is_dir():
        return []
    return sorted(
        p for p in directory.iterdir()
        if p.is_file() and FILENAME_PATTERN.match(p.name) and not is_excluded(p.name)
    )
