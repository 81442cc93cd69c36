#!/usr/bin/env python3
"""
KUBEMOLD FRAGMENT PARSER
------------------------
Loads a fragment file into an ordered key/value tree. YAML goes through
ruamel.yaml (round-trip loader, so key order survives), JSON through the
json module. An empty file is an empty fragment.

Author: KubeMold Team
Date: 2026-10-18
"""

import json
from pathlib import Path
from typing import Any, Dict, Union

from ruamel.yaml import YAML, YAMLError
from ruamel.yaml.comments import CommentedMap

from kubemold.core.errors import ParseError

Fragment = Dict[str, Any]


class FragmentParser:
    """Opaque parse service for fragment files."""

    def __init__(self):
        self.yaml = YAML(typ='rt')
        self.yaml.preserve_quotes = True

    def parse(self, path: Union[str, Path], ext: str) -> Fragment:
        path = Path(path)
        try:
            text = path.read_text(encoding='utf-8-sig')
        except (OSError, UnicodeDecodeError) as e:
            raise ParseError(path, e) from e

        try:
            if ext.lower() == "json":
                data = json.loads(text) if text.strip() else None
            else:
                data = self.yaml.load(text)
        except (YAMLError, json.JSONDecodeError) as e:
            raise ParseError(path, e) from e

        if data is None:
            return CommentedMap()
        if not isinstance(data, dict):
            raise ParseError(path, TypeError(
                f"top level must be a mapping, not a {type(data).__name__}"))
        return data
