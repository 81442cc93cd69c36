#!/usr/bin/env python3
"""
KUBEMOLD ERRORS
---------------
Every failure the manifest pipeline can raise. None of these are transient:
they describe bad or ambiguous input and are surfaced to the caller with the
offending file or token attached.

Author: KubeMold Team
Date: 2026-10-18
"""

from pathlib import Path
from typing import Any, Iterable, Optional, Union


class KubeMoldError(Exception):
    """Base class for all KubeMold failures."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.path = str(path) if path is not None else None


class MalformedFilename(KubeMoldError):
    """The filename does not follow <name>[-<type>].(yaml|yml|json)."""

    def __init__(self, filename: str):
        super().__init__(
            f"Resource file name '{filename}' does not match pattern "
            f"<name>-<type>.(yaml|yml|json)",
            path=filename,
        )
        self.filename = filename


class InvalidFragmentName(KubeMoldError):
    """The filename carries a type token that maps to no known kind."""

    def __init__(self, token: str, filename: str, valid_tokens: Iterable[str]):
        self.token = token
        self.valid_tokens = sorted(valid_tokens)
        super().__init__(
            f"Unknown type '{token}' for file {filename}. "
            f"Must be one of : {', '.join(self.valid_tokens)}",
            path=filename,
        )


class ParseError(KubeMoldError):
    """Wraps a YAML/JSON syntax error together with the file it came from."""

    def __init__(self, path: Union[str, Path], cause: Exception):
        self.cause = cause
        super().__init__(f"[{path}] {cause}", path=path)


class MissingKind(KubeMoldError):
    def __init__(self, filename: str):
        super().__init__(
            "No type given as part of the file name (e.g. 'app-rc.yml') "
            f"and no 'kind' defined in resource descriptor {filename}",
            path=filename,
        )


class InvalidMetadataType(KubeMoldError):
    def __init__(self, filename: str, value: Any):
        self.actual_type = type(value).__name__
        super().__init__(
            f"Metadata in {filename} is expected to be a mapping, not a {self.actual_type}",
            path=filename,
        )


class InvalidPortSpec(KubeMoldError):
    """A port mapping entry could not be parsed."""

    def __init__(self, spec: str, reason: str):
        self.spec = spec
        super().__init__(f"Invalid port mapping '{spec}': {reason}")


class MissingBuildConfig(KubeMoldError):
    """An image flagged as buildable has no build section."""

    def __init__(self, image: str):
        self.image = image
        super().__init__(f"Image '{image}' is marked as buildable but has no build configuration")


class MultipleSelectorsError(KubeMoldError):
    def __init__(self, first: Any, second: Any):
        self.first = first
        self.second = second
        super().__init__(f"Multiple selectors found for the given entities: {first} - {second}")


class ConfigError(KubeMoldError):
    """kubemold.yaml is unreadable or structurally wrong."""


class OutputError(KubeMoldError):
    """Manifests cannot be written: bad output directory or clashing file names."""
