"""
Name: OpenAPI specification repository.
Description: Loads OpenAPI documents from a directory tree, resolves every internal and external $ref into inline structures, and tags each document with the service it describes.
"""

import asyncio
import copy
import json
import logging
import os
import re
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict

from ..constants import SPEC_FILE_EXTENSIONS
from ..errors import FileSystemError, ParseError

logger = logging.getLogger(__name__)

VERSION_PATTERN = re.compile(r"^v\d+[a-z0-9]*$", re.IGNORECASE)


class SpecRecord(BaseModel):
    """A loaded and dereferenced OpenAPI document."""

    model_config = ConfigDict(frozen=True)

    service: str
    name: str
    version: Optional[str] = None
    path: str
    document: Dict[str, Any]


def parse_service_segment(segment: str) -> Tuple[str, Optional[str]]:
    """Split a service segment into a canonical name and a version.

    ``twilio_api_v2010`` follows the ``prefix_name_version`` convention and
    becomes ``("TwilioApiV2010", "v2010")``. Anything else is used verbatim.

    Args:
        segment: Directory name or filename stem identifying the service

    Returns:
        Tuple of (canonical name, version or None)
    """
    parts = [part for part in segment.split("_") if part]
    if len(parts) >= 3 and VERSION_PATTERN.match(parts[-1]):
        name = "".join(part[:1].upper() + part[1:] for part in parts)
        return name, parts[-1]
    return segment, None


def service_segment(path: str, root_dir: str) -> str:
    """Derive the service segment of a spec file from its location."""
    relative = os.path.relpath(path, root_dir)
    stem = os.path.splitext(os.path.basename(relative))[0]
    parent = os.path.dirname(relative)
    if parent and VERSION_PATTERN.match(stem):
        # spec/<service>/<version>.yaml layout
        return f"{os.path.basename(parent)}_{stem}"
    return stem


def read_document(path: str) -> Dict[str, Any]:
    """Read a YAML or JSON document from disk.

    Raises:
        FileSystemError: If the file cannot be read
        ParseError: If the content is not a valid YAML/JSON mapping
    """
    _, ext = os.path.splitext(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            if ext.lower() == ".json":
                document = json.load(f)
            else:
                document = yaml.safe_load(f)
    except OSError as e:
        raise FileSystemError(f"Unable to read {path}: {e}") from e
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ParseError(f"Unable to parse {path}: {e}") from e

    if not isinstance(document, dict):
        raise ParseError(f"Unable to parse {path}: document is not a mapping")
    return document


class RefResolver:
    """Resolves ``$ref`` pointers across one document and the files it references.

    Resolved targets are cached per ``(file, pointer)``. A reference met again
    while it is still being resolved is a cycle; it is replaced by the
    referencing object without its ``$ref`` key.
    """

    def __init__(self, path: str, document: Dict[str, Any]):
        self.path = os.path.abspath(path)
        self._documents = {self.path: document}
        self._resolved: Dict[Tuple[str, str], Any] = {}

    def resolve(self) -> Dict[str, Any]:
        """Return a fully dereferenced copy of the root document."""
        return self._resolve(copy.deepcopy(self._documents[self.path]), self.path, set())

    def _load(self, path: str) -> Dict[str, Any]:
        if path not in self._documents:
            self._documents[path] = read_document(path)
        return self._documents[path]

    def _target(self, ref: str, current_path: str) -> Tuple[str, str]:
        file_part, _, pointer = ref.partition("#")
        if re.match(r"^[a-z][a-z0-9+.-]*://", file_part, re.IGNORECASE):
            raise ParseError(f"Remote references are not supported: {ref} in {current_path}")
        if file_part:
            target_path = os.path.normpath(
                os.path.join(os.path.dirname(current_path), file_part)
            )
        else:
            target_path = current_path
        return target_path, pointer

    def _lookup(self, target_path: str, pointer: str, ref: str, current_path: str) -> Any:
        current: Any = self._load(target_path)
        for part in pointer.split("/")[1:] if pointer else []:
            part = part.replace("~1", "/").replace("~0", "~")
            if isinstance(current, dict) and part in current:
                current = current[part]
            elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
                current = current[int(part)]
            else:
                raise ParseError(f"Unable to resolve $ref '{ref}' in {current_path}")
        return current

    def _resolve(self, obj: Any, current_path: str, resolving: set) -> Any:
        if isinstance(obj, dict):
            ref = obj.get("$ref")
            if isinstance(ref, str):
                target_path, pointer = self._target(ref, current_path)
                key = (target_path, pointer)

                if key in self._resolved:
                    return copy.deepcopy(self._resolved[key])

                if key in resolving:
                    # Circular reference, keep the structure without the $ref
                    return {k: v for k, v in obj.items() if k != "$ref"}

                target = self._lookup(target_path, pointer, ref, current_path)
                resolved = self._resolve(
                    copy.deepcopy(target), target_path, resolving | {key}
                )
                self._resolved[key] = resolved
                return copy.deepcopy(resolved)

            return {
                key: self._resolve(value, current_path, resolving)
                for key, value in obj.items()
            }

        if isinstance(obj, list):
            return [self._resolve(item, current_path, resolving) for item in obj]

        return obj


def dereference(path: str, document: Dict[str, Any]) -> Dict[str, Any]:
    """Resolve every ``$ref`` in a document loaded from ``path``."""
    return RefResolver(path, document).resolve()


def load_spec_file(path: str, root_dir: str) -> SpecRecord:
    """Load, dereference and tag a single OpenAPI document.

    Args:
        path: Path of the spec file
        root_dir: Root of the spec directory, used to derive the service

    Returns:
        The spec record
    """
    document = dereference(path, read_document(path))
    service = service_segment(path, root_dir)
    name, version = parse_service_segment(service)
    logger.debug(f"Loaded spec {path} for service {service}")
    return SpecRecord(
        service=service,
        name=name,
        version=version,
        path=path,
        document=document,
    )


async def load_specs(root_dir: str, base_dir: Optional[str] = None) -> List[SpecRecord]:
    """Recursively load every OpenAPI document below a directory.

    Sub-directories are walked one after the other; the spec files of a
    single directory are read concurrently. Files without a spec extension
    are skipped.

    Args:
        root_dir: Directory to scan
        base_dir: Root of the whole scan, defaults to ``root_dir``

    Returns:
        List of spec records

    Raises:
        FileSystemError: If a directory cannot be read
        ParseError: If a document cannot be parsed or dereferenced
    """
    base_dir = base_dir or root_dir
    try:
        with os.scandir(root_dir) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError as e:
        raise FileSystemError(f"Unable to read spec directory {root_dir}: {e}") from e

    specs: List[SpecRecord] = []
    files: List[str] = []
    for entry in entries:
        if entry.is_dir():
            specs.extend(await load_specs(entry.path, base_dir))
        elif entry.name.lower().endswith(SPEC_FILE_EXTENSIONS):
            files.append(entry.path)

    loaded = await asyncio.gather(
        *(asyncio.to_thread(load_spec_file, path, base_dir) for path in files)
    )
    specs.extend(loaded)
    return specs
