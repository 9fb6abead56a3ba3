"""Normalization of raw multipart upload payloads.

Transports surface several files under one field in different shapes. This
module parses the raw file-parameter mapping into one of two variants,
``SingleFile`` or ``IndexedBatch``, and then flattens either variant into an
ordered list of ``FileDescriptor`` objects.

Three shapes are recognised as a batch, tried in this order:

1. indexed objects::

       {"file": [{"name": ..., "type": ..., "tmp_name": ..., "error": ..., "size": ...}, ...]}

2. bracket-indexed keys::

       {"file[0]": {...}, "file[1]": {...}}

3. parallel arrays::

       {"file": {"name": [...], "type": [...], "tmp_name": [...], "error": [...], "size": [...]}}

Anything else under the field is treated as a single file. Supporting another
wire shape means writing one more detector and adding it to
``SHAPE_DETECTORS``; validation and storage never see the raw payload.
"""

import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Union

from filedepot.core.logging import get_logger
from filedepot.domain.entities.file_descriptor import FileDescriptor
from filedepot.domain.entities.upload_result import UploadFailure
from filedepot.domain.exceptions import UploadTransportError

logger = get_logger(__name__)

DEFAULT_FIELD_NAME = "file"
REQUIRED_FIELDS: tuple[str, ...] = ("name", "type", "tmp_name", "error", "size")
MISSING_INFORMATION = "Missing file information"


@dataclass(frozen=True)
class SingleFile:
    """A payload carrying exactly one file entry."""

    entry: Any


@dataclass(frozen=True)
class IndexedBatch:
    """A payload carrying several file entries, ordered by index."""

    entries: list[tuple[int, Any]] = field(default_factory=list)


ParsedUpload = Union[SingleFile, IndexedBatch]
NormalizedEntry = Union[FileDescriptor, UploadFailure]
ShapeDetector = Callable[[Mapping[str, Any], str], IndexedBatch | None]


def _as_index(key: Any) -> int | None:
    if isinstance(key, bool):
        return None
    if isinstance(key, int):
        return key
    if isinstance(key, str) and key.isdigit():
        return int(key)
    return None


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def detect_indexed_objects(raw: Mapping[str, Any], field_name: str) -> IndexedBatch | None:
    """Detect a list (or index-keyed mapping) of per-file objects under the field."""
    value = raw.get(field_name)

    if _is_sequence(value):
        if not value:
            return IndexedBatch()
        if not isinstance(value[0], Mapping):
            return None
        return IndexedBatch(entries=list(enumerate(value)))

    if isinstance(value, Mapping) and value:
        indexed = [(_as_index(key), entry) for key, entry in value.items()]
        if any(index is None for index, _ in indexed):
            return None
        first = min(indexed, key=lambda item: item[0])[1]
        if not isinstance(first, Mapping):
            return None
        return IndexedBatch(entries=sorted(indexed, key=lambda item: item[0]))

    return None


def detect_bracket_keys(raw: Mapping[str, Any], field_name: str) -> IndexedBatch | None:
    """Detect top-level ``file[N]`` keys and re-key them by ``N``."""
    pattern = re.compile(rf"^{re.escape(field_name)}\[(\d+)\]$")
    entries = []
    for key, entry in raw.items():
        match = pattern.match(str(key))
        if match:
            entries.append((int(match.group(1)), entry))

    if not entries:
        return None
    return IndexedBatch(entries=sorted(entries, key=lambda item: item[0]))


def detect_parallel_arrays(raw: Mapping[str, Any], field_name: str) -> IndexedBatch | None:
    """Detect the legacy shape of one array per attribute under the field."""
    value = raw.get(field_name)
    if not isinstance(value, Mapping) or not _is_sequence(value.get("name")):
        return None

    entries = []
    for position in range(len(value["name"])):
        entry = {}
        for attribute in REQUIRED_FIELDS:
            column = value.get(attribute)
            if _is_sequence(column) and position < len(column):
                entry[attribute] = column[position]
        entries.append((position, entry))
    return IndexedBatch(entries=entries)


SHAPE_DETECTORS: tuple[ShapeDetector, ...] = (
    detect_indexed_objects,
    detect_bracket_keys,
    detect_parallel_arrays,
)


def build_descriptor(entry: Any, index: int) -> FileDescriptor:
    """Build a descriptor from one raw file entry.

    Raises:
        UploadTransportError: If the entry lacks a required field or carries
            a non-numeric size or error code.
    """
    if not isinstance(entry, Mapping):
        raise UploadTransportError(MISSING_INFORMATION)

    missing = [name for name in REQUIRED_FIELDS if entry.get(name) is None]
    if missing:
        raise UploadTransportError(MISSING_INFORMATION)

    try:
        size = int(entry["size"])
        error = int(entry["error"])
    except (TypeError, ValueError) as e:
        raise UploadTransportError(MISSING_INFORMATION) from e

    return FileDescriptor(
        name=str(entry["name"]),
        mime_type=str(entry["type"]),
        tmp_path=str(entry["tmp_name"]),
        size=size,
        error=error,
        index=index,
    )


def _display_name(entry: Any, index: int) -> str:
    if isinstance(entry, Mapping) and entry.get("name") is not None:
        return str(entry["name"])
    return f"Unknown file #{index}"


class UploadNormalizer:
    """Rewrites raw upload payloads into ordered file descriptors."""

    def __init__(
        self,
        field_name: str = DEFAULT_FIELD_NAME,
        detectors: Sequence[ShapeDetector] = SHAPE_DETECTORS,
    ) -> None:
        self.field_name = field_name
        self.detectors = tuple(detectors)

    def parse(self, raw: Mapping[str, Any] | None) -> ParsedUpload:
        """Classify the raw payload as a single file or an indexed batch."""
        if not raw:
            return IndexedBatch()

        for detector in self.detectors:
            batch = detector(raw, self.field_name)
            if batch is not None:
                return batch

        if self.field_name not in raw:
            return IndexedBatch()
        return SingleFile(entry=raw[self.field_name])

    def normalize(self, raw: Mapping[str, Any] | None) -> list[NormalizedEntry]:
        """Normalize a raw payload into descriptors, in submission order.

        Entries that cannot be turned into a descriptor are returned as
        ``UploadFailure`` items in their position; they never abort the
        entries that follow.
        """
        parsed = self.parse(raw)
        if isinstance(parsed, SingleFile):
            indexed = [(0, parsed.entry)]
        else:
            indexed = parsed.entries

        normalized: list[NormalizedEntry] = []
        for index, entry in indexed:
            try:
                normalized.append(build_descriptor(entry, index))
            except UploadTransportError as e:
                logger.warning(
                    "Malformed upload entry",
                    index=index,
                    error=str(e),
                )
                normalized.append(UploadFailure(name=_display_name(entry, index), error=str(e)))

        logger.debug(
            "Upload payload normalized",
            shape=type(parsed).__name__,
            entries=len(normalized),
        )
        return normalized
