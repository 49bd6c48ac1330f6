"""Assign numbered output files to input images.

Files in the destination directory are expected to look like
``NNNN-<stem>.bin``. An input whose stem already has such a file reuses it,
so re-running the tool overwrites images in place. Everything else gets the
next index after the largest number currently in the directory, which keeps
existing ordering on the panel stable while appending new images at the end.
"""

from __future__ import annotations

import os
import random as _random
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .errors import DestinationError, ValidationError

OUTPUT_SUFFIX = ".bin"
INDEX_WIDTH = 4


@dataclass(frozen=True)
class ImageMapping:
    """Mapping between an input image and its dithered output file."""

    input: Path
    output: Path


class IndexCounter:
    """Hands out strictly increasing slot numbers for new files."""

    def __init__(self, start: int):
        self._next = start

    def next(self) -> int:
        value = self._next
        self._next += 1
        return value

    def peek(self) -> int:
        return self._next


def _warn(message: str) -> None:
    warnings.warn(message, RuntimeWarning, stacklevel=2)


def _is_text(name: str) -> bool:
    # os.listdir() smuggles undecodable bytes through as lone surrogates.
    try:
        name.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def parse_leading_index(name: str) -> Optional[int]:
    """Return the integer formed by the leading ASCII digits of ``name``."""

    end = 0
    while end < len(name) and "0" <= name[end] <= "9":
        end += 1
    if end == 0:
        return None
    return int(name[:end])


def matches_stem(name: str, stem: str) -> bool:
    """Check whether ``name`` is ``<digits>-<stem>.bin`` for exactly ``stem``."""

    prefix, sep, rest = name.partition("-")
    if not sep or not prefix:
        return False
    if not all("0" <= c <= "9" for c in prefix):
        return False
    return rest == stem + OUTPUT_SUFFIX


def format_output_name(index: int, stem: str) -> str:
    return f"{index:0{INDEX_WIDTH}d}-{stem}{OUTPUT_SUFFIX}"


def verify_sources(sources: Iterable[str | Path]) -> List[Path]:
    """Drop sources that do not exist, warning about each one."""

    results: List[Path] = []
    for raw in sources:
        path = Path(raw)
        try:
            path.stat()
        except OSError:
            _warn(f"Source file {str(path)!r} does not exist")
            continue
        results.append(path)
    return results


def list_destination(destination: str | Path) -> List[str]:
    """List the file names in ``destination``.

    Names that cannot be represented as text are skipped with a warning.
    Failing to list the directory at all raises :class:`DestinationError`.
    """

    try:
        entries = os.listdir(destination)
    except OSError as exc:
        raise DestinationError(
            f"Failed to open destination directory {str(destination)!r}: {exc}"
        ) from exc

    names: List[str] = []
    for entry in entries:
        if not _is_text(entry):
            _warn(f"Unsupported filename {entry!r}")
            continue
        names.append(entry)
    return names


def last_index(names: Iterable[str]) -> int:
    """Largest leading number among ``names``, or 0 when there is none."""

    return max(
        (value for value in map(parse_leading_index, names) if value is not None),
        default=0,
    )


def input_stem(path: Path) -> str:
    stem = path.stem
    if not stem or path.name in (".", "..") or not _is_text(stem):
        raise ValidationError(f"Failed to get filename for {str(path)!r}")
    return stem


def look_up_mapping(
    input_path: Path,
    destination: Path,
    destination_files: Sequence[str],
    indices: IndexCounter,
) -> ImageMapping:
    """Find the output file for a single input.

    If the destination already holds ``NNNN-<stem>.bin`` that name is reused
    as-is (keeping its prefix width). Otherwise the next index is allocated.
    """

    stem = input_stem(input_path)
    existing = next((name for name in destination_files if matches_stem(name, stem)), None)
    if existing is None:
        existing = format_output_name(indices.next(), stem)
    return ImageMapping(input=input_path, output=destination / existing)


def get_images(
    sources: Iterable[str | Path],
    destination: str | Path,
    random: bool = False,
    rng: _random.Random | None = None,
) -> List[ImageMapping]:
    """Map input files to output files in ``destination``.

    Optionally shuffles the inputs so that new images are numbered in a
    random order. Images that already have an output file always keep it.
    """

    source_files = verify_sources(sources)

    if random:
        (rng or _random).shuffle(source_files)

    destination = Path(destination)
    dest_files = list_destination(destination)
    indices = IndexCounter(last_index(dest_files) + 1)

    mappings: List[ImageMapping] = []
    for source in source_files:
        try:
            mappings.append(look_up_mapping(source, destination, dest_files, indices))
        except ValidationError as exc:
            _warn(str(exc))
    return mappings
