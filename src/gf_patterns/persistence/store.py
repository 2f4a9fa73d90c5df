from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from pydantic import ValidationError

from ..errors import InvalidPatternError, PatternNotFoundError, StorageError
from ..schemas import PatternFile, PatternRecord


LOGGER = logging.getLogger("gf_patterns.persistence")

PATTERN_SUFFIX = ".json"


@dataclass
class PatternListing:
    """Valid records in name order plus the files that had to be skipped."""

    records: List[PatternRecord] = field(default_factory=list)
    skipped: List[StorageError] = field(default_factory=list)

    @property
    def names(self) -> List[str]:
        return [record.name for record in self.records]


def validate_name(name: str) -> None:
    """Reject names that cannot safely address a file inside the store directory."""
    if not name:
        raise InvalidPatternError("Name cannot be empty")
    separators = {"/", os.sep}
    if os.altsep:
        separators.add(os.altsep)
    if any(sep in name for sep in separators) or "\0" in name:
        raise InvalidPatternError(f"Invalid pattern name '{name}': names cannot contain path separators")
    if name.startswith("."):
        raise InvalidPatternError(f"Invalid pattern name '{name}': names cannot start with '.'")


class JsonPatternStore:
    """
    Pattern store keeping one JSON file per pattern under a single directory.

    Each record is written to a temporary file next to its final location and
    moved into place with ``os.replace``, so readers see either the previous
    record or the new one, never a torn write. Records are independent files:
    a corrupt or concurrently rewritten pattern never affects the others.
    """

    def __init__(self, directory: Path) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, name: str) -> Path:
        return self._directory / f"{name}{PATTERN_SUFFIX}"

    def save(self, record: PatternRecord) -> None:
        validate_name(record.name)
        path = self.path_for(record.name)
        payload = json.dumps(PatternFile.from_record(record).to_payload(), indent=2) + "\n"

        try:
            self._directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(
                record.name,
                f"Failed to create pattern directory '{self._directory}': {exc}",
                exc,
            ) from exc

        temp_path = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self._directory,
                prefix=f".{record.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                temp_path = Path(handle.name)
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            # NamedTemporaryFile creates 0600; give the record the usual umask-derived mode.
            umask = os.umask(0)
            os.umask(umask)
            os.chmod(temp_path, 0o666 & ~umask)
            os.replace(temp_path, path)
        except OSError as exc:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            raise StorageError(record.name, f"Failed to write pattern file '{path}': {exc}", exc) from exc

        LOGGER.debug("Saved pattern %s to %s", record.name, path)

    def load(self, name: str) -> PatternRecord:
        try:
            validate_name(name)
        except InvalidPatternError:
            raise PatternNotFoundError(name) from None
        return self._read(name, self.path_for(name))

    def exists(self, name: str) -> bool:
        try:
            validate_name(name)
            return self.path_for(name).is_file()
        except (InvalidPatternError, OSError, ValueError):
            return False

    def delete(self, name: str) -> None:
        if not self.exists(name):
            raise PatternNotFoundError(name)
        path = self.path_for(name)
        try:
            path.unlink()
        except FileNotFoundError:
            raise PatternNotFoundError(name) from None
        except OSError as exc:
            raise StorageError(name, f"Failed to remove pattern file '{path}': {exc}", exc) from exc
        LOGGER.debug("Deleted pattern %s", name)

    def list(self) -> List[PatternRecord]:
        return self.scan().records

    def scan(self) -> PatternListing:
        """
        Read every record in the store, sorted by name.

        Unreadable or corrupt files are skipped and reported in
        ``PatternListing.skipped`` rather than aborting the listing.
        """
        listing = PatternListing()
        if not self._directory.is_dir():
            return listing

        try:
            entries = sorted(self._directory.iterdir(), key=lambda entry: entry.name)
        except OSError as exc:
            raise StorageError("", f"Failed to read pattern directory '{self._directory}': {exc}", exc) from exc

        for entry in entries:
            if entry.name.startswith(".") or entry.suffix != PATTERN_SUFFIX or not entry.is_file():
                continue
            name = entry.stem
            try:
                listing.records.append(self._read(name, entry))
            except StorageError as exc:
                LOGGER.debug("Skipping pattern %s: %s", name, exc)
                listing.skipped.append(exc)
            except PatternNotFoundError:
                # Removed between the directory scan and the read.
                continue
        return listing

    def _read(self, name: str, path: Path) -> PatternRecord:
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise PatternNotFoundError(name) from None
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError(name, f"Failed to read pattern file '{path}': {exc}", exc) from exc

        try:
            stored = PatternFile.model_validate_json(raw)
        except ValidationError as exc:
            raise StorageError(name, f"Pattern file '{path}' is malformed", exc) from exc

        record = stored.to_record(name)
        if record is None:
            raise StorageError(name, f"Pattern file '{path}' contains no pattern(s)")
        return record
