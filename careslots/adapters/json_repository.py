"""
JSON file repository: one snapshot file per provider.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import List, Optional

from ..domain.exceptions import SnapshotError
from ..domain.provider_availability import ProviderAvailability
from .snapshot import availability_from_record, availability_to_record

logger = logging.getLogger(__name__)


class JsonFileAvailabilityRepository:
    """
    Stores each provider's availability as ``<directory>/<provider_id>.json``.

    Writes go to a temporary file in the same directory and are moved into
    place with ``os.replace``, so readers never see a half-written file.
    """

    SUFFIX = ".json"

    def __init__(self, directory: Path):
        """
        Initialize the repository.

        Args:
            directory: Folder holding snapshot files; created on first save
        """
        self.directory = Path(directory)

    def _path_for(self, provider_id: str) -> Path:
        if not provider_id or provider_id in (".", "..") or any(
            sep in provider_id for sep in ("/", "\\", os.sep)
        ):
            raise SnapshotError(f"Invalid provider id for file storage: {provider_id!r}")
        return self.directory / f"{provider_id}{self.SUFFIX}"

    def get(self, provider_id: str) -> Optional[ProviderAvailability]:
        """
        Load a provider's availability.

        Returns:
            ProviderAvailability, or None if no snapshot exists

        Raises:
            SnapshotError: If the file cannot be read or parsed
        """
        path = self._path_for(provider_id)
        if not path.exists():
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise SnapshotError(f"Corrupted snapshot {path}: {exc}") from exc
        except OSError as exc:
            raise SnapshotError(f"Could not read snapshot {path}: {exc}") from exc

        if not isinstance(data, dict):
            raise SnapshotError(f"Snapshot {path} must contain a JSON object")

        return availability_from_record(data)

    def save(self, availability: ProviderAvailability) -> None:
        path = self._path_for(availability.provider_id)
        record = availability_to_record(availability)

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=".tmp-", suffix=self.SUFFIX)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(record, f, indent=2)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise SnapshotError(f"Could not write snapshot {path}: {exc}") from exc

        logger.debug("Saved availability for provider %s (version %s)", availability.provider_id, availability.version)

    def delete(self, provider_id: str) -> bool:
        path = self._path_for(provider_id)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise SnapshotError(f"Could not delete snapshot {path}: {exc}") from exc
        return True

    def list_provider_ids(self) -> List[str]:
        if not self.directory.exists():
            return []
        return sorted(
            path.stem for path in self.directory.glob(f"*{self.SUFFIX}")
            if not path.name.startswith(".")
        )
