"""
JSONL-based document storage.

One file per collection under a root directory, one JSON object per line,
each carrying an ``id`` field.  Writes rewrite the whole collection file.
"""

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable

from ..core.models import ProgramState, UserSettings, Workout
from ..core.units import default_settings
from .serializers import (
    ValidationError,
    dict_to_program_state,
    dict_to_user_settings,
    dict_to_workout,
    migrate_settings_document,
    program_state_to_dict,
    user_settings_to_dict,
    workout_to_dict,
)

logger = logging.getLogger(__name__)

WORKOUTS = "workouts"
PROGRAM_STATE = "program_state"
SETTINGS = "settings"

PROGRAM_STATE_ID = "current"
SETTINGS_ID = "settings"


class DocumentStore:
    """
    Minimal keyed document store backed by JSONL files.

    Each collection lives in ``<root>/<collection>.jsonl``.
    """

    def __init__(self, root: str | Path):
        """
        Initialize the store.

        Args:
            root: Directory holding the collection files
        """
        self.root = Path(root)

    def collection_path(self, collection: str) -> Path:
        return self.root / f"{collection}.jsonl"

    def _read(self, collection: str) -> list[dict[str, Any]]:
        path = self.collection_path(collection)
        if not path.exists():
            return []

        documents: list[dict[str, Any]] = []
        with open(path, "r") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    doc = json.loads(line)
                except json.JSONDecodeError as e:
                    raise ValidationError(f"Error parsing line {line_num} in {path}: {e}") from e
                if not isinstance(doc, dict) or "id" not in doc:
                    raise ValidationError(f"Line {line_num} in {path} is not a document with an id")
                documents.append(doc)
        return documents

    def _write(self, collection: str, documents: list[dict[str, Any]]) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        with open(self.collection_path(collection), "w") as f:
            for doc in documents:
                f.write(json.dumps(doc, separators=(",", ":")) + "\n")

    def get(self, collection: str, key: str) -> dict[str, Any] | None:
        """Return the document with ``id == key``, or None."""
        return next((d for d in self._read(collection) if d["id"] == key), None)

    def put(self, collection: str, document: dict[str, Any]) -> None:
        """
        Insert or replace a document by its id.

        Raises:
            ValidationError: If the document has no id
        """
        if "id" not in document:
            raise ValidationError(f"Document for {collection} has no id")

        documents = self._read(collection)
        for i, existing in enumerate(documents):
            if existing["id"] == document["id"]:
                documents[i] = document
                break
        else:
            documents.append(document)
        self._write(collection, documents)

    def query(
        self,
        collection: str,
        predicate: Callable[[dict[str, Any]], bool] | None = None,
        order_by: str | None = None,
    ) -> list[dict[str, Any]]:
        """
        Documents matching *predicate*, optionally sorted by a field.

        Documents missing the ``order_by`` field sort first.
        """
        documents = [d for d in self._read(collection) if predicate is None or predicate(d)]
        if order_by is not None:
            documents.sort(key=lambda d: (order_by in d, d.get(order_by, "")))
        return documents

    def delete(self, collection: str, key: str) -> bool:
        """Delete a document by id.  Returns False when it was not there."""
        documents = self._read(collection)
        kept = [d for d in documents if d["id"] != key]
        if len(kept) == len(documents):
            return False
        self._write(collection, kept)
        return True

    def clear(self, collection: str) -> None:
        """
        Remove every document of a collection (dangerous - use with caution).
        """
        path = self.collection_path(collection)
        if path.exists():
            path.write_text("")


class TrackerStore:
    """
    Typed access to settings, program state and workout history.

    Settings are migrated from the legacy shape on first load and written
    back, so later loads see the current shape.
    """

    def __init__(self, root: str | Path):
        self.documents = DocumentStore(root)
        self.root = self.documents.root

    def exists(self) -> bool:
        """True once a program state has been saved."""
        return self.documents.get(PROGRAM_STATE, PROGRAM_STATE_ID) is not None

    def load_settings(self) -> UserSettings:
        """
        Load user settings, migrating a legacy document once.

        Returns:
            Stored settings, or kg defaults when none are saved

        Raises:
            ValidationError: If the stored document is invalid
        """
        doc = self.documents.get(SETTINGS, SETTINGS_ID)
        if doc is None:
            return default_settings()

        doc, migrated = migrate_settings_document(doc)
        if migrated:
            logger.info("Migrated legacy settings in %s", self.documents.collection_path(SETTINGS))
            self.documents.put(SETTINGS, doc)
        return dict_to_user_settings(doc)

    def save_settings(self, settings: UserSettings) -> None:
        self.documents.put(SETTINGS, {"id": SETTINGS_ID, **user_settings_to_dict(settings)})

    def update_settings(self, **changes: Any) -> UserSettings:
        """
        Merge field changes into the stored settings and save.

        Args:
            **changes: UserSettings field names and new values

        Returns:
            The updated settings

        Raises:
            ValueError: If a field name is unknown or a value is invalid
        """
        settings = self.load_settings()
        unknown = [k for k in changes if not hasattr(settings, k)]
        if unknown:
            raise ValueError(f"Unknown settings field(s): {', '.join(unknown)}")

        updated = replace(settings, **changes)
        self.save_settings(updated)
        return updated

    def load_program_state(self) -> ProgramState | None:
        """
        Load the program state.

        Returns:
            ProgramState, or None when the program was never initialized

        Raises:
            ValidationError: If the stored document is invalid
        """
        doc = self.documents.get(PROGRAM_STATE, PROGRAM_STATE_ID)
        if doc is None:
            return None
        return dict_to_program_state(doc)

    def save_program_state(self, state: ProgramState) -> None:
        self.documents.put(PROGRAM_STATE, {"id": PROGRAM_STATE_ID, **program_state_to_dict(state)})
        logger.info("Saved program state (next %s, %d workouts)", state.next_workout_type, state.workout_count)

    def load_workouts(self) -> list[Workout]:
        """
        Load all workouts.

        Returns:
            List of Workout, sorted by date

        Raises:
            ValidationError: If a stored workout is invalid
        """
        workouts: list[Workout] = []
        for doc in self.documents.query(WORKOUTS, order_by="date"):
            try:
                workouts.append(dict_to_workout(doc))
            except (ValidationError, ValueError) as e:
                raise ValidationError(f"Invalid workout {doc.get('id')!r}: {e}") from e
        return workouts

    def save_workout(self, workout: Workout) -> None:
        self.documents.put(WORKOUTS, workout_to_dict(workout))
        logger.info("Saved workout %s (%s, %s)", workout.id, workout.type, workout.date)

    def reset(self) -> None:
        """
        Clear program state and workout history (settings are kept).
        """
        self.documents.clear(PROGRAM_STATE)
        self.documents.clear(WORKOUTS)
        logger.info("Reset program state and workout history in %s", self.root)


def get_default_data_dir() -> Path:
    """
    Get the default data directory.

    Returns:
        ``~/.gzclp-tracker``
    """
    return Path.home() / ".gzclp-tracker"
