from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from uuid import UUID

from pydantic import ValidationError as ModelValidationError

from .config import get_settings
from .errors import PersistenceError
from .types import SubmissionRecord
from .validation import require_payload


logger = logging.getLogger(__name__)


def submissions_root(data_dir: Path | None = None) -> Path:
    root = (data_dir or get_settings().data_dir) / 'submissions'
    root.mkdir(parents=True, exist_ok=True)
    return root


def _safe_submission_id(submission_id: UUID | str) -> str:
    if isinstance(submission_id, UUID):
        return str(submission_id)
    token = str(submission_id or '').strip()
    if not token:
        raise ValueError('submission_id is required')
    try:
        return str(UUID(token))
    except Exception as exc:
        raise ValueError(f'invalid submission_id: {submission_id}') from exc


def write_json_atomic(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + '.tmp')
    tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding='utf-8')
    tmp.replace(path)


def read_json(path: Path) -> dict[str, Any]:
    return json.loads(path.read_text(encoding='utf-8'))


def append_event(root: Path, event: str, **extra: Any) -> None:
    now = datetime.now(timezone.utc).isoformat()
    row = {
        'ts': now,
        'event': event,
        **extra,
    }
    events_file = root / 'events.jsonl'
    events_file.parent.mkdir(parents=True, exist_ok=True)
    with events_file.open('a', encoding='utf-8') as f:
        f.write(json.dumps(row, ensure_ascii=False) + '\n')


class SubmissionStore:
    """Stores raw form submissions verbatim, one JSON document per submission."""

    def __init__(self, root: Path | None = None):
        self._root = root

    @property
    def root(self) -> Path:
        if self._root is None:
            self._root = submissions_root()
        self._root.mkdir(parents=True, exist_ok=True)
        return self._root

    def path_for(self, submission_id: UUID | str) -> Path:
        return self.root / f'{_safe_submission_id(submission_id)}.json'

    def save(self, data: Any) -> SubmissionRecord:
        payload = require_payload(data)
        record = SubmissionRecord(data=payload)
        try:
            write_json_atomic(self.path_for(record.id), record.model_dump(mode='json'))
            append_event(self.root, 'submission_saved', submission_id=str(record.id))
        except (OSError, TypeError, ValueError) as exc:
            raise PersistenceError(f'Failed to store submission: {exc}') from exc
        logger.info('Submission saved with ID: %s', record.id)
        return record

    def load(self, submission_id: UUID | str) -> SubmissionRecord | None:
        try:
            path = self.path_for(submission_id)
        except ValueError:
            return None
        if not path.exists():
            return None
        try:
            return SubmissionRecord.model_validate(read_json(path))
        except (json.JSONDecodeError, ModelValidationError) as exc:
            logger.warning('Unreadable submission %s: %s', path, exc)
            return None

    def list_ids(self) -> list[str]:
        return sorted(path.stem for path in self.root.glob('*.json'))
