"""Filesystem store for accepted quote submissions.

Layout per submission::

    <root>/<submission_id>/
        quote-request.pdf
        summary.txt
        form.json
        attachments/01-<name>, 02-<name>, ...

Records are written once and never updated or deleted here.
"""

import asyncio
import json
import logging
import re
import secrets
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping, Sequence

from mail.message import Attachment

logger = logging.getLogger(__name__)

PDF_FILENAME = "quote-request.pdf"
SUMMARY_FILENAME = "summary.txt"
FORM_FILENAME = "form.json"
ATTACHMENTS_DIRNAME = "attachments"

_UNSAFE_CHARS = re.compile(r"[^\w.\- ]", re.ASCII)
# Leaves room for the "NN-" prefix under the usual 255-byte name limit.
MAX_FILENAME_LENGTH = 200
MAX_EXTENSION_LENGTH = 16


class PersistenceError(Exception):
    """Raised when a submission cannot be written to storage."""


def new_submission_id(now: datetime | None = None) -> str:
    """Timestamp-based id with a random suffix, safe to use as a directory name."""
    now = now or datetime.now(timezone.utc)
    stamp = now.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    stamp = stamp.replace("+00:00", "Z")
    return f"{re.sub(r'[:.]', '-', stamp)}-{secrets.token_hex(3)}"


def sanitize_filename(name: str) -> str:
    """Replace anything outside word chars, dot, hyphen and space with ``_``.

    Long names are cut to ``MAX_FILENAME_LENGTH`` characters, keeping the
    extension when it is short enough to matter.
    """
    cleaned = _UNSAFE_CHARS.sub("_", name or "") or "file"
    if len(cleaned) <= MAX_FILENAME_LENGTH:
        return cleaned
    stem, dot, ext = cleaned.rpartition(".")
    if stem and len(ext) <= MAX_EXTENSION_LENGTH:
        return stem[: MAX_FILENAME_LENGTH - len(ext) - 1] + dot + ext
    return cleaned[:MAX_FILENAME_LENGTH]


def attachment_filename(index: int, name: str) -> str:
    """Numbered, sanitized name for the attachment at 1-based ``index``."""
    return f"{index:02d}-{sanitize_filename(name)}"


class SubmissionStore:
    """Persists submissions under a root directory, one directory per id."""

    def __init__(self, root: Path | str):
        self.root = Path(root)

    async def save(
        self,
        fields: Mapping,
        attachments: Sequence[Attachment],
        pdf: bytes,
        summary: str,
    ) -> str:
        """Write every artifact for one submission and return its id.

        Raises:
            PersistenceError: If any write fails. Nothing is left behind under
                the returned-id path in that case.
        """
        submission_id = new_submission_id()
        try:
            await asyncio.to_thread(
                self._write, submission_id, dict(fields), list(attachments), pdf, summary
            )
        except Exception as e:
            logger.exception("Failed to persist submission %s", submission_id)
            raise PersistenceError(f"Could not save submission: {e}") from e
        logger.info(
            "Saved submission %s (%d attachment%s) under %s",
            submission_id,
            len(attachments),
            "" if len(attachments) == 1 else "s",
            self.root,
        )
        return submission_id

    def path_for(self, submission_id: str) -> Path:
        return self.root / submission_id

    def _write(
        self,
        submission_id: str,
        fields: dict,
        attachments: list[Attachment],
        pdf: bytes,
        summary: str,
    ) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        staging = self.root / f".staging-{submission_id}"
        staging.mkdir()
        try:
            (staging / PDF_FILENAME).write_bytes(pdf)
            (staging / SUMMARY_FILENAME).write_text(summary, encoding="utf-8")
            (staging / FORM_FILENAME).write_text(
                json.dumps(fields, indent=2, ensure_ascii=False), encoding="utf-8"
            )
            files_dir = staging / ATTACHMENTS_DIRNAME
            files_dir.mkdir()
            for index, attachment in enumerate(attachments, start=1):
                (files_dir / attachment_filename(index, attachment.filename)).write_bytes(
                    attachment.content
                )
            staging.rename(self.path_for(submission_id))
        except BaseException:
            shutil.rmtree(staging, ignore_errors=True)
            raise
