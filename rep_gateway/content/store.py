"""
Content pack store

Loads the static knowledge packs listed in ``packs.json`` once at startup,
checksums each one, and serves read-only lookups for the rest of the process.

Manifest format::

    {
      "packs": [
        {"id": "resume", "path": "content/resume.md", "topicHints": ["experience", "skills"]}
      ]
    }
"""

import hashlib
import json
import threading
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from loguru import logger

from rep_gateway.config.constants import PACK_MANIFEST_FILENAME
from rep_gateway.models.domain import ContentDocument
from rep_gateway.utils.errors import ContentLoadError


class ContentStore:
    """In-memory map of pack id to ContentDocument"""

    def __init__(self, content_dir: str | Path):
        self.content_dir = Path(content_dir)
        self._documents: Dict[str, ContentDocument] = {}
        self._lock = threading.Lock()

    def load(self) -> int:
        """
        (Re)load every pack in the manifest.

        Packs whose file cannot be read are logged and skipped. A missing or
        malformed manifest raises ContentLoadError and leaves the current
        documents untouched.

        Returns:
            Number of packs loaded
        """
        manifest_path = self.content_dir / PACK_MANIFEST_FILENAME
        try:
            manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
        except OSError as e:
            raise ContentLoadError(f"failed to read manifest {manifest_path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ContentLoadError(f"failed to parse manifest {manifest_path}: {e}") from e

        documents: Dict[str, ContentDocument] = {}
        for entry in manifest.get("packs", []):
            pack_id = entry.get("id")
            raw_path = entry.get("path", "")
            if not pack_id or not raw_path:
                logger.warning(f"Skipping manifest entry without id/path: {entry}")
                continue

            pack_path = self._resolve_path(raw_path)
            try:
                data = pack_path.read_bytes()
                content = data.decode("utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.error(f"Failed to load pack '{pack_id}' from {pack_path}: {e}")
                continue

            checksum = hashlib.sha256(data).hexdigest()
            documents[pack_id] = ContentDocument(
                id=pack_id,
                path=str(pack_path),
                content=content,
                checksum=checksum,
                topic_hints=list(entry.get("topicHints", [])),
            )
            logger.info(f"Loaded content pack '{pack_id}' ({len(data)} bytes, checksum {checksum[:8]})")

        with self._lock:
            self._documents = documents

        logger.info(f"Content packs loaded: {len(documents)}")
        return len(documents)

    def _resolve_path(self, raw_path: str) -> Path:
        """Manifest paths are relative to the content dir; a leading 'content/' is tolerated."""
        path = Path(raw_path)
        if path.is_absolute():
            return path
        if path.parts and path.parts[0] == "content":
            path = Path(*path.parts[1:])
        return self.content_dir / path

    def get_document(self, doc_id: str) -> Tuple[Optional[ContentDocument], bool]:
        with self._lock:
            document = self._documents.get(doc_id)
        return document, document is not None

    def get_all_documents(self) -> List[ContentDocument]:
        """All loaded packs, in manifest order."""
        with self._lock:
            return list(self._documents.values())

    def get_documents_by_hints(self, hints: Sequence[str]) -> List[ContentDocument]:
        """Packs with a topic hint that contains, or is contained in, any of ``hints`` (case-insensitive)."""
        lower_hints = [hint.lower() for hint in hints]
        matches = []
        for document in self.get_all_documents():
            for pack_hint in document.topic_hints:
                pack_hint_lower = pack_hint.lower()
                if any(hint in pack_hint_lower or pack_hint_lower in hint for hint in lower_hints):
                    matches.append(document)
                    break
        return matches

    def get_checksums(self) -> Dict[str, str]:
        with self._lock:
            return {doc_id: doc.checksum for doc_id, doc in self._documents.items()}
