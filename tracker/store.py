from __future__ import annotations

import json
import logging
import os
import stat
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Union

from .errors import IOFault

logger = logging.getLogger(__name__)

Document = Dict[str, Any]


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def empty_document() -> Document:
    return {"programmes": []}


class Store:
    """
    JSON file store holding the whole `{"programmes": [...]}` document.

    Every access goes through one re-entrant lock, so a
    load-mutate-save cycle in `transaction()` cannot interleave with
    another thread's cycle on the same Store.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.RLock()

    def _ensure(self) -> None:
        if self.path.exists():
            return
        logger.info("Creating data file %s", self.path)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise IOFault(f"Cannot create data directory: {exc}") from exc
        self.save(empty_document())

    def load(self) -> Document:
        """Read and parse the document, creating an empty one if absent."""
        with self._lock:
            self._ensure()
            try:
                raw = self.path.read_text(encoding="utf-8")
            except OSError as exc:
                raise IOFault(f"Cannot read data file: {exc}") from exc
            document = json.loads(raw)
            logger.debug("Loaded %s (%d programmes)", self.path, len(document.get("programmes", [])))
            return document

    def _file_mode(self) -> int:
        # mkstemp creates 0600 files; keep the existing mode, else honour the umask.
        try:
            return stat.S_IMODE(self.path.stat().st_mode)
        except FileNotFoundError:
            return 0o666 & ~_current_umask()

    def save(self, document: Document) -> None:
        """Overwrite the file with `document` via a temp file + rename."""
        payload = json.dumps(document, indent=2, ensure_ascii=False)
        with self._lock:
            fd, tmp_name = None, None
            try:
                fd, tmp_name = tempfile.mkstemp(
                    prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
                )
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(payload)
                os.chmod(tmp_name, self._file_mode())
                os.replace(tmp_name, self.path)
            except OSError as exc:
                if tmp_name is not None and os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise IOFault(f"Cannot write data file: {exc}") from exc

    def read(self) -> Document:
        with self._lock:
            return self.load()

    @contextmanager
    def transaction(self) -> Iterator[Document]:
        """
        Hold the lock across load, the caller's mutation and save.
        Nothing is written if the block raises.
        """
        with self._lock:
            document = self.load()
            yield document
            self.save(document)
