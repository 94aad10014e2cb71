"""Read and write the host application's HTML document."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from bs4 import BeautifulSoup, Tag

from .schema import HostSchema

log = logging.getLogger(__name__)


def _file_state(path: Path) -> tuple[int, int] | None:
    try:
        st = path.stat()
    except OSError:
        return None
    return st.st_mtime_ns, st.st_size


class HostDocument:
    """A parsed snapshot of the host page, resolved through a HostSchema."""

    def __init__(self, soup: BeautifulSoup, schema: HostSchema | None = None):
        self.soup = soup
        self.schema = schema or HostSchema()
        self.source: Path | None = None
        self._source_state: tuple[int, int] | None = None

    @classmethod
    def from_html(cls, html: str, schema: HostSchema | None = None) -> HostDocument:
        return cls(BeautifulSoup(html, "html.parser"), schema)

    @classmethod
    def load(cls, path: Path, schema: HostSchema | None = None) -> HostDocument | None:
        """Parse the document at *path*. Returns None if it cannot be read."""
        path = Path(path)
        state = _file_state(path)
        try:
            html = path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            log.warning("Host document %s is not valid UTF-8, leaving it alone", path)
            return None
        except OSError:
            log.warning("Could not read host document %s", path)
            return None
        document = cls.from_html(html, schema)
        document.source = path
        document._source_state = state
        return document

    def root(self) -> Tag | None:
        return self.soup.select_one(self.schema.root_selector)

    def watch_scope(self) -> Tag | None:
        return self.soup.select_one(self.schema.watch_scope_selector)

    def anchor(self) -> Tag | None:
        return self.soup.select_one(self.schema.anchor_selector)

    def panel(self) -> Tag | None:
        return self.soup.find(id=self.schema.panel_id)

    def scope_snapshot(self) -> str | None:
        """Serialized watch scope, covering both its structure and its text."""
        scope = self.watch_scope()
        if scope is None:
            return None
        return str(scope)

    def changed_on_disk(self) -> bool:
        """True if the file this document was loaded from has been rewritten since."""
        if self.source is None:
            return False
        return _file_state(self.source) != self._source_state

    def save(self, path: Path, *, if_unchanged: bool = False) -> bool:
        """Atomically write the serialized tree to *path*.

        With *if_unchanged*, nothing is written when the source file changed
        after it was loaded. Returns whether the file was replaced.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(str(self.soup))
            if if_unchanged and self.changed_on_disk():
                log.info("Host document %s changed while updating, not overwriting", self.source)
                os.unlink(tmp_name)
                return False
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        log.debug("Wrote host document %s", path)
        return True
