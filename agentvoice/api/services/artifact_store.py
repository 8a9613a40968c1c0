# agentvoice/api/services/artifact_store.py
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredArtifact:
    name: str
    path: Path
    reference: str  # URL path the gateway serves the file under


class ArtifactStore:
    """
    Create-once audio sink.
    Files are named <uuid4 hex>.<ext> under `root` and served below `url_prefix`.
    No index, no cleanup.
    """

    def __init__(self, root: Path | str, url_prefix: str = "/public/audio"):
        self.root = Path(root).expanduser().resolve()
        self.url_prefix = "/" + url_prefix.strip("/")

    def ensure_root(self) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    def new_name(self, ext: str) -> str:
        return f"{uuid.uuid4().hex}.{ext.lstrip('.')}"

    def reference_for(self, name: str) -> str:
        return f"{self.url_prefix}/{name}"

    def save(self, data: bytes, ext: str = "mp3") -> StoredArtifact:
        """Write `data` under a fresh name. Raises OSError on any filesystem failure."""
        name = self.new_name(ext)
        path = self.root / name
        # "xb": never overwrite an existing artifact
        with path.open("xb") as f:
            f.write(data)
        artifact = StoredArtifact(name=name, path=path, reference=self.reference_for(name))
        log.info("event=artifact.saved name=%s bytes=%s", name, len(data))
        return artifact
