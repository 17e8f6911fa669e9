"""
Local-disk attachment store, used when S3 is disabled.
"""
from pathlib import Path
from typing import Optional

from core.logger import logger

LOCAL_SCHEME = "local://"


class LocalBlobStore:
    """Stores attachments under a base directory; references look like local://<key>."""

    def __init__(self, base_dir: Path):
        self.base_dir = Path(base_dir).resolve()
        self.base_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"Local attachment storage at {self.base_dir}")

    def put(self, data: bytes, key: str, content_type: Optional[str] = None) -> str:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.info(f"Stored attachment: {key} ({len(data)} bytes)")
        return f"{LOCAL_SCHEME}{key}"

    def delete(self, reference: str) -> None:
        path = self._path(self._key(reference))
        if path.exists():
            path.unlink()
            logger.info(f"Deleted attachment: {reference}")

    def read(self, reference: str) -> bytes:
        return self._path(self._key(reference)).read_bytes()

    def url_for(self, reference: str) -> Optional[str]:
        # Served through the API, never directly from disk
        return None

    def _key(self, reference: str) -> str:
        ref = (reference or "").strip()
        return ref[len(LOCAL_SCHEME):] if ref.startswith(LOCAL_SCHEME) else ref

    def _path(self, key: str) -> Path:
        path = (self.base_dir / key).resolve()
        if self.base_dir not in path.parents:
            raise ValueError(f"Invalid attachment key: {key}")
        return path
