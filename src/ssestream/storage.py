import logging
from pathlib import Path

from filelock import FileLock

logger = logging.getLogger(__name__)


class LastIdStore:
    """
    把 last event id 存在一个纯文本文件里，整个文件内容就是 id

    读写都持有 ``<path>.lock`` 文件锁，超时抛出 :class:`filelock.Timeout`
    """

    def __init__(self, path: str | Path, lock_timeout: float = 5.0):
        self._path = Path(path)
        self._lock = FileLock(str(self._path) + ".lock", timeout=lock_timeout)

    @property
    def path(self):
        return self._path

    def load(self) -> str | None:
        with self._lock:
            if not self._path.exists():
                logger.debug("no last id file at %s", self._path)
                return None
            last_id = self._path.read_text(encoding="utf-8").strip()
        logger.debug("loaded last id %r from %s", last_id, self._path)
        return last_id or None

    def save(self, last_id: str | None):
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._lock:
            self._path.write_text(last_id or "", encoding="utf-8")
        logger.debug("saved last id %r to %s", last_id, self._path)
