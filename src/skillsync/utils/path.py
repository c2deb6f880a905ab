import os
import shutil
import tempfile
from collections.abc import Iterable, Sequence
from pathlib import Path

from loguru import logger


def expand_path(raw: str | Path, base: Path | None = None) -> Path:
    """
    Expand ``~``, ``~/...`` and relative forms into an absolute path.

    Relative paths are resolved against ``base``, or the process working directory.
    """
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (base if base is not None else Path.cwd()) / path
    return Path(os.path.normpath(path))


def find_repo_root(start_dir: Path) -> Path | None:
    """Return the nearest ancestor of ``start_dir`` (inclusive) that holds a ``.git`` entry."""
    current = start_dir
    while True:
        if (current / ".git").exists():
            return current
        parent = current.parent
        if parent == current:
            return None
        current = parent


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """
    Write ``data`` to ``path`` through a sibling temporary file and an atomic rename.

    The target is either untouched or fully replaced; on failure the temporary
    file is removed and the original exception propagates.
    """
    atomic_write_all([(path, data)])


def atomic_write_all(files: Sequence[tuple[Path, bytes | Path]]) -> None:
    """
    Write several files, staging every one of them before any target is replaced.

    Each value is either the new content or a file whose bytes are copied. New
    files copied from a source keep its permission bits; existing targets keep
    theirs. If staging fails, no target is touched.
    """
    staged: list[tuple[Path, Path]] = []
    try:
        for path, data in files:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
            tmp_path = Path(tmp_name)
            staged.append((tmp_path, path))
            with os.fdopen(fd, "wb") as f:
                if isinstance(data, Path):
                    with data.open("rb") as src:
                        shutil.copyfileobj(src, f)
                else:
                    f.write(data)
                f.flush()
                os.fsync(f.fileno())
            if path.exists():
                os.chmod(tmp_path, path.stat().st_mode & 0o777)
            elif isinstance(data, Path):
                os.chmod(tmp_path, data.stat().st_mode & 0o777)
        while staged:
            tmp_path, path = staged[0]
            os.replace(tmp_path, path)
            staged.pop(0)
    except BaseException:
        _discard(tmp_path for tmp_path, _ in staged)
        raise


def _discard(tmp_paths: Iterable[Path]) -> None:
    for tmp_path in tmp_paths:
        try:
            tmp_path.unlink(missing_ok=True)
        except OSError as cleanup_error:
            logger.warning(
                "Failed to remove temporary file {path}: {error}",
                path=tmp_path,
                error=cleanup_error,
            )
