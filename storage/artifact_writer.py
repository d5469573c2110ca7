"""
Artifact Writer
Persists report payloads as files named after their report
"""
import asyncio
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Union

from utils.exceptions import ArtifactWriteError


logger = logging.getLogger(__name__)


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def _target_mode(target: Path, umask: int) -> int:
    """Mode of the file being replaced, else what a plain create would get."""
    try:
        return stat.S_IMODE(target.stat().st_mode)
    except FileNotFoundError:
        return 0o666 & ~umask


class ArtifactWriter:
    """
    Writes one file per report name under a destination directory.
    
    The same name always maps to the same path, and each write replaces
    the previous file as a whole (temp file + ``os.replace``), so a
    shorter payload never leaves bytes of an older one behind.
    """
    
    def __init__(self, base_dir: Union[str, Path], suffix: str = ".json"):
        self.base_dir = Path(base_dir)
        self.suffix = suffix
        # read once here; os.umask is process-wide and writes run in threads
        self._umask = _current_umask()
    
    def path_for(self, name: str) -> Path:
        """Target path of the artifact called ``name``."""
        return self.base_dir / f"{name}{self.suffix}"
    
    async def write(self, name: str, payload: bytes) -> Path:
        """
        Create or overwrite the artifact ``name`` with ``payload``.
        
        Raises:
            ArtifactWriteError: the file could not be written
        """
        return await asyncio.to_thread(self._write_sync, name, payload)
    
    def _write_sync(self, name: str, payload: bytes) -> Path:
        target = self.path_for(name)
        tmp_path = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=f".{name}.", suffix=".tmp", dir=target.parent)
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
            os.chmod(tmp_path, _target_mode(target, self._umask))
            os.replace(tmp_path, target)
            tmp_path = None
        except OSError as e:
            raise ArtifactWriteError(f"Failed to write {target}: {e}", path=str(target)) from e
        finally:
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    logger.warning(f"Could not remove temp file {tmp_path}")
        
        logger.debug(f"Wrote {len(payload)} bytes to {target}")
        return target
