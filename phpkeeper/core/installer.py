"""Running ``composer update`` after the manifest has been rewritten."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import Optional, Sequence, Union

from phpkeeper.constants import COMPOSER_EXECUTABLE
from phpkeeper.utils.logger import get_logger

logger = get_logger("installer")


def run_composer_update(
    cwd: Union[str, Path],
    *,
    executable: str = COMPOSER_EXECUTABLE,
    extra_args: Sequence[str] = (),
) -> bool:
    """Run ``composer update`` in *cwd* with inherited stdio.

    Args:
        cwd: Project directory holding ``composer.json``.
        executable: Composer binary name or path.
        extra_args: Additional arguments appended after ``update``.

    Returns:
        ``True`` if Composer exited with status 0. A missing executable or
        a failure to start the process yields ``False``.
    """
    resolved: Optional[str] = shutil.which(executable)
    if resolved is None:
        logger.error("Composer executable not found: %s", executable)
        return False

    command = [resolved, "update", *extra_args]
    logger.info("Running %s in %s", " ".join(command), cwd)

    try:
        completed = subprocess.run(command, cwd=str(cwd), check=False)
    except OSError as exc:
        logger.error("Could not start composer: %s", exc)
        return False

    if completed.returncode != 0:
        logger.warning("composer update exited with status %d", completed.returncode)
    return completed.returncode == 0
