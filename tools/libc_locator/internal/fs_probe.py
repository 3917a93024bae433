import os
import errno
import stat
import logging

from ..core.errors import ErrorKind, FindError

logger = logging.getLogger(__name__)

# Errors meaning "this candidate is not a usable directory": skip it.
SKIPPABLE_ERRNOS = {errno.ENOENT, errno.ENOTDIR, errno.ENODEV}


def is_search_dir(path):
    """
    True if `path` is an existing directory, False if it is missing or not a
    directory. Any other OS error raises FindError(FILE_SYSTEM).
    """
    try:
        st = os.stat(path)
    except OSError as e:
        if e.errno in SKIPPABLE_ERRNOS:
            logger.debug("Skipping %s: %s", path, e.strerror)
            return False
        raise FindError(ErrorKind.FILE_SYSTEM, f"{path}: {e}") from e
    if not stat.S_ISDIR(st.st_mode):
        logger.debug("Skipping %s: not a directory", path)
        return False
    return True


def has_file(directory, relative_name):
    """True if `relative_name` exists inside `directory`."""
    path = os.path.join(directory, relative_name)
    try:
        os.stat(path)
    except OSError as e:
        if e.errno in (errno.ENOENT, errno.ENOTDIR):
            return False
        raise FindError(ErrorKind.FILE_SYSTEM, f"{path}: {e}") from e
    return True
