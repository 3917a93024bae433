"""
Reading and writing the persisted libc file.

The file is line oriented UTF-8 text of `name=value` pairs. Empty lines and
lines starting with `#` are comments. An empty value means the directory is
absent. All six field names must appear; unknown names are ignored.
"""
import logging

from .errors import ParseError, ValidationError
from .installation import FIELD_NAMES, LibcInstallation, validate

logger = logging.getLogger(__name__)

TEMPLATE = """\
# The directory that contains `stdlib.h`.
# On POSIX-like systems, include directories be found with: `cc -E -Wp,-v -xc /dev/null`
include_dir={include_dir}

# The system-specific include directory. May be the same as `include_dir`.
# On Windows it's the directory that includes `vcruntime.h`.
# On POSIX it's the directory that includes `sys/errno.h`.
sys_include_dir={sys_include_dir}

# The directory that contains `crt1.o` or `crt2.o`.
# On POSIX, can be found with `cc -print-file-name=crt1.o`.
# Not needed when targeting MacOS.
crt_dir={crt_dir}

# The directory that contains `crtbegin.o`.
# On POSIX, can be found with `cc -print-file-name=crtbegin.o`.
# Not needed when targeting MacOS.
static_crt_dir={static_crt_dir}

# The directory that contains `vcruntime.lib`.
# Only needed when targeting MSVC on Windows.
msvc_lib_dir={msvc_lib_dir}

# The directory that contains `kernel32.lib`.
# Only needed when targeting MSVC on Windows.
kernel32_lib_dir={kernel32_lib_dir}
"""


def parse(content, profile):
    """
    Parses libc file text into a LibcInstallation and validates it for `profile`.
    Raises ParseError on a malformed line, a missing field name, or a
    required field left empty.
    """
    values = {}
    for line in content.split("\n"):
        line = line.rstrip("\r")
        if not line or line.startswith("#"):
            continue
        name, sep, value = line.partition("=")
        if not sep:
            raise ParseError("missing equal sign after field name")
        if name not in FIELD_NAMES:
            logger.debug("Ignoring unknown libc field '%s'", name)
            continue
        if name in values:
            logger.debug("Ignoring duplicate libc field '%s'", name)
            continue
        values[name] = value or None

    for name in FIELD_NAMES:
        if name not in values:
            raise ParseError(f"missing field: {name}", field=name)

    installation = LibcInstallation(**values)
    try:
        validate(installation, profile)
    except ValidationError as e:
        raise ParseError(str(e), field=e.field) from e
    return installation


def parse_file(path, profile):
    with open(path, "r", encoding="utf-8") as f:
        try:
            content = f.read()
        except UnicodeDecodeError as e:
            raise ParseError(f"{path}: not valid UTF-8 (byte {e.start})") from e
    return parse(content, profile)


def render(installation):
    """Renders all six fields in canonical order, absent ones as `name=`."""
    values = {name: getattr(installation, name) or "" for name in FIELD_NAMES}
    return TEMPLATE.format(**values)


def write_file(installation, path):
    with open(path, "w", encoding="utf-8") as f:
        f.write(render(installation))
