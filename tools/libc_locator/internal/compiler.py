"""
Queries the system C compiler for libc locations.

Two invocations are used:

    <cc> -E -Wp,-v -xc <null device>       header search paths on stderr
    <cc> -print-file-name=<object>          resolved object path on stdout
"""
import logging
import ntpath
import posixpath

from ..core.errors import ErrorKind, FindError
from ..core.process import MAX_OUTPUT_BYTES, run_command
from . import fs_probe

logger = logging.getLogger(__name__)

FULL_PATH = "full_path"
ONLY_DIR = "only_dir"

STDLIB_MARKER = "stdlib.h"


class CompilerProber:
    def __init__(self, profile, cc, max_output_bytes=MAX_OUTPUT_BYTES):
        self.profile = profile
        self.cc = cc
        self.max_output_bytes = max_output_bytes

    def _run(self, args):
        return run_command([self.cc] + args, max_output_bytes=self.max_output_bytes)

    def search_paths(self):
        """
        Header search paths as listed by the preprocessor, lowest priority first.
        Every indented line of the verbose diagnostics is one directory.
        """
        result = self._run(["-E", "-Wp,-v", "-xc", self.profile.null_device])
        paths = []
        for line in result.stderr.splitlines():
            if line.startswith(" "):
                paths.append(line.lstrip(" "))
        logger.debug("%s reported %d search paths", self.cc, len(paths))
        return paths

    def find_include_dirs(self):
        """
        Returns (include_dir, sys_include_dir).

        Candidates are tried last-declared first since later entries take
        precedence. Stops once both marker files have been seen.
        """
        search_paths = self.search_paths()
        if not search_paths:
            raise FindError(ErrorKind.C_COMPILER_CANNOT_FIND_HEADERS, f"'{self.cc}' listed no include directories")

        sys_marker = self.profile.sys_include_marker
        include_dir = None
        sys_include_dir = None
        for search_path in reversed(search_paths):
            if not fs_probe.is_search_dir(search_path):
                continue

            if include_dir is None and fs_probe.has_file(search_path, STDLIB_MARKER):
                include_dir = search_path
            if sys_include_dir is None and fs_probe.has_file(search_path, sys_marker):
                sys_include_dir = search_path

            if include_dir is not None and sys_include_dir is not None:
                logger.debug("include_dir=%s sys_include_dir=%s", include_dir, sys_include_dir)
                return include_dir, sys_include_dir

        missing = STDLIB_MARKER if include_dir is None else sys_marker
        raise FindError(ErrorKind.LIBC_STDLIB_HEADER_NOT_FOUND, f"{missing} not found in {len(search_paths)} search paths")

    def print_file_name(self, object_name, want=FULL_PATH):
        """
        Asks the compiler where `object_name` lives. With want=ONLY_DIR the
        containing directory is returned instead of the file path.
        """
        result = self._run([f"-print-file-name={object_name}"])
        lines = [line for line in result.stdout.splitlines() if line]
        if not lines:
            raise FindError(ErrorKind.LIBC_RUNTIME_NOT_FOUND, f"'{self.cc}' printed nothing for {object_name}")
        resolved = lines[0]
        if want == FULL_PATH:
            return resolved

        pathmod = ntpath if self.profile.is_windows else posixpath
        dirname = pathmod.dirname(resolved)
        if not dirname:
            # An unresolved object comes back as its bare name
            raise FindError(ErrorKind.LIBC_RUNTIME_NOT_FOUND, f"{object_name} (compiler returned '{resolved}')")
        return dirname
