from enum import Enum


class ErrorKind(Enum):
    FILE_SYSTEM = "file system error"
    UNABLE_TO_SPAWN_C_COMPILER = "unable to spawn C compiler"
    C_COMPILER_EXIT_CODE = "C compiler exited with an error"
    C_COMPILER_CRASHED = "C compiler crashed"
    C_COMPILER_CANNOT_FIND_HEADERS = "C compiler reported no header search paths"
    LIBC_RUNTIME_NOT_FOUND = "libc runtime object not found"
    LIBC_STDLIB_HEADER_NOT_FOUND = "libc stdlib.h header not found"
    LIBC_KERNEL32_LIB_NOT_FOUND = "kernel32.lib not found"
    MSVC_RUNTIME_NOT_FOUND = "vcruntime.lib not found"
    MSVC_HEADERS_NOT_FOUND = "vcruntime.h not found"
    UNSUPPORTED_ARCHITECTURE = "unsupported architecture"
    WINDOWS_SDK_NOT_FOUND = "Windows SDK not found"


class FindError(Exception):
    """A libc directory could not be determined."""

    def __init__(self, kind, detail=None):
        self.kind = kind
        self.detail = detail
        message = kind.value if not detail else f"{kind.value}: {detail}"
        super().__init__(message)


class ValidationError(Exception):
    """A field required on the target platform is absent."""

    def __init__(self, field, message):
        self.field = field
        super().__init__(message)


class ParseError(Exception):
    """A persisted libc file is malformed or incomplete."""

    def __init__(self, message, field=None):
        self.field = field
        super().__init__(message)
