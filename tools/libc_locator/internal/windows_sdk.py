"""
Windows SDK lookup and the UCRT / um directory probes built on it.

The resolver produces a WindowsSdk handle holding up to two (root, version)
pairs, the Windows 10 SDK first and the 8.1 SDK second, plus the MSVC
library directory when known.
"""
import os
import logging
import ntpath
from dataclasses import dataclass
from enum import Enum

from ..core.errors import ErrorKind, FindError
from . import fs_probe

logger = logging.getLogger(__name__)

ARCH_SUB_DIRS = {
    "i386": "x86",
    "x86_64": "x64",
    "arm": "arm",
    "armeb": "arm",
}

INSTALLED_ROOTS_KEY = r"SOFTWARE\Microsoft\Windows Kits\Installed Roots"
SDK81_VERSION = "winv6.3"
MAX_PATH = 260


class SdkStatus(Enum):
    FOUND = "found"
    OUT_OF_MEMORY = "out of memory"
    NOT_FOUND = "not found"
    PATH_TOO_LONG = "path too long"


@dataclass(frozen=True)
class Search:
    path: str
    version: str


class WindowsSdk:
    """Handle returned by find_windows_sdk. Release with close() or a with block."""

    def __init__(self, path10=None, version10=None, path81=None, version81=None, msvc_lib_dir=None):
        self.path10 = path10
        self.version10 = version10
        self.path81 = path81
        self.version81 = version81
        self.msvc_lib_dir = msvc_lib_dir
        self.closed = False

    def searches(self):
        """(path, version) pairs in preference order; incomplete pairs are left out."""
        result = []
        if self.path10 and self.version10:
            result.append(Search(self.path10, self.version10))
        if self.path81 and self.version81:
            result.append(Search(self.path81, self.version81))
        return result

    def close(self):
        if self.closed:
            raise RuntimeError("Windows SDK handle released twice")
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


def _read_installed_root(value_name):
    import winreg
    try:
        with winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, INSTALLED_ROOTS_KEY) as key:
            value, _ = winreg.QueryValueEx(key, value_name)
    except OSError:
        return None
    return value.rstrip("\\")


def _latest_sdk10_version(root):
    lib_dir = os.path.join(root, "Lib")
    try:
        versions = [v for v in os.listdir(lib_dir) if v.startswith("10.")]
    except OSError:
        return None
    if not versions:
        return None
    return max(versions, key=lambda v: [int(p) if p.isdigit() else 0 for p in v.split(".")])


def _msvc_lib_dir_from_env(profile, env):
    tools_dir = env.get("VCToolsInstallDir")
    arch = ARCH_SUB_DIRS.get(profile.arch)
    if not tools_dir or not arch:
        return None
    return ntpath.join(tools_dir.rstrip("\\"), "lib", arch)


def find_windows_sdk(profile, config=None, env=None):
    """
    Resolves the installed Windows SDKs.

    The config `windows_sdk` table is used as is when present. Otherwise, on a
    Windows host, the registry Installed Roots are read. Returns
    (SdkStatus, WindowsSdk or None).
    """
    env = os.environ if env is None else env
    table = (config or {}).get("windows_sdk")
    if table:
        sdk = WindowsSdk(
            path10=table.get("path10"),
            version10=table.get("version10"),
            path81=table.get("path81"),
            version81=table.get("version81"),
            msvc_lib_dir=table.get("msvc_lib_dir") or _msvc_lib_dir_from_env(profile, env),
        )
    elif os.name == "nt":
        path10 = _read_installed_root("KitsRoot10")
        path81 = _read_installed_root("KitsRoot81")
        sdk = WindowsSdk(
            path10=path10,
            version10=_latest_sdk10_version(path10) if path10 else None,
            path81=path81,
            version81=SDK81_VERSION if path81 else None,
            msvc_lib_dir=_msvc_lib_dir_from_env(profile, env),
        )
    else:
        return SdkStatus.NOT_FOUND, None

    if not sdk.searches():
        return SdkStatus.NOT_FOUND, None
    for search in sdk.searches():
        if len(search.path) + len(search.version) >= MAX_PATH:
            return SdkStatus.PATH_TOO_LONG, None
    logger.debug("Windows SDK searches: %s", sdk.searches())
    return SdkStatus.FOUND, sdk


def arch_sub_dir(profile):
    try:
        return ARCH_SUB_DIRS[profile.arch]
    except KeyError:
        raise FindError(ErrorKind.UNSUPPORTED_ARCHITECTURE, profile.arch) from None


def _first_match(sdk, template, marker):
    for search in sdk.searches():
        candidate = template.format(path=search.path, version=search.version)
        if not fs_probe.is_search_dir(candidate):
            continue
        if not fs_probe.has_file(candidate, marker):
            logger.debug("%s has no %s", candidate, marker)
            continue
        return candidate
    return None


def find_include_dir(sdk, profile):
    found = _first_match(sdk, "{path}\\Include\\{version}\\ucrt", "stdlib.h")
    if found is None:
        raise FindError(ErrorKind.LIBC_STDLIB_HEADER_NOT_FOUND, "no ucrt include directory in the Windows SDK")
    return found


def find_crt_dir(sdk, profile):
    arch = arch_sub_dir(profile)
    found = _first_match(sdk, "{path}\\Lib\\{version}\\ucrt\\" + arch, "ucrt.lib")
    if found is None:
        raise FindError(ErrorKind.LIBC_RUNTIME_NOT_FOUND, f"ucrt.lib for {arch}")
    return found


def find_kernel32_lib_dir(sdk, profile):
    arch = arch_sub_dir(profile)
    found = _first_match(sdk, "{path}\\Lib\\{version}\\um\\" + arch, "kernel32.lib")
    if found is None:
        raise FindError(ErrorKind.LIBC_KERNEL32_LIB_NOT_FOUND, f"kernel32.lib for {arch}")
    return found


def find_msvc_lib_dir(sdk, profile):
    lib_dir = sdk.msvc_lib_dir
    if not lib_dir or not fs_probe.is_search_dir(lib_dir) or not fs_probe.has_file(lib_dir, "vcruntime.lib"):
        raise FindError(ErrorKind.MSVC_RUNTIME_NOT_FOUND, lib_dir or "MSVC library directory unknown")
    return lib_dir


def find_msvc_include_dir(sdk, profile):
    """The MSVC `include` directory sits two levels above `lib\\<arch>`."""
    lib_dir = sdk.msvc_lib_dir
    if not lib_dir:
        raise FindError(ErrorKind.MSVC_HEADERS_NOT_FOUND, "MSVC library directory unknown")
    tools_dir = ntpath.dirname(ntpath.dirname(lib_dir.rstrip("\\")))
    include_dir = ntpath.join(tools_dir, "include")
    if not fs_probe.is_search_dir(include_dir) or not fs_probe.has_file(include_dir, "vcruntime.h"):
        raise FindError(ErrorKind.MSVC_HEADERS_NOT_FOUND, include_dir)
    return include_dir
