import platform
import sys
import sysconfig
from dataclasses import dataclass, replace

# sys.platform prefix -> os name
OS_NAMES = [
    ("linux", "linux"),
    ("win32", "windows"),
    ("cygwin", "windows"),
    ("darwin", "macos"),
    ("freebsd", "freebsd"),
    ("netbsd", "netbsd"),
    ("dragonfly", "dragonfly"),
]

ARCH_ALIASES = {
    "amd64": "x86_64",
    "x64": "x86_64",
    "x86": "i386",
    "i486": "i386",
    "i586": "i386",
    "i686": "i386",
    "arm64": "aarch64",
    "armv7l": "arm",
    "armv6l": "arm",
}


@dataclass(frozen=True)
class PlatformProfile:
    """
    The target a libc installation is resolved for.
    Passed to every component that behaves differently per platform.
    """
    os: str
    abi: str
    arch: str

    @property
    def is_windows(self):
        return self.os == "windows"

    @property
    def is_darwin(self):
        return self.os == "macos"

    @property
    def is_gnu(self):
        return self.abi == "gnu"

    @property
    def null_device(self):
        return "nul" if self.is_windows else "/dev/null"

    @property
    def default_cc(self):
        return "cc.exe" if self.is_windows else "cc"

    @property
    def sys_include_marker(self):
        return "sys\\types.h" if self.is_windows else "sys/errno.h"

    @property
    def tag(self):
        return f"{self.os}-{self.abi}"

    def with_overrides(self, overrides):
        """Returns a copy with any of os/abi/arch replaced from a mapping."""
        if not overrides:
            return self
        changes = {k: str(v) for k, v in overrides.items() if k in ("os", "abi", "arch") and v}
        return replace(self, **changes)

    def __str__(self):
        return f"{self.arch}-{self.os}-{self.abi}"


def normalize_arch(machine):
    machine = (machine or "").lower()
    return ARCH_ALIASES.get(machine, machine)


def detect_os(sys_platform):
    for prefix, name in OS_NAMES:
        if sys_platform.startswith(prefix):
            return name
    # Unknown POSIX flavour: keep the platform prefix without version digits
    return sys_platform.rstrip("0123456789") or sys_platform


def detect_abi(os_name, build_platform):
    if os_name == "windows":
        # MinGW and Cygwin interpreters report e.g. 'mingw_x86_64' / 'cygwin-3.4-x86_64'
        if build_platform.startswith(("mingw", "cygwin")):
            return "gnu"
        return "msvc"
    if os_name == "linux":
        return "gnu"
    return "none"


def host_profile(overrides=None):
    """Builds the profile of the running host, optionally overridden by config."""
    os_name = detect_os(sys.platform)
    profile = PlatformProfile(
        os=os_name,
        abi=detect_abi(os_name, sysconfig.get_platform()),
        arch=normalize_arch(platform.machine()),
    )
    return profile.with_overrides(overrides)
