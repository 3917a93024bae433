"""
Finds the native libc installation by running independent probes in parallel.

Each probe writes a disjoint set of fields on the shared LibcInstallation.
All probes in a batch run to completion; afterwards the first failure in
submission order is raised. Fields set by successful probes are kept.
"""
import logging
from concurrent.futures import ThreadPoolExecutor, wait

from ..core.config import resolve_cc
from ..core.errors import ErrorKind, FindError
from ..core.installation import LibcInstallation
from ..core.process import MAX_OUTPUT_BYTES
from . import windows_sdk
from .compiler import ONLY_DIR, CompilerProber

logger = logging.getLogger(__name__)

BSD_CRT_DIR = "/usr/lib"
CRT_OBJECT = "crt1.o"
STATIC_CRT_OBJECT = "crtbegin.o"


def run_batch(probes):
    """
    Runs every callable concurrently and waits for all of them.
    Raises the first exception in submission order, if any.
    """
    with ThreadPoolExecutor(max_workers=len(probes)) as pool:
        futures = [pool.submit(probe) for probe in probes]
        wait(futures)
    for future in futures:
        error = future.exception()
        if error is not None:
            raise error


class NativeDetector:
    def __init__(self, profile, cc=None, config=None, env=None, sdk_resolver=None):
        self.profile = profile
        self.config = config or {}
        self.prober = CompilerProber(
            profile,
            resolve_cc(profile, explicit=cc, env=env, config=self.config),
            max_output_bytes=self.config.get("max_output_bytes", MAX_OUTPUT_BYTES),
        )
        self.env = env
        self.sdk_resolver = sdk_resolver or windows_sdk.find_windows_sdk

    # POSIX-style probes, also used for MinGW

    def _include_dir_posix(self, installation):
        installation.include_dir, installation.sys_include_dir = self.prober.find_include_dirs()

    def _crt_dir_posix(self, installation):
        installation.crt_dir = self.prober.print_file_name(CRT_OBJECT, ONLY_DIR)

    def _static_crt_dir_posix(self, installation):
        installation.static_crt_dir = self.prober.print_file_name(STATIC_CRT_OBJECT, ONLY_DIR)

    # Windows SDK probes

    def _sdk_probe(self, installation, field, finder, sdk):
        def probe():
            setattr(installation, field, finder(sdk, self.profile))
        return probe

    def _find_msvc(self, installation):
        status, sdk = self.sdk_resolver(self.profile, config=self.config, env=self.env)
        if status == windows_sdk.SdkStatus.OUT_OF_MEMORY:
            raise MemoryError("out of memory while resolving the Windows SDK")
        if status != windows_sdk.SdkStatus.FOUND:
            raise FindError(ErrorKind.WINDOWS_SDK_NOT_FOUND, status.value)

        with sdk:
            run_batch([
                self._sdk_probe(installation, "sys_include_dir", windows_sdk.find_msvc_include_dir, sdk),
                self._sdk_probe(installation, "msvc_lib_dir", windows_sdk.find_msvc_lib_dir, sdk),
                self._sdk_probe(installation, "kernel32_lib_dir", windows_sdk.find_kernel32_lib_dir, sdk),
                self._sdk_probe(installation, "include_dir", windows_sdk.find_include_dir, sdk),
                self._sdk_probe(installation, "crt_dir", windows_sdk.find_crt_dir, sdk),
            ])

    def find_native(self, installation=None):
        """
        Populates and returns a LibcInstallation for the profile. The result is
        not validated; on macOS crt_dir is left for the user to supply.
        """
        installation = installation if installation is not None else LibcInstallation()
        profile = self.profile
        logger.debug("Detecting native libc for %s", profile)

        if profile.is_windows:
            if profile.is_gnu:
                run_batch([
                    lambda: self._include_dir_posix(installation),
                    lambda: self._crt_dir_posix(installation),
                    lambda: self._static_crt_dir_posix(installation),
                ])
            else:
                self._find_msvc(installation)
        else:
            probes = [lambda: self._include_dir_posix(installation)]
            if profile.os in ("freebsd", "netbsd"):
                installation.crt_dir = BSD_CRT_DIR
            elif profile.os in ("linux", "dragonfly"):
                probes.append(lambda: self._crt_dir_posix(installation))
            run_batch(probes)

        return installation


def find_native(profile, cc=None, config=None, env=None, sdk_resolver=None):
    return NativeDetector(profile, cc=cc, config=config, env=env, sdk_resolver=sdk_resolver).find_native()
