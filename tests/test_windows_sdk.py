import os
import sys
import unittest
from unittest.mock import patch

# Add tools/ to path
TOOLS_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '../tools'))
if TOOLS_ROOT not in sys.path:
    sys.path.append(TOOLS_ROOT)

from libc_locator.core.errors import ErrorKind, FindError
from libc_locator.core.platform import PlatformProfile
from libc_locator.internal import windows_sdk
from libc_locator.internal.windows_sdk import SdkStatus, WindowsSdk

MSVC_X64 = PlatformProfile("windows", "msvc", "x86_64")
MSVC_ARM64 = PlatformProfile("windows", "msvc", "aarch64")

KITS10 = "C:\\Program Files (x86)\\Windows Kits\\10"
KITS81 = "C:\\Program Files (x86)\\Windows Kits\\8.1"
VC_LIB = "C:\\VS\\VC\\Tools\\MSVC\\14.29.30133\\lib\\x64"


class FakeFs:
    """Directories mapped to the files they contain."""

    def __init__(self, tree):
        self.tree = tree
        self.calls = []

    def is_search_dir(self, path):
        self.calls.append(path)
        return path in self.tree

    def has_file(self, directory, name):
        self.calls.append((directory, name))
        return name in self.tree.get(directory, ())


class SdkTestCase(unittest.TestCase):
    def setUp(self):
        self.sdk = WindowsSdk(path10=KITS10, version10="10.0.19041.0", path81=KITS81, version81="winv6.3",
                              msvc_lib_dir=VC_LIB)

    def use_fs(self, tree):
        fake = FakeFs(tree)
        patchers = [
            patch("libc_locator.internal.fs_probe.is_search_dir", side_effect=fake.is_search_dir),
            patch("libc_locator.internal.fs_probe.has_file", side_effect=fake.has_file),
        ]
        for p in patchers:
            p.start()
            self.addCleanup(p.stop)
        return fake


class TestSearchOrder(SdkTestCase):
    def test_searches_prefer_sdk10(self):
        self.assertEqual([s.path for s in self.sdk.searches()], [KITS10, KITS81])

    def test_incomplete_pair_is_skipped(self):
        sdk = WindowsSdk(path10=KITS10, version10=None, path81=KITS81, version81="winv6.3")
        self.assertEqual([s.path for s in sdk.searches()], [KITS81])

    def test_include_dir_from_sdk10(self):
        ucrt10 = f"{KITS10}\\Include\\10.0.19041.0\\ucrt"
        ucrt81 = f"{KITS81}\\Include\\winv6.3\\ucrt"
        self.use_fs({ucrt10: {"stdlib.h"}, ucrt81: {"stdlib.h"}})
        self.assertEqual(windows_sdk.find_include_dir(self.sdk, MSVC_X64), ucrt10)

    def test_falls_back_to_sdk81(self):
        lib10 = f"{KITS10}\\Lib\\10.0.19041.0\\ucrt\\x64"
        lib81 = f"{KITS81}\\Lib\\winv6.3\\ucrt\\x64"
        # SDK 10 directory exists but lacks the marker
        self.use_fs({lib10: set(), lib81: {"ucrt.lib"}})
        self.assertEqual(windows_sdk.find_crt_dir(self.sdk, MSVC_X64), lib81)

    def test_kernel32_uses_um_directory(self):
        um = f"{KITS10}\\Lib\\10.0.19041.0\\um\\x86"
        self.use_fs({um: {"kernel32.lib"}})
        profile = PlatformProfile("windows", "msvc", "i386")
        self.assertEqual(windows_sdk.find_kernel32_lib_dir(self.sdk, profile), um)

    def test_not_found_kinds(self):
        self.use_fs({})
        cases = [
            (windows_sdk.find_include_dir, ErrorKind.LIBC_STDLIB_HEADER_NOT_FOUND),
            (windows_sdk.find_crt_dir, ErrorKind.LIBC_RUNTIME_NOT_FOUND),
            (windows_sdk.find_kernel32_lib_dir, ErrorKind.LIBC_KERNEL32_LIB_NOT_FOUND),
            (windows_sdk.find_msvc_lib_dir, ErrorKind.MSVC_RUNTIME_NOT_FOUND),
            (windows_sdk.find_msvc_include_dir, ErrorKind.MSVC_HEADERS_NOT_FOUND),
        ]
        for finder, kind in cases:
            with self.assertRaises(FindError) as ctx:
                finder(self.sdk, MSVC_X64)
            self.assertEqual(ctx.exception.kind, kind)


class TestUnsupportedArchitecture(SdkTestCase):
    def test_fails_before_filesystem_access(self):
        fake = self.use_fs({})
        for finder in (windows_sdk.find_crt_dir, windows_sdk.find_kernel32_lib_dir):
            with self.assertRaises(FindError) as ctx:
                finder(self.sdk, MSVC_ARM64)
            self.assertEqual(ctx.exception.kind, ErrorKind.UNSUPPORTED_ARCHITECTURE)
            self.assertIn("aarch64", str(ctx.exception))
        self.assertEqual(fake.calls, [])

    def test_arm_variants_share_directory(self):
        for arch in ("arm", "armeb"):
            self.assertEqual(windows_sdk.arch_sub_dir(PlatformProfile("windows", "msvc", arch)), "arm")


class TestMsvcDirs(SdkTestCase):
    def test_msvc_lib_dir(self):
        self.use_fs({VC_LIB: {"vcruntime.lib"}})
        self.assertEqual(windows_sdk.find_msvc_lib_dir(self.sdk, MSVC_X64), VC_LIB)

    def test_msvc_include_dir_is_beside_lib(self):
        include = "C:\\VS\\VC\\Tools\\MSVC\\14.29.30133\\include"
        self.use_fs({include: {"vcruntime.h"}})
        self.assertEqual(windows_sdk.find_msvc_include_dir(self.sdk, MSVC_X64), include)

    def test_unknown_msvc_lib_dir(self):
        sdk = WindowsSdk(path10=KITS10, version10="10.0.19041.0")
        self.use_fs({})
        with self.assertRaises(FindError) as ctx:
            windows_sdk.find_msvc_lib_dir(sdk, MSVC_X64)
        self.assertEqual(ctx.exception.kind, ErrorKind.MSVC_RUNTIME_NOT_FOUND)


class TestResolver(unittest.TestCase):
    def test_config_table(self):
        config = {"windows_sdk": {"path10": KITS10, "version10": "10.0.22621.0", "msvc_lib_dir": VC_LIB}}
        status, sdk = windows_sdk.find_windows_sdk(MSVC_X64, config=config, env={})
        self.assertEqual(status, SdkStatus.FOUND)
        self.assertEqual([(s.path, s.version) for s in sdk.searches()], [(KITS10, "10.0.22621.0")])
        self.assertEqual(sdk.msvc_lib_dir, VC_LIB)

    def test_msvc_lib_dir_from_environment(self):
        config = {"windows_sdk": {"path10": KITS10, "version10": "10.0.22621.0"}}
        env = {"VCToolsInstallDir": "C:\\VS\\VC\\Tools\\MSVC\\14.29.30133\\"}
        _, sdk = windows_sdk.find_windows_sdk(MSVC_X64, config=config, env=env)
        self.assertEqual(sdk.msvc_lib_dir, VC_LIB)

    def test_empty_table_is_not_found(self):
        config = {"windows_sdk": {"path10": KITS10}}
        self.assertEqual(windows_sdk.find_windows_sdk(MSVC_X64, config=config, env={}), (SdkStatus.NOT_FOUND, None))

    def test_overlong_path(self):
        config = {"windows_sdk": {"path10": "C:\\" + "x" * 300, "version10": "10.0.1.0"}}
        status, sdk = windows_sdk.find_windows_sdk(MSVC_X64, config=config, env={})
        self.assertEqual(status, SdkStatus.PATH_TOO_LONG)
        self.assertIsNone(sdk)

    @unittest.skipIf(os.name == "nt", "registry lookup is used on Windows")
    def test_no_config_off_windows(self):
        self.assertEqual(windows_sdk.find_windows_sdk(MSVC_X64, config={}, env={}), (SdkStatus.NOT_FOUND, None))

    def test_handle_released_once(self):
        sdk = WindowsSdk(path10=KITS10, version10="10.0.1.0")
        with sdk:
            pass
        self.assertTrue(sdk.closed)
        with self.assertRaises(RuntimeError):
            sdk.close()


if __name__ == '__main__':
    unittest.main()
