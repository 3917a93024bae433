from dataclasses import dataclass, fields, astuple
from typing import Optional

from .errors import ValidationError

# Canonical render order
FIELD_NAMES = (
    "include_dir",
    "sys_include_dir",
    "crt_dir",
    "static_crt_dir",
    "msvc_lib_dir",
    "kernel32_lib_dir",
)


@dataclass
class LibcInstallation:
    """
    Directories of a libc installation. Each field is an absolute path or None.
    See libc_file.render for what each directory must contain.
    """
    include_dir: Optional[str] = None
    sys_include_dir: Optional[str] = None
    crt_dir: Optional[str] = None
    static_crt_dir: Optional[str] = None
    msvc_lib_dir: Optional[str] = None
    kernel32_lib_dir: Optional[str] = None

    def as_dict(self):
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def is_empty(self):
        return all(v is None for v in astuple(self))

    def validate(self, profile):
        validate(self, profile)


def required_fields(profile):
    """Field names that must be present for the given platform profile, in check order."""
    required = [("include_dir", None), ("sys_include_dir", None)]
    if profile.is_darwin:
        required.append(("crt_dir", profile.os))
    if profile.is_windows and profile.is_gnu:
        required.append(("static_crt_dir", profile.tag))
    if profile.is_windows and not profile.is_gnu:
        required.append(("msvc_lib_dir", profile.tag))
        required.append(("kernel32_lib_dir", profile.tag))
    return required


def validate(installation, profile):
    """
    Raises ValidationError naming the first required field that is absent.
    Pure: neither the installation nor the filesystem is touched.
    """
    for name, qualifier in required_fields(profile):
        if getattr(installation, name) is None:
            if qualifier:
                message = f"{name} may not be empty for {qualifier}"
            else:
                message = f"{name} may not be empty"
            raise ValidationError(name, message)
