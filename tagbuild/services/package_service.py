"""
Package naming for tagbuild.

The deb/rpm payload itself is produced by an external packager. This module
supplies what that step needs from us: the per-format architecture name and
the conventional output file name for a version.
"""

from enum import Enum
from typing import Union

from ..exit_codes import PackageError


class PackageFormat(Enum):
    """Supported package formats."""
    DEB = "deb"
    RPM = "rpm"

    @classmethod
    def parse(cls, value: Union['PackageFormat', str]) -> 'PackageFormat':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise PackageError(f"unsupported package format: {value}") from None


# Build architecture -> per-format architecture name. Empty means the
# format has no equivalent.
ARCHITECTURES = {
    "all": {PackageFormat.RPM: "noarch", PackageFormat.DEB: "noarch"},
    "amd64": {PackageFormat.RPM: "x86_64", PackageFormat.DEB: "amd64"},
    "386": {PackageFormat.RPM: "i386", PackageFormat.DEB: "i386"},
    "arm64": {PackageFormat.RPM: "aarch64", PackageFormat.DEB: "arm64"},
    "ppc64le": {PackageFormat.RPM: "ppc64le", PackageFormat.DEB: "ppc64el"},
    "s390x": {PackageFormat.RPM: "s390x", PackageFormat.DEB: "s390x"},
    "arm": {PackageFormat.RPM: "armhfp", PackageFormat.DEB: "armhf"},
    "arm5": {PackageFormat.RPM: "", PackageFormat.DEB: "armel"},
    "arm6": {PackageFormat.RPM: "armhfp", PackageFormat.DEB: "armhf"},
    "arm7": {PackageFormat.RPM: "armhfp", PackageFormat.DEB: "armhf"},
    "mipsle": {PackageFormat.RPM: "", PackageFormat.DEB: "mipsel"},
}


def package_arch(arch: str, fmt: Union[PackageFormat, str]) -> str:
    """
    Translate a build architecture into the package format's name for it.

    Raises:
        PackageError: If the architecture is unknown or has no equivalent
    """
    fmt = PackageFormat.parse(fmt)
    name = ARCHITECTURES.get(arch, {}).get(fmt, "")
    if not name:
        raise PackageError(f"unsupported architecture {arch} for {fmt.value}")
    return name


def package_target(
    name: str,
    version: str,
    release: Union[str, int],
    arch: str,
    fmt: Union[PackageFormat, str]
) -> str:
    """
    Output file name of a package.

    deb: <name>_<version>-<release>_<arch>.deb
    rpm: <name>-<version>-<release>.<arch>.rpm

    Args:
        name: Package name
        version: Version string (see version_service)
        release: Package release number
        arch: Build architecture (e.g., "amd64", "arm64")
        fmt: PackageFormat or its name

    Raises:
        PackageError: On a missing name, unknown format or architecture
    """
    fmt = PackageFormat.parse(fmt)
    if not name:
        raise PackageError("package name is required")
    pkg_arch = package_arch(arch, fmt)

    if fmt is PackageFormat.DEB:
        return f"{name}_{version}-{release}_{pkg_arch}.deb"
    return f"{name}-{version}-{release}.{pkg_arch}.rpm"
