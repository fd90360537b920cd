# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Container image selection.

Application images come from two families. Versions from 1.6.0 onwards use
the newer family; earlier versions use the legacy one:

    1.5.9  -> timroberton/comb:wb-hmis-server-v1.5.9
    1.6.0  -> timroberton/comb:wb-fastr-server-v1.6.0

The admin service only exists for legacy deployments, so admin images always
come from the legacy admin family.
"""

import re

from wbctl.core.exceptions import ConfigError

IMAGE_REPOSITORY = "timroberton/comb"
NEW_SERVER_FAMILY = "wb-fastr-server"
LEGACY_SERVER_FAMILY = "wb-hmis-server"
ADMIN_FAMILY = "wb-hmis-server-admin"

NEW_FAMILY_CUTOVER = (1, 6)

DATABASE_IMAGE = "postgres:17.4"
BASE_IMAGES = (DATABASE_IMAGE,)

_VERSION_PATTERN = re.compile(r"^(\d+)\.(\d+)(?:\.(\d+))?")


def parse_version(version: str) -> tuple[int, int, int]:
    """Parse "major.minor[.patch]" into integers.

    Trailing text after the numeric part (e.g. "-rc1") is ignored.

    Raises:
        ConfigError: If the version does not start with major.minor.
    """
    match = _VERSION_PATTERN.match(version.strip())
    if not match:
        raise ConfigError(f"Invalid server version '{version}': expected major.minor[.patch]")
    major, minor, patch = match.groups()
    return int(major), int(minor), int(patch or 0)


def server_image_family(version: str) -> str:
    """Return the application image family for a server version.

    Example:
        >>> server_image_family("1.5.9")
        'wb-hmis-server'
        >>> server_image_family("1.6.0")
        'wb-fastr-server'
    """
    major, minor, _ = parse_version(version)
    if (major, minor) >= NEW_FAMILY_CUTOVER:
        return NEW_SERVER_FAMILY
    return LEGACY_SERVER_FAMILY


def server_image(version: str) -> str:
    return f"{IMAGE_REPOSITORY}:{server_image_family(version)}-v{version}"


def admin_image(admin_version: str) -> str:
    return f"{IMAGE_REPOSITORY}:{ADMIN_FAMILY}-v{admin_version}"


def version_sort_key(version: str) -> tuple[int, int, int]:
    """Sort key for versions; unparsable versions sort first."""
    try:
        return parse_version(version)
    except ConfigError:
        return (-1, -1, -1)


def latest_version(versions: list[str], default: str = "1.0.0") -> str:
    """Return the highest version, or default when there is none."""
    candidates = [v for v in versions if v]
    if not candidates:
        return default
    return max(candidates, key=version_sort_key)
