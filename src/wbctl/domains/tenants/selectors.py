# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Target selector resolution.

A selector expands to one or more tenant ids:

    all               every registered tenant
    @production       tenants tagged "production"
    server=1.6.7      tenants whose server version is exactly "1.6.7"
    demo              the tenant "demo", or else tenants tagged "demo"

Several selectors are resolved independently, concatenated, then
de-duplicated keeping the first occurrence. The result is never re-sorted:
its order is the order in which tenants are processed.

A literal that is neither an id nor a tag is an error. Note that a mistyped
id which happens to be a tag name resolves to that tag's tenants.
"""

from collections.abc import Iterable

from wbctl.core.exceptions import NoMatchError, NotFoundError
from wbctl.domains.tenants.store import TenantRegistry

ALL_SELECTOR = "all"
TAG_PREFIX = "@"
FIELD_SEPARATOR = "="

# <field>=<value> selectors, mapped to the Tenant attribute they compare
FIELD_SELECTORS = {
    "server": "server_version",
}


def _resolve_one(registry: TenantRegistry, selector: str) -> list[str]:
    if selector == ALL_SELECTOR:
        return [t.id for t in registry.list()]

    if selector.startswith(TAG_PREFIX):
        tag = selector[len(TAG_PREFIX):]
        ids = [t.id for t in registry.get_by_tag(tag)]
        if not ids:
            raise NoMatchError("tag", tag)
        return ids

    field, sep, value = selector.partition(FIELD_SEPARATOR)
    if sep and field in FIELD_SELECTORS:
        attribute = FIELD_SELECTORS[field]
        ids = [t.id for t in registry.list() if getattr(t, attribute) == value]
        if not ids:
            raise NoMatchError("version", value)
        return ids

    if registry.get(selector) is not None:
        return [selector]

    ids = [t.id for t in registry.get_by_tag(selector)]
    if ids:
        return ids

    raise NotFoundError(selector, f"Server or tag '{selector}' not found")


def resolve_targets(registry: TenantRegistry, selectors: Iterable[str]) -> list[str]:
    """Expand selectors into an ordered, de-duplicated list of tenant ids.

    Args:
        registry: Registry to evaluate selectors against.
        selectors: Selector strings, in the order given by the operator.

    Returns:
        Tenant ids in first-seen order.

    Raises:
        NoMatchError: If a tag or version selector matches nothing.
        NotFoundError: If a literal selector is neither an id nor a tag.
    """
    resolved: list[str] = []
    for selector in selectors:
        resolved.extend(_resolve_one(registry, selector))
    return list(dict.fromkeys(resolved))
