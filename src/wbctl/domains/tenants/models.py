# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tenant record and change-set schemas.

Field names are snake_case in Python and camelCase on disk, matching the
registry file written by earlier versions of the tool:

    [
      {
        "id": "demo",
        "label": "Demo",
        "port": 9100,
        "serverVersion": "1.6.7",
        "tags": ["production"]
      }
    ]

The schemas only enforce types. Field rules (id format, port range, required
values) live in wbctl.domains.tenants.validation so that an invalid record on
disk can still be loaded and reported.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Tenant(BaseModel):
    """One managed deployment instance.

    Attributes:
        id: Unique id, also the container, network and subdomain name.
        label: Human-readable display name.
        port: Published application port.
        instance_dir: On-disk directory name override (defaults to id).
        server_version: Application version, selects the image family and tag.
        admin_version: Admin service version; presence enables the admin container.
        french: Run the application with French as instance language.
        ethiopian: Run the application with the Ethiopian calendar.
        open_access: Run the application without sign-in.
        tags: Free-form labels, treated as a set.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    id: str
    label: str = ""
    port: int = 0
    instance_dir: str | None = None
    server_version: str = ""
    admin_version: str | None = None
    french: bool | None = None
    ethiopian: bool | None = None
    open_access: bool | None = None
    tags: list[str] | None = None

    @field_validator("tags")
    @classmethod
    def empty_tags_are_absent(cls, value: list[str] | None) -> list[str] | None:
        return value or None

    @property
    def instance_dir_name(self) -> str:
        """Directory name under the mount path."""
        return self.instance_dir or self.id

    @property
    def has_admin(self) -> bool:
        """Whether an admin container belongs to this tenant."""
        return bool(self.admin_version)

    def has_tag(self, tag: str) -> bool:
        return tag in (self.tags or [])

    def to_record(self) -> dict[str, Any]:
        """Serialize to the on-disk JSON shape, omitting absent fields."""
        return self.model_dump(by_alias=True, exclude_none=True)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Tenant":
        return cls.model_validate(record)


class TenantChanges(BaseModel):
    """Partial update for a tenant.

    Only fields explicitly supplied are merged onto the stored record. An
    explicit None clears an optional field (e.g. admin_version). The id is
    not part of the change set: identity is immutable.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    label: str | None = None
    port: int | None = None
    instance_dir: str | None = None
    server_version: str | None = None
    admin_version: str | None = None
    french: bool | None = None
    ethiopian: bool | None = None
    open_access: bool | None = None
    tags: list[str] | None = Field(default=None)

    @field_validator("tags")
    @classmethod
    def empty_tags_are_absent(cls, value: list[str] | None) -> list[str] | None:
        return value or None

    @property
    def is_empty(self) -> bool:
        return not self.model_fields_set

    def explicit_fields(self) -> dict[str, Any]:
        """Return only the fields the caller supplied, keyed by field name."""
        return self.model_dump(exclude_unset=True)

    def apply_to(self, tenant: Tenant) -> Tenant:
        """Shallow-merge this change set onto a tenant, returning a new record."""
        return tenant.model_copy(update=self.explicit_fields(), deep=True)
