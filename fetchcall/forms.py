# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Form body values.

URL-encoded forms are plain ``httpx.QueryParams``. Multipart forms use
``MultipartForm``. Both are recognised structurally as well as by type, so
an equivalent value created by another copy of this module (vendored,
reloaded) is still sent as a form.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import IO, Any, Final

import httpx

__all__ = (
    "MULTIPART_FORM_TAG",
    "URLENCODED_FORM_TAG",
    "FormFile",
    "MultipartForm",
    "is_multipart_form",
    "is_urlencoded_form",
)

MULTIPART_FORM_TAG: Final = "multipart/form-data"
URLENCODED_FORM_TAG: Final = "application/x-www-form-urlencoded"


@dataclass(slots=True, frozen=True)
class FormFile:
    """A file part of a multipart form."""

    content: bytes | IO[bytes]
    filename: str
    content_type: str | None = None


@dataclass(slots=True)
class MultipartForm:
    """Ordered multipart form; repeated field names are kept.

    Example:
        >>> form = MultipartForm()
        >>> form.add("title", "avatar").add_file("file", b"...", "me.png")
    """

    __body_kind__ = MULTIPART_FORM_TAG

    parts: list[tuple[str, str | FormFile]] = field(default_factory=list)

    def add(self, name: str, value: Any) -> MultipartForm:
        self.parts.append((name, value if isinstance(value, FormFile) else str(value)))
        return self

    def add_file(
        self,
        name: str,
        content: bytes | IO[bytes],
        filename: str,
        content_type: str | None = None,
    ) -> MultipartForm:
        self.parts.append((name, FormFile(content, filename, content_type)))
        return self

    def to_httpx_files(self) -> list[tuple[str, tuple]]:
        """Render parts in the ``files=`` shape httpx encodes as multipart.

        Plain fields get no filename, so they are sent as ordinary form
        fields while still forcing a multipart encoding.
        """
        files = []
        for name, value in self.parts:
            if isinstance(value, str):
                files.append((name, (None, value.encode("utf-8"))))
            elif value.content_type is not None:
                files.append((name, (value.filename, value.content, value.content_type)))
            else:
                files.append((name, (value.filename, value.content)))
        return files


def _body_kind(value: Any) -> str | None:
    return getattr(type(value), "__body_kind__", None)


def is_multipart_form(value: Any) -> bool:
    if isinstance(value, MultipartForm):
        return True
    return _body_kind(value) == MULTIPART_FORM_TAG and callable(
        getattr(value, "to_httpx_files", None)
    )


def is_urlencoded_form(value: Any) -> bool:
    if isinstance(value, httpx.QueryParams):
        return True
    return _body_kind(value) == URLENCODED_FORM_TAG and callable(
        getattr(value, "multi_items", None)
    )
