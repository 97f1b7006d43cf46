"""
Extension point for structured elvdoc documents.

elvdoc does not define a document model. Applications that want one
(for example invoices rendered from the template) provide their own
DocumentReader / DocumentWriter implementations; none ship here.

Invariants:
    - The codec never depends on this module
    - Files are opened and closed here; implementations only see streams
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import BinaryIO, Protocol, Union, runtime_checkable


@dataclass
class Document:
    """Structured document carried by an elv file. Fields are defined by implementations."""


@runtime_checkable
class DocumentReader(Protocol):
    """Parses a Document from a binary stream."""

    def read(self, stream: BinaryIO) -> Document:
        ...


@runtime_checkable
class DocumentWriter(Protocol):
    """Serializes a Document to a binary stream."""

    def write(self, stream: BinaryIO, document: Document) -> None:
        ...


def read_document(path: Union[str, "os.PathLike[str]"], reader: DocumentReader) -> Document:
    """Open path and parse it with reader."""
    with open(path, "rb") as f:
        return reader.read(f)


def write_document(
    path: Union[str, "os.PathLike[str]"],
    document: Document,
    writer: DocumentWriter,
) -> None:
    """Create or overwrite path with the document serialized by writer."""
    with open(path, "wb") as f:
        writer.write(f, document)
