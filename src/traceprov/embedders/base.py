"""Base embedder class."""

from abc import ABC, abstractmethod
from typing import ClassVar

from traceprov.models import EmbeddedMetadata, MediaType


class EmbedError(Exception):
    """Provenance could not be embedded into a container."""

    pass


class ContainerStructureError(EmbedError):
    """The container is missing a required box or its box tree is malformed."""

    pass


class BaseEmbedder(ABC):
    """Abstract base class for container embedding strategies.

    An embedder stores an ``EmbeddedMetadata`` envelope inside the bytes of a
    media container and reads it back. All methods are pure functions over
    byte buffers; reading and writing files is left to the caller.

    Attributes:
        name: Short container name
        extensions: File extensions (lower case, with dot) this embedder handles
        media_type: Media type recorded in manifests for these files
    """

    name: ClassVar[str] = "base"
    extensions: ClassVar[tuple[str, ...]] = ()
    media_type: ClassVar[MediaType] = MediaType.MP4

    @classmethod
    def can_handle(cls, path: str) -> bool:
        """Check if a path has one of this embedder's extensions."""
        return path.lower().endswith(cls.extensions)

    @abstractmethod
    def embed(self, data: bytes, metadata: EmbeddedMetadata) -> bytes:
        """Return a copy of ``data`` carrying ``metadata``.

        Any TRACE metadata already present is replaced.

        Raises:
            EmbedError: If the container cannot carry the metadata
        """
        pass

    @abstractmethod
    def extract(self, data: bytes) -> EmbeddedMetadata | None:
        """Read embedded metadata, or None if there is none or it is unreadable."""
        pass

    @abstractmethod
    def excise(self, data: bytes) -> bytes:
        """Return ``data`` with any TRACE carrier removed.

        The surrounding structure may be normalized (sizes rewritten, boxes
        reordered), so the result is only trusted through ``strip``.
        """
        pass

    def strip(self, data: bytes) -> bytes:
        """Return ``data`` with the TRACE carrier removed.

        Only a carrier laid out exactly as ``embed`` writes it is removed:
        re-embedding the extracted metadata into the excised bytes must
        reproduce ``data`` byte for byte. Otherwise ``data`` is returned
        unchanged, as it is when there is no readable carrier, so every byte
        outside a canonical carrier stays covered by the content hash.
        """
        metadata = self.extract(data)
        if metadata is None:
            return data

        excised = self.excise(data)
        try:
            canonical = self.embed(excised, metadata)
        except EmbedError:
            return data
        return excised if canonical == data else data

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
