from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


@dataclass(frozen=True, slots=True)
class UploadedImage:
    """
    Result of a successful upload.

    :param url: Public (https) URL of the hosted image.
    :type url: str
    :param public_id: Provider-side identifier, when the provider returns one.
    :type public_id: str | None
    """

    url: str
    public_id: str | None = None


class ImageUploader(Protocol):
    """Port for pushing a locally staged image to an image host."""

    def upload(self, local_path: str | os.PathLike[str] | None) -> UploadedImage | None:
        """
        Upload the file and remove the local copy.

        :returns: ``None`` when no path is given or the upload failed.
        """


class StubImageUploader(ImageUploader):
    """Uploader that fabricates URLs without network access (tests, local dev)."""

    def __init__(self, base_url: str = "https://images.example.test") -> None:
        self.base_url = base_url.rstrip("/")
        self.uploaded: list[str] = []

    def upload(self, local_path: str | os.PathLike[str] | None) -> UploadedImage | None:
        if not local_path:
            return None
        path = Path(local_path)
        self.uploaded.append(path.name)
        path.unlink(missing_ok=True)
        return UploadedImage(url=f"{self.base_url}/{path.name}", public_id=path.stem)
