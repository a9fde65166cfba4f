"""Write-once blob storage for request snapshots."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Protocol

from google.api_core import exceptions as gcp_exceptions
from google.cloud import storage

from ..errors import ArtifactExistsError


@dataclass(frozen=True)
class StoredArtifact:
    bucket_name: str
    key: str

    @property
    def path(self) -> str:
        return f"gs://{self.bucket_name}/{self.key}"


class ArtifactStore(Protocol):
    bucket_name: str

    def save(self, key: str, data: bytes, content_type: str = "application/json") -> StoredArtifact: ...


class InMemoryArtifactStore:
    def __init__(self, bucket_name: str) -> None:
        self.bucket_name = bucket_name
        self.objects: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def save(self, key: str, data: bytes, content_type: str = "application/json") -> StoredArtifact:
        with self._lock:
            if key in self.objects:
                raise ArtifactExistsError("Artifact already exists", {"key": key})
            self.objects[key] = bytes(data)
        return StoredArtifact(self.bucket_name, key)


class GcsArtifactStore:
    def __init__(self, bucket_name: str, client: Any = None, *, project: str | None = None) -> None:
        self.bucket_name = bucket_name
        self._client = client or storage.Client(project=project)

    def save(self, key: str, data: bytes, content_type: str = "application/json") -> StoredArtifact:
        blob = self._client.bucket(self.bucket_name).blob(key)
        try:
            # generation 0 means "only if the object does not exist yet"
            blob.upload_from_string(data, content_type=content_type, if_generation_match=0)
        except gcp_exceptions.PreconditionFailed as exc:
            raise ArtifactExistsError("Artifact already exists", {"key": key}) from exc
        return StoredArtifact(self.bucket_name, key)
