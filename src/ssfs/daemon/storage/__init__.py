"""SSFS storage package — account documents and request artifacts.

Re-exports public API so consumers can use:
    from ..storage import DocumentStore, ArtifactStore, build_stores
"""

from .documents import DocumentStore, FirestoreDocumentStore, InMemoryDocumentStore
from .artifacts import ArtifactStore, GcsArtifactStore, InMemoryArtifactStore, StoredArtifact


def build_stores(settings) -> tuple[DocumentStore, ArtifactStore]:
    """Construct the store clients selected by `settings.backend`."""
    if settings.backend == "memory":
        return InMemoryDocumentStore(), InMemoryArtifactStore(settings.bucket_name)
    documents = FirestoreDocumentStore(
        project=settings.gcp_project, database=settings.firestore_database
    )
    artifacts = GcsArtifactStore(settings.bucket_name, project=settings.gcp_project)
    return documents, artifacts


__all__ = [
    "DocumentStore",
    "FirestoreDocumentStore",
    "InMemoryDocumentStore",
    "ArtifactStore",
    "GcsArtifactStore",
    "InMemoryArtifactStore",
    "StoredArtifact",
    "build_stores",
]
