from app.config.settings import Settings
from app.storage.base import BaseObjectStore
from app.storage.in_memory_adapter import InMemoryObjectStore
from app.storage.s3_adapter import S3ObjectStore


class ObjectStoreFactory:
    """Creates the object store adapter selected in settings."""

    @classmethod
    def create(cls, settings: Settings) -> BaseObjectStore:
        backend = settings.storage_backend.lower()
        if backend == "memory":
            return InMemoryObjectStore()
        if backend == "s3":
            if not settings.s3_bucket:
                raise ValueError("s3_bucket is required for storage_backend=s3")
            return S3ObjectStore(
                bucket=settings.s3_bucket,
                region=settings.s3_region,
                key_prefix=settings.s3_key_prefix,
                public_base_url=settings.s3_public_base_url,
                endpoint_url=settings.s3_endpoint_url,
            )
        raise ValueError(
            f"Unknown storage backend '{backend}'. Choose from: ['memory', 's3']"
        )
