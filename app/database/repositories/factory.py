from app.config.settings import Settings
from app.database.repositories.base import BaseFileRecordsRepository
from app.database.repositories.file_records_repository import FileRecordsRepository
from app.database.repositories.in_memory_file_records_repository import (
    InMemoryFileRecordsRepository,
)


class FileRecordsRepositoryFactory:
    """Creates the file index selected in settings."""

    ADAPTERS: dict[str, type[BaseFileRecordsRepository]] = {
        "postgres": FileRecordsRepository,
        "memory": InMemoryFileRecordsRepository,
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseFileRecordsRepository:
        backend = settings.index_backend.lower()
        adapter_cls = cls.ADAPTERS.get(backend)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown index backend '{backend}'. Choose from: {list(cls.ADAPTERS)}"
            )
        return adapter_cls()
