from pathlib import Path

from quoteflow.config.settings import Settings
from quoteflow.storage.base import BaseReportStore
from quoteflow.storage.local_store import LocalReportStore
from quoteflow.storage.postgres_store import PostgresReportStore


class ReportStoreFactory:
    """Creates the correct report store based on settings."""

    BACKENDS = ("local", "postgres")

    @classmethod
    def create(cls, settings: Settings) -> BaseReportStore:
        backend = settings.report_store.lower()
        if backend == "local":
            return LocalReportStore(Path(settings.reports_dir))
        if backend == "postgres":
            return PostgresReportStore()
        raise ValueError(
            f"Unknown report store '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )
