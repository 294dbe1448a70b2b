from campcheck.dataloader.config_loader import ConfigLoader
from campcheck.dataloader.postload_handler import LoadResultHandler
from campcheck.dataloader.snapshot_loader import SnapshotLoader
from campcheck.dataloader.types import LoadResult

__all__ = ["ConfigLoader", "LoadResult", "LoadResultHandler", "SnapshotLoader"]
