"""ETL utilities package."""

from cinecatalog.etl.utils.checkpoint_manager import CheckpointManager
from cinecatalog.etl.utils.ids import hash_id, make_id, movie_id, person_id, provider_of
from cinecatalog.etl.utils.logger import setup_logger

__all__ = [
    "CheckpointManager",
    "hash_id",
    "make_id",
    "movie_id",
    "person_id",
    "provider_of",
    "setup_logger",
]
