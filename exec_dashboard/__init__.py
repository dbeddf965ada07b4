"""Executive Dashboard — spreadsheet ingestion and year-partitioned datasets."""
from .types import *
from .formatting import *
from .store import DatasetStore
from .importer import import_file
from .persistence import JsonFileStorage
