import importlib.metadata

from .main import main
from .processor import MigrationProcessor

try:
    __version__ = importlib.metadata.version("mysql-pg-converter")
except importlib.metadata.PackageNotFoundError:
    __version__ = "unknown"  # fallback version
