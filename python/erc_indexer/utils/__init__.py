from .registry_db import RegistryDB, STANDARDS
from .logger import setup_logging

__all__ = ["RegistryDB", "STANDARDS", "setup_logging"]
