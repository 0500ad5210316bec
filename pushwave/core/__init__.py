from .config import Settings
from .credentials import Credentials, load_credentials

__all__ = ["Settings", "Credentials", "load_credentials"]
