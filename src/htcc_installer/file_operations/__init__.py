from .file_manager import FileManager
from .logger import Logger

__all__ = ["FileManager", "Logger"]
