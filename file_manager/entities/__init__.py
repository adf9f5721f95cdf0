# file_manager/entities/__init__.py
from .directory import Directory  # noqa: F401
from .entity import Entity  # noqa: F401
from .file import File  # noqa: F401
