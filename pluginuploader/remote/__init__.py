from .exception import (
    RemoteStorageException,
    RemoteStorageInvalidInputException,
    S3StorageException,
)
from .FileSystemStorage import FileSystemStorage
from .RemoteStorage import RemoteObject, RemoteStorage
from .RestStorage import RestStorage
from .S3Storage import S3Storage
from .storage import RepoType, get_storage

__all__ = [
    "RemoteStorageException",
    "RemoteStorageInvalidInputException",
    "S3StorageException",
    "FileSystemStorage",
    "RemoteObject",
    "RemoteStorage",
    "RestStorage",
    "S3Storage",
    "RepoType",
    "get_storage",
]
