class RemoteStorageException(Exception):
    """
    General Exception for RemoteStorage.
    """

    def __init__(self, message):
        self.message = message
        super().__init__(self.message)


class RemoteStorageInvalidInputException(RemoteStorageException):
    """
    Exception raised for invalid inputs in RemoteStorage and descendants.
    """

    def __init__(self, message):
        self.message = message
        super().__init__(self.message)


class S3StorageException(RemoteStorageException):
    """
    Exception raised for S3 requests that failed.
    """

    def __init__(self, message):
        self.message = message
        super().__init__(self.message)
