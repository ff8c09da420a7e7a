class NoDataAvailable(RuntimeError):
    pass


class SnapshotFileError(ValueError):
    pass
