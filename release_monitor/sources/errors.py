class SourceError(RuntimeError):
    pass


class TransientNetworkError(SourceError):
    def __init__(self, message: str, *, url: str, status_code=None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class UpstreamPayloadError(SourceError):
    pass
