class UnauthorizedError(PermissionError):
    pass
