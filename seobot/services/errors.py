class ServiceError(Exception):
    """Expected failure of an upstream service or of server configuration."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
