class ExplorerError(Exception):
    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class NotFound(ExplorerError):
    status_code = 404


class UpstreamError(ExplorerError):
    status_code = 500


class InvalidNodeResponse(UpstreamError):
    status_code = 502


class NodeUnavailable(ExplorerError):
    status_code = 500

    def __init__(self, message: str = "Connection refused"):
        super().__init__(message)


class InvalidAddress(ExplorerError):
    status_code = 400


class TransactionConflict(ExplorerError):
    status_code = 409
