class ExplorerError(Exception):
    pass


class InvalidInputFormat(ExplorerError):
    pass


class DataSourceError(ExplorerError):
    pass


class RateLimitError(DataSourceError):
    pass


class TransientFetchFailure(ExplorerError):
    pass


class PreconditionViolation(ExplorerError):
    pass
