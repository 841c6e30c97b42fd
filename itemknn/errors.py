# errors raised while assembling a build context


class BuildContextError(Exception):
    """Base error for build context assembly.

    ``item`` holds the id of the item being processed when the failure
    happened, if one was known.
    """

    def __init__(self, message, item=None):
        if item is not None:
            message = f"{message} (item {item})"
        super().__init__(message)
        self.item = item


class DataSourceError(BuildContextError):
    pass


class NormalizerError(BuildContextError):
    pass


class InvalidStateError(BuildContextError):
    pass


class BuildCancelledError(BuildContextError):
    pass


class DuplicateItemGroupError(BuildContextError):
    pass
