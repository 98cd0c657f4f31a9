class DeptreeError(Exception):
    """Base class for every error raised by deptree."""


class InputError(DeptreeError):
    """The request (or manifest) does not have the expected shape."""

    status = 400


class PackageUnavailable(DeptreeError):
    """The registry has no answer for a name@version."""


class MalformedMetadata(DeptreeError):
    """The registry answered with something we cannot read."""


class InternalError(DeptreeError):
    """Unexpected failure outside the per-package resolution scope."""

    status = 500
