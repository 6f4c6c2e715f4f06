class AccessControlError(Exception):
    """Base class for session and access control failures."""


class InternalStoreFailure(AccessControlError):
    """The session store could not complete an operation, e.g. allocate a unique token."""
