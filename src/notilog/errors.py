from __future__ import annotations


class NotilogError(RuntimeError):
    pass


class LogStoreReadError(NotilogError):
    """
    The blob backend failed the read. The stored log may still be intact, so
    callers must not treat this as an empty log.
    """


class LogStoreWriteError(NotilogError):
    """
    The blob backend refused or failed the write; the previous log is intact.
    """


class ResolverError(NotilogError):
    pass
