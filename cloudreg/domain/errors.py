from cloudreg.domain.entities import FailureReason


class DomainError(Exception):
    """Base class for all domain-level errors."""

    pass


class InvalidCredentials(DomainError):
    """System login/password pair did not authenticate."""

    pass


class MalformedInstanceDocument(DomainError):
    """The instance metadata document could not be decoded for its provider."""

    pass


class InstanceVerificationFailed(DomainError):
    """
    The caller claimed to be a cloud instance and the claim did not hold.

    `reason` is for internal diagnostics only; it must not reach the client.
    """

    def __init__(self, reason: FailureReason) -> None:
        super().__init__(f"instance verification failed: {reason.value}")
        self.reason = reason


class VerificationCacheUnavailable(DomainError):
    """The verification cache backend could not be read or written."""

    pass
