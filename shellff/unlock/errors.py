class UnlockCodeError(Exception):
    reason = "UNLOCK_CODE_ERROR"
    message = "Code validation failed"

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        unlock_code_id: int | None = None,
    ) -> None:
        if message is not None:
            self.message = message
        self.code = code
        self.unlock_code_id = unlock_code_id
        super().__init__(self.message)


class UnlockCodeInvalidFormatError(UnlockCodeError):
    reason = "INVALID_FORMAT"
    message = "Invalid code format. Please use format: SHF-ABCD-1234"


class UnlockCodeNotFoundError(UnlockCodeError):
    reason = "NOT_FOUND"
    message = "Code not found or invalid"


class UnlockCodeAlreadyRedeemedError(UnlockCodeError):
    reason = "ALREADY_REDEEMED"
    message = "This code has already been redeemed"


class UnlockCodeAlreadyOwnedError(UnlockCodeError):
    reason = "ALREADY_OWNED"
    message = "You already have access to this release."


class UnlockRateLimitedError(UnlockCodeError):
    reason = "RATE_LIMITED"
    message = "Too many attempts, please try again later"


class UnlockReleaseNotFoundError(UnlockCodeError):
    reason = "RELEASE_NOT_FOUND"
    message = "Release not found"


class UnlockReleaseNotEnabledError(UnlockCodeError):
    reason = "PHYSICAL_UNLOCK_DISABLED"
    message = "Physical unlock is not enabled for this release"


ERRORS_BY_REASON: dict[str, type[UnlockCodeError]] = {
    error.reason: error
    for error in (
        UnlockCodeInvalidFormatError,
        UnlockCodeNotFoundError,
        UnlockCodeAlreadyRedeemedError,
        UnlockCodeAlreadyOwnedError,
        UnlockRateLimitedError,
        UnlockReleaseNotFoundError,
        UnlockReleaseNotEnabledError,
    )
}
