from __future__ import annotations

from typing import Any, Dict, Optional


class MathsolError(RuntimeError):
    """Base class for errors raised by this client."""


class ConfigError(MathsolError):
    pass


class KeyfileError(MathsolError):
    pass


class ApiError(MathsolError):
    pass


class AccountDecodeError(MathsolError):
    pass


class TransactionFailedError(MathsolError):
    """A submitted transaction was confirmed with an error status."""

    def __init__(self, signature: str, err: Any, message: str | None = None) -> None:
        self.signature = signature
        self.err = err
        super().__init__(message or f"Transaction {signature} failed: {err}")


class MathsolProgramError(TransactionFailedError):
    """A transaction rejected by one of the program's own checks."""

    def __init__(self, signature: str, err: Any, code: int, name: str, msg: str) -> None:
        self.code = code
        self.name = name
        self.msg = msg
        super().__init__(signature, err, f"Transaction {signature} failed: {name} ({code}): {msg}")


# Custom error table of the on-chain program
PROGRAM_ERRORS: Dict[int, tuple[str, str]] = {
    6000: ("MintNotYetStarted", "mint activity not yet started."),
    6001: ("MintEnded", "mint activity already ended."),
    6002: ("DuplicateMint", "duplicate mint."),
    6003: ("InvalidSignature", "invalid signature."),
    6004: ("FairLaunchInvalidDrawId", "invalid draw id."),
}


def custom_error_code(err: Any) -> Optional[int]:
    """
    Extracts the custom program error code from a transaction error status.

    Handles solders' typed errors (TransactionErrorInstructionError wrapping
    an InstructionErrorCustom) as well as the JSON shape
    {"InstructionError": [idx, {"Custom": code}]}.
    """
    if err is None:
        return None
    if isinstance(err, dict):
        detail = err.get("InstructionError")
        if isinstance(detail, (list, tuple)) and len(detail) == 2:
            inner = detail[1]
            if isinstance(inner, dict) and "Custom" in inner:
                return int(inner["Custom"])
        return None
    code = getattr(getattr(err, "err", None), "code", None)
    if isinstance(code, int):
        return code
    return None


def error_for_status(signature: str, err: Any) -> TransactionFailedError:
    code = custom_error_code(err)
    if code is not None and code in PROGRAM_ERRORS:
        name, msg = PROGRAM_ERRORS[code]
        return MathsolProgramError(signature, err, code, name, msg)
    return TransactionFailedError(signature, err)
