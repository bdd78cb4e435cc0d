"""Error codes and the exception raised by the multi-threaded codecs."""

from __future__ import annotations

from enum import Enum


class ErrorCode(Enum):
    """Failure kinds reported by the threaded compression pipelines."""

    NO_ERROR = "no_error"
    MEMORY_ALLOCATION = "memory_allocation"
    INIT_MISSING = "init_missing"
    READ_FAIL = "read_fail"
    WRITE_FAIL = "write_fail"
    DATA_ERROR = "data_error"
    FRAME_COMPRESS = "frame_compress"
    FRAME_DECOMPRESS = "frame_decompress"
    COMPRESSION_PARAMETER_UNSUPPORTED = "compressionParameter_unsupported"
    COMPRESSION_LIBRARY = "compression_library"
    CANCELED = "canceled"
    MAX_CODE = "maxCode"


_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.NO_ERROR: "No error detected",
    ErrorCode.MEMORY_ALLOCATION: "Allocation error : not enough memory",
    ErrorCode.READ_FAIL: "Read failure",
    ErrorCode.WRITE_FAIL: "Write failure",
    ErrorCode.DATA_ERROR: "Malformed input",
    ErrorCode.FRAME_COMPRESS: "Could not compress frame at once",
    ErrorCode.FRAME_DECOMPRESS: "Could not decompress frame at once",
    ErrorCode.COMPRESSION_PARAMETER_UNSUPPORTED: "Compression parameter is out of bound",
    ErrorCode.COMPRESSION_LIBRARY: "Compression library reports failure",
}

# Results reported by read/write callbacks, mapped to error codes.
_CALLBACK_CODES: dict[int, ErrorCode] = {
    -1: ErrorCode.READ_FAIL,
    -2: ErrorCode.CANCELED,
    -3: ErrorCode.MEMORY_ALLOCATION,
}


def error_message(code: ErrorCode, library: str = "mt") -> str:
    """Return the human-readable text for ``code``.

    Codes without a dedicated message yield a generic text naming ``library``.
    """
    try:
        return _MESSAGES[code]
    except KeyError:
        return f"Unspecified {library} error code"


def callback_error(rv: int) -> ErrorCode:
    """Map a failing read/write callback result to an error code.

    Unknown results count as a read failure.
    """
    return _CALLBACK_CODES.get(rv, ErrorCode.READ_FAIL)


class MTError(Exception):
    """Raised when a threaded compression or decompression run fails.

    ``detail`` carries the underlying codec's own description, if any, and
    takes precedence over the generic message when the error is shown.
    """

    def __init__(
        self,
        code: ErrorCode,
        library: str = "mt",
        detail: str | None = None,
    ) -> None:
        self.code = code
        self.library = library
        self.detail = detail
        self.message = detail if detail else error_message(code, library)
        super().__init__(self.message)