from collections.abc import Iterable

from quoteflow.config.settings import Settings
from quoteflow.intake.models import CandidateFile, IntakeResult
from quoteflow.logging.logger import Log

PDF_MEDIA_TYPE = "application/pdf"
MAX_FILE_SIZE_BYTES = 10 * 1024 * 1024
MAX_FILES = 10


class IntakeValidator:
    """Enforces type, size and count limits on files selected for upload.

    Pure: never performs I/O and never mutates its inputs.
    """

    def __init__(
        self,
        accepted_media_type: str = PDF_MEDIA_TYPE,
        max_file_size_bytes: int = MAX_FILE_SIZE_BYTES,
        max_files: int = MAX_FILES,
    ) -> None:
        self._accepted_media_type = accepted_media_type
        self._max_file_size_bytes = max_file_size_bytes
        self._max_files = max_files

    @classmethod
    def from_settings(cls, settings: Settings) -> "IntakeValidator":
        return cls(
            accepted_media_type=settings.accepted_media_type,
            max_file_size_bytes=settings.max_file_size_bytes,
            max_files=settings.max_files,
        )

    @property
    def max_files(self) -> int:
        return self._max_files

    def accept(
        self,
        incoming: Iterable[CandidateFile],
        accepted: Iterable[CandidateFile] = (),
    ) -> IntakeResult:
        """Validate an incoming batch and merge it into the accepted set.

        Files are checked in order. Once the count limit is hit the rest of
        the batch is dropped, but files accepted before that point are kept.
        """
        result = list(accepted)
        rejections: list[str] = []

        for candidate in incoming:
            if candidate.media_type != self._accepted_media_type:
                rejections.append(f"unsupported type: {candidate.name}")
                continue
            if candidate.size > self._max_file_size_bytes:
                rejections.append(f"file too large: {candidate.name}")
                continue
            if any(candidate.same_as(existing) for existing in result):
                Log.debug(f"Skipping duplicate file {candidate.name}")
                continue
            if len(result) >= self._max_files:
                rejections.append("too many files")
                break
            result.append(candidate)

        if rejections:
            Log.info(f"Intake rejected {len(rejections)} file(s)", accepted=len(result))
        return IntakeResult(accepted=tuple(result), rejections=rejections)

    @staticmethod
    def remove(
        accepted: tuple[CandidateFile, ...], index: int
    ) -> tuple[CandidateFile, ...]:
        """Return the accepted set without the file at ``index``.

        Raises:
            IndexError: if ``index`` does not point at an accepted file.
        """
        if not 0 <= index < len(accepted):
            raise IndexError(f"No accepted file at position {index}")
        return accepted[:index] + accepted[index + 1 :]


def quote_count_label(count: int) -> str:
    """Human label for a number of quotes, e.g. '3 Cotações'."""
    noun = "Cotação" if count == 1 else "Cotações"
    return f"{count} {noun}"


def format_file_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"
