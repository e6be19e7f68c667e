"""Business logic for file uploads.

This module validates candidate files, compresses oversized images,
persists them through the configured storage backend and keeps the
collection of accepted files. Every rejection is reported as a message;
a single bad file never aborts the rest of its batch, except when the
file count limit is reached.
"""

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from aws_lambda_powertools import Logger

from file_manager.core.imaging.compressor import SizeBudgetCompressor
from file_manager.core.models.errors import DeleteFailedError, FileManagerError, FileSizeError
from file_manager.core.models.file_descriptor import FileDescriptor
from file_manager.core.models.options import UploadLabels, UploadOptions
from file_manager.core.repositories.storage_repository import StorageBackend
from file_manager.core.utils.constants import COMPRESSION_READ_FACTOR, format_file_size
from file_manager.core.utils.mime import build_data_url
from file_manager.core.utils.streams import read_limited
from file_manager.handlers.delete_file.service import DeleteService
from file_manager.handlers.download_file.models import DownloadedFile
from file_manager.handlers.download_file.service import DownloadService

from .models import (
    Accepted,
    BatchOutcome,
    CandidateOutcome,
    FileCandidate,
    Rejected,
    RejectionReason,
    Staged,
)

logger = Logger(UTC=True)

Callback = Callable[..., Awaitable[Any] | Any]
CustomProcessor = Callable[[FileCandidate], Awaitable[FileDescriptor]]


class UploadPipeline:
    """Application service responsible for the file collection.

    This service orchestrates:
    - Count, type and size validation of candidates
    - Image compression to the configured size budget
    - Persisting files through the storage backend
    - Thumbnails for images (best effort)
    - Staged uploads, deletion and download
    """

    def __init__(
        self,
        options: UploadOptions | None = None,
        storage: StorageBackend | None = None,
        *,
        compressor: SizeBudgetCompressor | None = None,
        labels: UploadLabels | None = None,
        custom_processor: CustomProcessor | None = None,
        on_file_uploaded: Callback | None = None,
        on_files_changed: Callback | None = None,
        on_file_deleted: Callback | None = None,
        on_file_downloaded: Callback | None = None,
    ) -> None:
        self.options = options or UploadOptions()
        self.storage = storage
        self.compressor = compressor or SizeBudgetCompressor()
        self.labels = labels or UploadLabels()
        self.custom_processor = custom_processor

        self.on_file_uploaded = on_file_uploaded
        self.on_files_changed = on_files_changed
        self.on_file_deleted = on_file_deleted
        self.on_file_downloaded = on_file_downloaded

        self.files: list[FileDescriptor] = []
        self.pending: list[FileCandidate] = []
        self.messages: list[str] = []

        self._uploading = False
        self._delete_service = DeleteService(storage)
        self._download_service = DownloadService(storage)

    @property
    def is_uploading(self) -> bool:
        return self._uploading

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    async def submit(self, candidates: Iterable[FileCandidate]) -> BatchOutcome:
        """Accept a batch from the file source.

        Processes it immediately when ``auto_upload`` is set, otherwise
        stages it for :meth:`upload_pending`.
        """
        self.messages.clear()

        if self.options.auto_upload:
            return await self.process(candidates)

        return self.stage(candidates)

    def stage(self, candidates: Iterable[FileCandidate]) -> BatchOutcome:
        """Validate candidates and queue them for a later upload."""
        outcomes: list[CandidateOutcome] = []

        for candidate in candidates:
            if self._max_files_reached(len(self.files) + len(self.pending)):
                outcomes.append(self._reject_max_files(candidate))
                break

            rejection = self._validate(candidate)
            if rejection is not None:
                outcomes.append(rejection)
                continue

            self.pending.append(candidate)
            outcomes.append(Staged(file_name=candidate.file_name))

        logger.debug("Candidates staged", extra={"pending": len(self.pending)})
        return self._batch_outcome(outcomes)

    async def upload_pending(self) -> BatchOutcome:
        """Process every staged candidate, then clear the queue."""
        if self._uploading:
            self.messages.append(self.labels.error_upload_in_progress)
            return self._batch_outcome([])

        if not self.pending:
            self.messages.append(self.labels.error_no_files_to_upload)
            return self._batch_outcome([])

        self._uploading = True

        try:
            outcome = await self.process(list(self.pending))
            self.pending.clear()
            return outcome
        finally:
            self._uploading = False

    def remove_pending(self, candidate: FileCandidate) -> bool:
        """Drop one staged candidate. Returns False if it was not queued."""
        for index, queued in enumerate(self.pending):
            if queued is candidate:
                del self.pending[index]
                return True
        return False

    def clear_pending(self) -> None:
        self.pending.clear()

    async def process(self, candidates: Iterable[FileCandidate]) -> BatchOutcome:
        """Run each candidate through validation, compression and persistence.

        Candidates are handled strictly in order. Reaching the file count
        limit stops the batch; any other rejection only affects its own
        candidate. Listeners are notified once with the full collection.
        """
        outcomes: list[CandidateOutcome] = []

        for candidate in candidates:
            if self._max_files_reached(len(self.files)):
                outcomes.append(self._reject_max_files(candidate))
                break

            try:
                outcome = await self._process_candidate(candidate)
            except FileManagerError as exc:
                logger.warning(
                    "Upload failed",
                    extra={"file_name": candidate.file_name, "error_code": exc.error_code},
                )
                outcome = self._reject(
                    candidate,
                    RejectionReason.UPLOAD_FAILED,
                    self.labels.error_uploading_file.format(file_name=candidate.file_name, reason=exc.message),
                )
            except Exception as exc:
                logger.exception("Unexpected error uploading file", extra={"file_name": candidate.file_name})
                outcome = self._reject(
                    candidate,
                    RejectionReason.UPLOAD_FAILED,
                    self.labels.error_uploading_file.format(file_name=candidate.file_name, reason=str(exc)),
                )

            outcomes.append(outcome)

        await self._emit(self.on_files_changed, list(self.files))

        logger.info(
            "Batch processed",
            extra={
                "accepted": sum(isinstance(o, Accepted) for o in outcomes),
                "rejected": sum(isinstance(o, Rejected) for o in outcomes),
                "total_files": len(self.files),
            },
        )
        return self._batch_outcome(outcomes)

    # ------------------------------------------------------------------
    # Delete / download
    # ------------------------------------------------------------------

    async def delete(self, descriptor: FileDescriptor) -> bool:
        """Delete a file from storage and from the collection.

        Returns:
            False if storage could not delete it; the descriptor then stays
            in the collection and a message is recorded
        """
        try:
            await self._delete_service.delete_file(descriptor)

        except DeleteFailedError:
            self.messages.append(self.labels.error_deleting_file.format(file_name=descriptor.file_name))
            return False

        except Exception as exc:
            logger.exception("Error deleting file", extra={"file_id": descriptor.id})
            reason = exc.message if isinstance(exc, FileManagerError) else str(exc)
            self.messages.append(
                self.labels.error_deleting_file_exception.format(file_name=descriptor.file_name, reason=reason)
            )
            return False

        self.files = [f for f in self.files if f.id != descriptor.id]

        await self._emit(self.on_file_deleted, descriptor)
        await self._emit(self.on_files_changed, list(self.files))
        return True

    async def download(self, descriptor: FileDescriptor) -> DownloadedFile:
        """Return a file's content.

        Raises:
            NotFoundError: If the content is gone
            StorageError: If the backend fails; a message is recorded too
        """
        try:
            downloaded = await self._download_service.download_file(descriptor)
        except FileManagerError as exc:
            logger.warning("Download failed", extra={"file_id": descriptor.id, "error_code": exc.error_code})
            self.messages.append(
                self.labels.error_downloading_file.format(file_name=descriptor.file_name, reason=exc.message)
            )
            raise

        await self._emit(self.on_file_downloaded, descriptor)
        return downloaded

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _process_candidate(self, candidate: FileCandidate) -> CandidateOutcome:
        rejection = self._validate(candidate)
        if rejection is not None:
            return rejection

        file_name = candidate.file_name
        content_type = candidate.content_type
        data: bytes | None = None

        if self._needs_compression(candidate):
            compressed = await self._compress(candidate)
            if isinstance(compressed, Rejected):
                return compressed
            data, content_type = compressed

        if self.custom_processor is not None:
            working = candidate if data is None else FileCandidate.from_bytes(
                data, file_name=file_name, content_type=content_type
            )
            descriptor = await self.custom_processor(working)

        elif self.storage is not None:
            try:
                descriptor = await self.storage.save(
                    data if data is not None else candidate.open_read(),
                    file_name=file_name,
                    content_type=content_type,
                )
            except FileManagerError as exc:
                logger.warning(
                    "Storage rejected file",
                    extra={"file_name": file_name, "error_code": exc.error_code},
                )
                return self._reject(
                    candidate,
                    RejectionReason.STORAGE_ERROR,
                    self.labels.error_uploading_file.format(file_name=file_name, reason=exc.message),
                )
            except Exception as exc:
                logger.exception("Unexpected storage error", extra={"file_name": file_name})
                return self._reject(
                    candidate,
                    RejectionReason.STORAGE_ERROR,
                    self.labels.error_uploading_file.format(file_name=file_name, reason=str(exc)),
                )

        else:
            if data is None:
                try:
                    data = await asyncio.to_thread(
                        read_limited,
                        candidate.open_read(),
                        self.options.max_file_size,
                        file_name=file_name,
                    )
                except FileSizeError:
                    return self._reject_too_large(candidate)

            descriptor = FileDescriptor(
                file_name=file_name,
                content_type=content_type,
                file_size=len(data),
                data=data,
            )

        await self._attach_thumbnail(descriptor)

        self.files.append(descriptor)
        await self._emit(self.on_file_uploaded, descriptor)

        logger.info(
            "File accepted",
            extra={"file_id": descriptor.id, "file_name": file_name, "size": descriptor.file_size},
        )
        return Accepted(file_name=file_name, descriptor=descriptor)

    async def _compress(self, candidate: FileCandidate) -> tuple[bytes, str] | Rejected:
        options = self.options
        file_name = candidate.file_name

        logger.info(
            "Attempting to compress image",
            extra={"file_name": file_name, "size": candidate.size},
        )

        try:
            raw = await asyncio.to_thread(
                read_limited,
                candidate.open_read(),
                options.max_file_size * COMPRESSION_READ_FACTOR,
                file_name=file_name,
            )
            result = await self.compressor.compress_async(
                raw,
                candidate.content_type,
                options.max_file_size,
                options.compression_quality_levels,
                options.max_image_dimension,
            )
        except Exception as exc:
            logger.exception("Error during compression", extra={"file_name": file_name})
            reason = exc.message if isinstance(exc, FileManagerError) else str(exc)
            return self._reject(
                candidate,
                RejectionReason.COMPRESSION_FAILED,
                self.labels.error_during_compression.format(file_name=file_name, reason=reason),
            )

        if not result.success or result.data is None:
            return self._reject(
                candidate,
                RejectionReason.COMPRESSION_FAILED,
                self.labels.image_compression_failed.format(file_name=file_name, reason=result.message),
            )

        self.messages.append(
            self.labels.image_compressed.format(
                file_name=file_name,
                original_size=format_file_size(result.original_size),
                compressed_size=format_file_size(result.compressed_size),
            )
        )
        return result.data, result.content_type or candidate.content_type

    async def _attach_thumbnail(self, descriptor: FileDescriptor) -> None:
        if not descriptor.is_image:
            return

        try:
            if descriptor.data is not None:
                image_bytes = descriptor.data
            elif self.storage is not None and descriptor.is_persisted:
                image_bytes = await self.storage.read_bytes(descriptor)
            else:
                return

            if image_bytes:
                descriptor.thumbnail_source = build_data_url(descriptor.content_type, image_bytes)

        except Exception:
            # no thumbnail; the presentation layer falls back to an icon
            logger.warning("Error loading thumbnail", extra={"file_name": descriptor.file_name})

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------

    def _max_files_reached(self, current_count: int) -> bool:
        max_count = self.options.max_file_count
        return max_count > 0 and current_count >= max_count

    def _needs_compression(self, candidate: FileCandidate) -> bool:
        return (
            candidate.is_image
            and self.options.auto_compress_images
            and candidate.size > self.options.max_file_size
        )

    def _validate(self, candidate: FileCandidate) -> Rejected | None:
        allowed = self.options.allowed_file_types
        if allowed and candidate.content_type not in allowed:
            return self._reject(
                candidate,
                RejectionReason.TYPE_NOT_ALLOWED,
                self.labels.error_file_type_not_allowed.format(
                    content_type=candidate.content_type,
                    file_name=candidate.file_name,
                ),
            )

        if candidate.size > self.options.max_file_size and not self._needs_compression(candidate):
            return self._reject_too_large(candidate)

        return None

    def _reject_too_large(self, candidate: FileCandidate) -> Rejected:
        return self._reject(
            candidate,
            RejectionReason.TOO_LARGE,
            self.labels.error_file_too_large.format(
                file_name=candidate.file_name,
                max_size=format_file_size(self.options.max_file_size),
            ),
        )

    def _reject_max_files(self, candidate: FileCandidate) -> Rejected:
        return self._reject(
            candidate,
            RejectionReason.MAX_FILES_REACHED,
            self.labels.error_max_files_reached.format(max_files=self.options.max_file_count),
        )

    def _reject(self, candidate: FileCandidate, reason: RejectionReason, message: str) -> Rejected:
        logger.info(
            "File rejected",
            extra={"file_name": candidate.file_name, "reason": reason.value},
        )
        self.messages.append(message)
        return Rejected(file_name=candidate.file_name, reason=reason, message=message)

    def _batch_outcome(self, outcomes: list[CandidateOutcome]) -> BatchOutcome:
        return BatchOutcome(outcomes=outcomes, files=list(self.files), messages=list(self.messages))

    @staticmethod
    async def _emit(callback: Callback | None, *args: Any) -> None:
        if callback is None:
            return

        try:
            result = callback(*args)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Event listener failed", extra={"listener": getattr(callback, "__name__", None)})
