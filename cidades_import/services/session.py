from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from ..csvfile.reader import ImportRejected
from ..logging.error_log import ErrorLogBuffer
from ..models.candidate_record import RowRejection
from ..models.config_models import CsvConfig, FlowConfig
from ..models.error_record import FILE_LEVEL_ROW, ErrorRecord
from ..models.import_payload import ImportPayload
from ..models.import_step import ImportStep
from ..models.import_summary import ImportSummary
from ..models.reference import ReferenceCity
from .matching import match_records, reference_index_for
from .payload import build_payload
from .pipeline import ParseResult, parse_import
from .summary import collapse_errors

"""Import session: the upload -> preview -> importing -> success lifecycle.

One session per import dialog. Parse results live only in memory: reset()
discards them; once confirm() has handed the payload to the writer the write
cannot be cancelled from here.
"""

logger = logging.getLogger(__name__)

Writer = Callable[[ImportPayload], Any]


class InvalidStepError(RuntimeError):
    """Raised when an operation is not allowed in the current step."""


class ImportSession:
    """State machine around parse, match and confirmed write of one file.

    Args:
        flow: import flow configuration
        reference: registered cities (ids, names, mayors) for matching
        csv_config: decoding/reporting options
        error_log: optional buffer receiving row/match/write error records
    """

    def __init__(
        self,
        flow: FlowConfig,
        reference: Iterable[ReferenceCity] = (),
        csv_config: CsvConfig | None = None,
        error_log: ErrorLogBuffer | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self.flow = flow
        self.reference = list(reference)
        self.csv_config = csv_config or CsvConfig()
        self.error_log = error_log
        self._id_factory = id_factory
        self.reset()

    def reset(self) -> None:
        self.step = ImportStep.UPLOAD
        self.file_name = ""
        self.errors: list[str] = []
        self.parse_result: ParseResult | None = None
        self.summary: ImportSummary | None = None
        self.write_result: Any = None

    @property
    def payload(self) -> ImportPayload:
        if self.summary is None:
            return ImportPayload()
        return build_payload(self.flow, self.summary)

    @property
    def rejected(self) -> int:
        return len(self.parse_result.rejections) if self.parse_result is not None else 0

    def _record(self, row: int, error_type: str, message: str) -> ErrorRecord:
        return ErrorRecord.create(self.file_name, self.flow.name, row, error_type, message)

    def _log(self, row: int, error_type: str, message: str) -> None:
        if self.error_log is not None:
            self.error_log.append(self._record(row, error_type, message))

    def _log_rows(self, summary: ImportSummary, rejections: list[RowRejection]) -> None:
        if self.error_log is None:
            return
        records = [
            self._record(r.row_number, "MISSING_REQUIRED_FIELD", r.message) for r in rejections
        ]
        records.extend(
            self._record(m.record.row_number, "UNMATCHED_REFERENCE", m.display_name)
            for m in summary.results
            if not m.matched
        )
        self.error_log.extend(records)

    def load(self, file_name: str, data: bytes | str) -> bool:
        """Parse and match a file; True when the session reached PREVIEW.

        Only allowed before confirming. A file-level rejection leaves the session
        in UPLOAD with the rejection message in ``errors``.
        """
        if self.step not in (ImportStep.UPLOAD, ImportStep.PREVIEW):
            raise InvalidStepError(f"cannot load a file while {self.step.value}")
        self.reset()
        self.file_name = Path(file_name).name

        kwargs: dict[str, Any] = {"encoding": self.csv_config.encoding}
        if self._id_factory is not None:
            kwargs["id_factory"] = self._id_factory
        try:
            result = parse_import(data, self.flow, **kwargs)
        except ImportRejected as e:
            limit = self.csv_config.max_reported_errors
            self.errors = collapse_errors(e.details, limit) + [e.message]
            self._log(FILE_LEVEL_ROW, "FILE_REJECTED", e.message)
            return False

        collapse = self.csv_config.collapse_whitespace
        index = reference_index_for(self.flow, self.reference, collapse_whitespace=collapse)
        summary = match_records(
            self.flow,
            result.candidates,
            index,
            existing_ids=(c.id for c in self.reference),
            collapse_whitespace=collapse,
        )
        self._log_rows(summary, result.rejections)

        self.parse_result = result
        self.summary = summary
        self.errors = result.error_messages(self.csv_config.max_reported_errors)
        self.step = ImportStep.PREVIEW
        logger.info(
            "file=%s flow=%s rows=%d rejected=%d matched=%d unmatched=%d",
            self.file_name,
            self.flow.name,
            summary.total,
            len(result.rejections),
            summary.matched,
            summary.unmatched,
        )
        return True

    def confirm(self, writer: Writer) -> bool:
        """Hand the matched payload to ``writer``.

        On success the session ends in SUCCESS. If the writer raises, the
        session goes back to PREVIEW with the error surfaced and the parse kept,
        so the same payload can be retried.
        """
        if self.step is not ImportStep.PREVIEW:
            raise InvalidStepError(f"cannot confirm while {self.step.value}")
        payload = self.payload
        self.step = ImportStep.IMPORTING
        self.errors = []
        try:
            self.write_result = writer(payload)
        except Exception as e:
            self.errors = [f"Erro ao importar dados: {e}"]
            self._log(FILE_LEVEL_ROW, "WRITE_FAILED", str(e))
            logger.error("file=%s write failed: %s", self.file_name, e)
            self.step = ImportStep.PREVIEW
            return False
        self.step = ImportStep.SUCCESS
        return True
