"""
Cockpit session: the one place where user actions meet state.

A CockpitSession owns the CockpitStore, restores the stored snapshot at
start, persists every committed transition through an observer, and
runs document import. Failures never escape as crashes: they end in a
well-defined state plus a neutral message on the session.
"""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, List, Optional

from .models.loan import LoanCockpitState, LoanInfo, PendingRationale
from .orchestration.state import (
    AddPendingRationales,
    ClearState,
    ConfirmAllRationales,
    ConfirmRationale,
    EditPendingRationale,
    ExtractionFailed,
    LoadDemo,
    MarkReviewed,
    RefreshStatuses,
    RejectRationale,
    RestoreState,
    SetExtracting,
    SetShowConfirmation,
    StartExtraction,
)
from .orchestration.store import CockpitStore
from .plugins.pdf_extractor import PDFExtractorPlugin, validate_pdf_filename
from .plugins.rationale_extractor import LoanMetadata, RationaleExtractor, parse_approval_date
from .services.approval_age import calculate_approval_logic_age
from .services.review_summary import generate_review_summary
from .services.staleness import calculate_status, utc_now
from .storage.snapshot import deserialize_state, serialize_state
from .storage.state_store import KeyValueStore, MemoryStore, create_store
from .utils.config import DEFAULT_STORAGE_KEY, Config
from .utils.errors import (
    EXTRACTION_FAILED_MESSAGE,
    SNAPSHOT_CORRUPTED_MESSAGE,
    STORE_UNAVAILABLE_MESSAGE,
    DocumentProcessingError,
    PersistenceError,
)
from .utils.logging import set_context, with_context

logger = logging.getLogger(__name__)

BASE36_DIGITS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def _strip_pdf_extension(filename: str) -> str:
    return re.sub(r"\.pdf$", "", filename, flags=re.IGNORECASE)


def build_loan_info(
    metadata: LoanMetadata,
    filename: str,
    now: Optional[datetime] = None,
    today: Optional[date] = None
) -> LoanInfo:
    """
    Build the LoanInfo for an imported credit memo.

    The loan id is derived from the borrower (or the file name) plus a
    base-36 millisecond timestamp. An approval date that is missing or
    unparseable falls back to today.
    """
    if now is None:
        now = utc_now()
    if today is None:
        today = date.today()

    approval_date = today
    if metadata.approval_date:
        parsed = parse_approval_date(metadata.approval_date)
        if parsed is not None:
            approval_date = parsed
            logger.debug(f"Parsed approval date: {approval_date.isoformat()}")
        else:
            logger.info(f"Could not parse approval date '{metadata.approval_date}', using {today.isoformat()}")

    if metadata.borrower:
        id_base = re.sub(r"[^a-zA-Z0-9]", "-", metadata.borrower)[:15].upper()
    else:
        id_base = re.sub(r"[^a-zA-Z0-9]", "-", _strip_pdf_extension(filename))[:10].upper()

    millis = int(now.timestamp() * 1000)
    borrower_reference = metadata.borrower or f"REF-{_strip_pdf_extension(filename)[:15].upper()}"

    return LoanInfo(
        id=f"LOAN-{id_base}-{to_base36(millis)}",
        approval_date=approval_date,
        borrower_reference=borrower_reference,
    )


class CockpitSession:
    """
    One user's cockpit: state, persistence and document import.

    Attributes:
        store: CockpitStore holding the state
        storage_warning: Standing persistence warning, None when healthy
        extraction_message: Message from the last failed import, None otherwise
    """

    def __init__(
        self,
        kv_store: Optional[KeyValueStore] = None,
        storage_key: str = DEFAULT_STORAGE_KEY,
        pdf_extractor: Optional[PDFExtractorPlugin] = None,
        rationale_extractor: Optional[RationaleExtractor] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        self.kv_store = kv_store if kv_store is not None else MemoryStore()
        self.storage_key = storage_key
        self.pdf_extractor = pdf_extractor if pdf_extractor is not None else PDFExtractorPlugin()
        self.rationale_extractor = (
            rationale_extractor if rationale_extractor is not None else RationaleExtractor()
        )
        self.clock = clock

        self.storage_warning: Optional[str] = None
        self.extraction_message: Optional[str] = None

        self._request_lock = threading.Lock()
        self._latest_request_id = 0

        self.store = CockpitStore(clock=clock)
        self._restore()
        self.store.subscribe(self._persist)

    @property
    def state(self) -> LoanCockpitState:
        return self.store.state

    # Persistence

    def _restore(self) -> None:
        try:
            raw = self.kv_store.get(self.storage_key)
        except PersistenceError as e:
            logger.warning(f"Stored session unavailable: {e}")
            self.storage_warning = STORE_UNAVAILABLE_MESSAGE
            return

        if not raw:
            logger.info("No stored session, starting empty")
            return

        try:
            restored = deserialize_state(raw, self.clock())
        except PersistenceError as e:
            logger.warning(f"Discarding stored session: {e}")
            self.storage_warning = SNAPSHOT_CORRUPTED_MESSAGE
            try:
                self.kv_store.remove(self.storage_key)
            except PersistenceError as remove_error:
                logger.error(f"Failed to remove corrupted snapshot: {remove_error}")
            return

        if restored.is_extracting:
            # No extraction survives a restart
            restored = replace(restored, is_extracting=False)

        self.store.dispatch(RestoreState(restored))
        if restored.loan is not None:
            set_context(loan_id=restored.loan.id)
        logger.info(
            f"Restored session: {len(restored.rationales)} rationales, "
            f"{len(restored.pending_rationales)} pending"
        )

    def _persist(self, state: LoanCockpitState, event) -> None:
        try:
            if isinstance(event, ClearState):
                self.kv_store.remove(self.storage_key)
            else:
                self.kv_store.set(self.storage_key, serialize_state(state))
        except PersistenceError as e:
            logger.warning(f"Session is memory-only after {type(event).__name__}: {e}")
            self.storage_warning = STORE_UNAVAILABLE_MESSAGE
            return

        self.storage_warning = None

    # Document import

    def import_document(self, filename: str, data: Optional[bytes]) -> int:
        """
        Validate an upload and start an extraction request.

        Returns:
            Request id to pass to run_extraction()

        Raises:
            DocumentProcessingError: If the file name is not a PDF
        """
        message = validate_pdf_filename(filename)
        if message:
            logger.info(f"Rejected upload {filename}: not a PDF")
            raise DocumentProcessingError.invalid_format(filename, message)

        logger.info(f"Accepted upload {filename} ({len(data or b'')} bytes)")
        return self.begin_extraction()

    def begin_extraction(self) -> int:
        """Hand out a new request id; any earlier outstanding request becomes stale."""
        with self._request_lock:
            self._latest_request_id += 1
            request_id = self._latest_request_id
            self.extraction_message = None
            self.store.dispatch(SetExtracting(True))

        logger.info(f"Started extraction request {request_id}")
        return request_id

    def _supersede_requests(self) -> None:
        with self._request_lock:
            self._latest_request_id += 1

    @with_context(component="extraction")
    def run_extraction(
        self,
        request_id: int,
        filename: str,
        data: Optional[bytes],
        now: Optional[datetime] = None
    ) -> bool:
        """
        Extract rationales from an uploaded PDF and load them for confirmation.

        Args:
            request_id: Id returned by begin_extraction()
            filename: Uploaded file name
            data: Raw file bytes
            now: Extraction time, defaults to the session clock

        Returns:
            True if the result was applied, False on failure or when a
            newer request superseded this one
        """
        set_context(request_id=request_id)
        if now is None:
            now = self.clock()

        try:
            document = self.pdf_extractor.extract(data, filename)
            if not document.success:
                return self._fail_extraction(request_id, document.error or EXTRACTION_FAILED_MESSAGE)

            extraction = self.rationale_extractor.extract(document.text, filename, now)
            if not extraction.success:
                return self._fail_extraction(request_id, extraction.error)

            loan = build_loan_info(extraction.metadata, filename, now)
        except Exception as e:
            logger.error(f"Import of {filename} failed: {str(e)}", exc_info=True)
            return self._fail_extraction(request_id, EXTRACTION_FAILED_MESSAGE)

        with self._request_lock:
            if request_id != self._latest_request_id:
                logger.info(f"Discarding result of superseded request {request_id}")
                return False
            self.store.dispatch(StartExtraction(loan, extraction.rationales), now)

        set_context(loan_id=loan.id)
        logger.info(
            f"Loaded {len(extraction.rationales)} pending rationales for {loan.id} from {filename}"
        )
        return True

    def _fail_extraction(self, request_id: int, message: str) -> bool:
        with self._request_lock:
            if request_id != self._latest_request_id:
                logger.info(f"Discarding failure of superseded request {request_id}")
                return False
            self.extraction_message = message
            self.store.dispatch(ExtractionFailed())

        logger.warning(f"Extraction request {request_id} failed: {message}")
        return False

    # User actions

    def load_demo(self) -> LoanCockpitState:
        self._supersede_requests()
        self.extraction_message = None
        state = self.store.dispatch(LoadDemo())
        if state.is_extracting:
            state = self.store.dispatch(SetExtracting(False))
        set_context(loan_id=state.loan.id)
        return state

    def add_pending_rationales(self, rationales: List[PendingRationale]) -> LoanCockpitState:
        return self.store.dispatch(AddPendingRationales(tuple(rationales)))

    def confirm_rationale(self, rationale_id: str) -> Optional[LoanCockpitState]:
        """Confirm one pending rationale; None when the id is not pending."""
        pending = self.state.find_pending(rationale_id)
        if pending is None:
            return None
        return self.store.dispatch(ConfirmRationale(pending))

    def reject_rationale(self, rationale_id: str) -> Optional[LoanCockpitState]:
        if self.state.find_pending(rationale_id) is None:
            return None
        return self.store.dispatch(RejectRationale(rationale_id))

    def edit_pending_rationale(
        self,
        rationale_id: str,
        title: Optional[str] = None,
        description: Optional[str] = None
    ) -> Optional[LoanCockpitState]:
        if self.state.find_pending(rationale_id) is None:
            return None
        return self.store.dispatch(EditPendingRationale(rationale_id, title, description))

    def confirm_all(self) -> LoanCockpitState:
        return self.store.dispatch(ConfirmAllRationales())

    def mark_reviewed(self, rationale_id: str) -> Optional[LoanCockpitState]:
        if self.state.find_rationale(rationale_id) is None:
            return None
        return self.store.dispatch(MarkReviewed(rationale_id))

    def set_show_confirmation(self, value: bool) -> LoanCockpitState:
        return self.store.dispatch(SetShowConfirmation(value))

    def refresh_statuses(self, now: Optional[datetime] = None) -> LoanCockpitState:
        """Bring cached statuses up to date with the clock; no transition when none changed."""
        if now is None:
            now = self.clock()
        state = self.state
        if all(r.status == calculate_status(r.last_reviewed_at, now) for r in state.rationales):
            return state
        return self.store.dispatch(RefreshStatuses(), now)

    def clear(self) -> LoanCockpitState:
        self._supersede_requests()
        self.extraction_message = None
        set_context(loan_id=None)
        return self.store.dispatch(ClearState())

    # Read models

    def summary(self, now: Optional[datetime] = None):
        """Review summary for the loan in view, or None when no loan is loaded."""
        if now is None:
            now = self.clock()
        # Statuses are cached on the rationales and may lag the clock
        state = self.refresh_statuses(now)
        if state.loan is None:
            return None
        return generate_review_summary(state.rationales, state.loan.id, now)

    def approval_logic_age(self, today: Optional[date] = None) -> Optional[int]:
        state = self.state
        if state.loan is None:
            return None
        return calculate_approval_logic_age(state.loan.approval_date, today)


# Global instance (initialized on first use)
_session: Optional[CockpitSession] = None
_session_lock = threading.Lock()


def get_session() -> CockpitSession:
    """
    Return the process-wide cockpit session, creating it on first use.

    Configuration is read from config.yaml and the environment.
    """
    global _session

    with _session_lock:
        if _session is None:
            config = Config.load()
            logger.info(
                f"Initializing cockpit session: backend={config.storage.backend}, "
                f"state_dir={config.storage.state_dir}"
            )
            _session = CockpitSession(
                kv_store=create_store(config.storage.backend, config.storage.state_dir),
                storage_key=config.storage.storage_key,
            )
        return _session


def reset_session() -> None:
    global _session

    with _session_lock:
        _session = None
