"""
Submission workflow.

Draft -> Validating -> {Rejected, Accepted}

Each call works on its own record; nothing is kept between submissions.
A fault while handling an accepted application is logged and downgraded to
a Draft re-display carrying one general failure, with the entered data kept.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from award_form.schema import ApplicationRecord, dropdown_options, ensure_sections, new_record
from award_form.utils import calculate_sha256, canonical_json, short_hash
from award_form.validation import GENERAL_SECTION, ValidationResult, validate_payload


PROCESSING_ERROR_MESSAGE = 'An error occurred while processing your application. Please try again.'


class WorkflowState(str, Enum):
    """Submission lifecycle states."""
    DRAFT = 'draft'
    VALIDATING = 'validating'
    REJECTED = 'rejected'
    ACCEPTED = 'accepted'


@dataclass
class Confirmation:
    """Artifact produced for an accepted application."""
    researcher_name: str
    message: str
    submitted_at: datetime
    reference: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'researcher_name': self.researcher_name,
            'message': self.message,
            'submitted_at': self.submitted_at.isoformat(),
            'reference': self.reference,
        }


@dataclass
class WorkflowOutcome:
    """What the host needs to render after a workflow step."""
    state: WorkflowState
    record: ApplicationRecord
    result: ValidationResult = field(default_factory=ValidationResult)
    confirmation: Optional[Confirmation] = None
    options: Dict[str, List[str]] = field(default_factory=dropdown_options)

    @property
    def accepted(self) -> bool:
        return self.state is WorkflowState.ACCEPTED


AcceptHook = Callable[[ApplicationRecord, Confirmation], None]


class SubmissionWorkflow:
    """
    Orchestrates one form submission.

    Args:
        logger: Logger for workflow events (defaults to this module's logger)
        on_accept: Optional collaborator called with (record, confirmation)
            once an application is accepted, e.g. for storage elsewhere
    """

    def __init__(self, logger: Optional[logging.Logger] = None, on_accept: Optional[AcceptHook] = None):
        self.logger = logger or logging.getLogger(__name__)
        self.on_accept = on_accept

    def start(self) -> WorkflowOutcome:
        """Fresh form with one placeholder entry per section."""
        return WorkflowOutcome(state=WorkflowState.DRAFT, record=new_record())

    def submit(self, payload: Dict[str, Any], today: date,
               submitted_at: Optional[datetime] = None) -> WorkflowOutcome:
        """
        Validate a submitted payload and accept or reject it.

        Args:
            payload: Nested payload (bound form or JSON body)
            today: Date validation is evaluated on
            submitted_at: Submission timestamp (defaults to now, UTC)

        Returns:
            WorkflowOutcome in state REJECTED, ACCEPTED or (after a fault) DRAFT
        """
        if submitted_at is None:
            submitted_at = datetime.utcnow()

        record = ApplicationRecord.from_dict(payload if isinstance(payload, dict) else None)
        self.logger.debug(f'Workflow state: {WorkflowState.VALIDATING.value}')

        result = validate_payload(payload, today)
        if not result.is_valid:
            self.logger.warning('Form validation failed')
            for error in result.errors:
                self.logger.warning(f'Validation error for {error.field or "<form>"}: {error.message}')
            return WorkflowOutcome(state=WorkflowState.REJECTED, record=ensure_sections(record), result=result)

        try:
            confirmation = self._accept(record, submitted_at)
        except Exception as e:
            self.logger.error(f'Error occurred while processing form submission: {str(e)}', exc_info=True)
            failure = ValidationResult()
            failure.add_error('', PROCESSING_ERROR_MESSAGE, 'processing_error', GENERAL_SECTION)
            return WorkflowOutcome(state=WorkflowState.DRAFT, record=ensure_sections(record), result=failure)

        return WorkflowOutcome(state=WorkflowState.ACCEPTED, record=record, result=result,
                               confirmation=confirmation)

    def _accept(self, record: ApplicationRecord, submitted_at: datetime) -> Confirmation:
        name = record.name.strip()
        confirmation = Confirmation(
            researcher_name=name,
            message=f'Application for {name} submitted successfully!',
            submitted_at=submitted_at,
            reference=short_hash(calculate_sha256(canonical_json(record.to_dict()).encode('utf-8'))),
        )
        if self.on_accept is not None:
            self.on_accept(record, confirmation)
        self.logger.info(f'Form submitted successfully for researcher: {name}')
        return confirmation
