"""
Unit tests for the submission workflow.
"""

import logging
from datetime import datetime

import pytest

from award_form.schema import SECTIONS
from award_form.workflow import (
    PROCESSING_ERROR_MESSAGE, Confirmation, SubmissionWorkflow, WorkflowState
)


SUBMITTED_AT = datetime(2025, 6, 15, 9, 30, 0)


class TestStart:
    def test_start_is_draft_with_placeholders(self):
        outcome = SubmissionWorkflow().start()
        assert outcome.state is WorkflowState.DRAFT
        assert outcome.result.is_valid is True
        for section in SECTIONS:
            assert len(outcome.record.items(section)) == 1

    def test_start_carries_dropdown_options(self):
        outcome = SubmissionWorkflow().start()
        assert outcome.options['quartile'] == ['Q1', 'Q2', 'Q3', 'Q4']


class TestRejected:
    def test_invalid_payload_rejected(self, valid_payload, today):
        valid_payload['Name'] = 'Al'
        outcome = SubmissionWorkflow().submit(valid_payload, today, SUBMITTED_AT)
        assert outcome.state is WorkflowState.REJECTED
        assert outcome.confirmation is None
        assert outcome.result.messages_for('Name') == ['Name must be between 3 and 100 characters']

    def test_rejected_record_keeps_entered_values(self, valid_payload, today):
        valid_payload['Name'] = 'Al'
        outcome = SubmissionWorkflow().submit(valid_payload, today, SUBMITTED_AT)
        assert outcome.record.name == 'Al'
        assert outcome.record.books[0].isbn == '978-3-16-148410-0'

    def test_rejected_record_padded_for_redisplay(self, valid_payload, today):
        del valid_payload['Patents']
        valid_payload['Name'] = ''
        outcome = SubmissionWorkflow().submit(valid_payload, today, SUBMITTED_AT)
        assert len(outcome.record.patents) == 1

    def test_failures_logged_as_warnings(self, valid_payload, today, caplog):
        valid_payload['Discipline'] = ''
        with caplog.at_level(logging.WARNING, logger='award_form.workflow'):
            SubmissionWorkflow().submit(valid_payload, today, SUBMITTED_AT)
        assert 'Validation error for Discipline' in caplog.text


class TestAccepted:
    def test_valid_payload_accepted(self, valid_payload, today):
        outcome = SubmissionWorkflow().submit(valid_payload, today, SUBMITTED_AT)
        assert outcome.state is WorkflowState.ACCEPTED
        assert outcome.accepted is True
        assert outcome.confirmation.message == 'Application for Ali Researcher submitted successfully!'
        assert outcome.confirmation.researcher_name == 'Ali Researcher'
        assert outcome.confirmation.submitted_at == SUBMITTED_AT

    def test_reference_is_stable(self, valid_payload, today):
        first = SubmissionWorkflow().submit(valid_payload, today, SUBMITTED_AT)
        second = SubmissionWorkflow().submit(valid_payload, today, SUBMITTED_AT)
        assert first.confirmation.reference == second.confirmation.reference
        assert len(first.confirmation.reference) == 12

    def test_reference_depends_on_content(self, valid_payload, today):
        first = SubmissionWorkflow().submit(valid_payload, today, SUBMITTED_AT)
        valid_payload['Discipline'] = 'Mechanical Engineering'
        second = SubmissionWorkflow().submit(valid_payload, today, SUBMITTED_AT)
        assert first.confirmation.reference != second.confirmation.reference

    def test_on_accept_receives_record(self, valid_payload, today):
        received = []
        workflow = SubmissionWorkflow(on_accept=lambda record, conf: received.append((record, conf)))
        outcome = workflow.submit(valid_payload, today, SUBMITTED_AT)
        assert len(received) == 1
        assert received[0][0] is outcome.record
        assert isinstance(received[0][1], Confirmation)

    def test_confirmation_to_dict(self, valid_payload, today):
        outcome = SubmissionWorkflow().submit(valid_payload, today, SUBMITTED_AT)
        data = outcome.confirmation.to_dict()
        assert data['submitted_at'] == '2025-06-15T09:30:00'
        assert data['researcher_name'] == 'Ali Researcher'

    def test_submissions_are_independent(self, valid_payload, today):
        workflow = SubmissionWorkflow()
        workflow.submit(valid_payload, today, SUBMITTED_AT)
        outcome = workflow.submit({}, today, SUBMITTED_AT)
        assert outcome.state is WorkflowState.REJECTED
        assert outcome.record.name == ''


class TestProcessingFault:
    def test_fault_downgrades_to_draft(self, valid_payload, today):
        def explode(record, confirmation):
            raise RuntimeError('storage unavailable')

        outcome = SubmissionWorkflow(on_accept=explode).submit(valid_payload, today, SUBMITTED_AT)
        assert outcome.state is WorkflowState.DRAFT
        assert outcome.confirmation is None
        assert [e.message for e in outcome.result.general_errors] == [PROCESSING_ERROR_MESSAGE]
        assert len(outcome.result.errors) == 1

    def test_fault_keeps_entered_data(self, valid_payload, today):
        def explode(record, confirmation):
            raise RuntimeError('storage unavailable')

        outcome = SubmissionWorkflow(on_accept=explode).submit(valid_payload, today, SUBMITTED_AT)
        assert outcome.record.name == 'Ali Researcher'
        assert outcome.record.research_prizes[0].prize_details == valid_payload['ResearchPrizes'][0]['PrizeDetails']

    def test_fault_logged(self, valid_payload, today, caplog):
        def explode(record, confirmation):
            raise RuntimeError('storage unavailable')

        with caplog.at_level(logging.ERROR, logger='award_form.workflow'):
            SubmissionWorkflow(on_accept=explode).submit(valid_payload, today, SUBMITTED_AT)
        assert 'storage unavailable' in caplog.text


@pytest.mark.parametrize('payload', [None, 'text', 42])
def test_non_dict_payload_rejected(payload, today):
    outcome = SubmissionWorkflow().submit(payload, today, SUBMITTED_AT)
    assert outcome.state is WorkflowState.REJECTED
    assert outcome.result.errors[0].field == ''
