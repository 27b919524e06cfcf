import pytest

from formintake.errors import InvalidTransitionError
from formintake.models.submission import FormStatus
from formintake.services.workflow import TRANSITIONS, WorkflowEvent, next_status


ALLOWED = [
    (None, WorkflowEvent.SAVE_PROGRESS, FormStatus.DRAFT),
    (FormStatus.DRAFT, WorkflowEvent.SAVE_PROGRESS, FormStatus.DRAFT),
    (FormStatus.DRAFT, WorkflowEvent.SUBMIT, FormStatus.SUBMITTED),
    (FormStatus.SUBMITTED, WorkflowEvent.ASSIGN_FOR_REVIEW, FormStatus.UNDER_REVIEW),
    (FormStatus.UNDER_REVIEW, WorkflowEvent.APPROVE, FormStatus.APPROVED),
    (FormStatus.UNDER_REVIEW, WorkflowEvent.RETURN, FormStatus.RETURNED),
    (FormStatus.UNDER_REVIEW, WorkflowEvent.REJECT, FormStatus.REJECTED),
    (FormStatus.DRAFT, WorkflowEvent.DISCARD, None),
    (FormStatus.RETURNED, WorkflowEvent.START_REVISION, FormStatus.DRAFT),
]


@pytest.mark.parametrize("current,event,expected", ALLOWED)
def test_allowed_transitions(current, event, expected):
    assert next_status(current, event) == expected


def test_every_other_pair_is_rejected():
    allowed = {(current, event) for current, event, _ in ALLOWED}
    allowed.add((FormStatus.SUBMITTED, WorkflowEvent.RETURN))

    for event in WorkflowEvent:
        for current in [None] + list(FormStatus):
            if (current, event) in allowed:
                continue
            with pytest.raises(InvalidTransitionError):
                next_status(current, event)


def test_return_from_submitted_follows_legacy_flag():
    assert next_status(FormStatus.SUBMITTED, WorkflowEvent.RETURN, True) == FormStatus.RETURNED

    with pytest.raises(InvalidTransitionError, match="from status: submitted"):
        next_status(FormStatus.SUBMITTED, WorkflowEvent.RETURN, False)


def test_terminal_statuses_accept_no_review_events():
    review_events = [WorkflowEvent.APPROVE, WorkflowEvent.RETURN, WorkflowEvent.REJECT, WorkflowEvent.SUBMIT]
    for status in (FormStatus.APPROVED, FormStatus.REJECTED, FormStatus.RETURNED):
        assert status.is_terminal
        for event in review_events:
            with pytest.raises(InvalidTransitionError):
                next_status(status, event)


def test_every_event_has_a_row():
    assert set(TRANSITIONS) == set(WorkflowEvent)


def test_status_ordinals_follow_workflow_order():
    assert [s.ordinal for s in FormStatus] == [0, 1, 2, 3, 4, 5]
    assert FormStatus.UNDER_REVIEW.ordinal == 2
