import pytest

from formintake.errors import NotFoundError
from formintake.models.notification import Notification, NotificationStatus, NotificationType
from formintake.models.submission import FormSubmission
from formintake.services.notification import NotificationService
from formintake.services.workflow import WorkflowService

from conftest import COMPLETE_ANSWERS


def _notify(db, recipient="client1", title="Hello"):
    return NotificationService.create_notification(db, recipient, title, f"{title} message")


def test_reviewers_come_from_settings(settings, monkeypatch):
    monkeypatch.setattr(settings, "default_reviewers", " alice , ,bob")

    assert NotificationService.reviewers() == ["alice", "bob"]


def test_new_notification_is_unread(db):
    notification = _notify(db)

    assert notification.status == NotificationStatus.UNREAD
    assert notification.type == NotificationType.INFO
    assert NotificationService.get_unread_count(db, "client1") == 1


def test_user_notifications_newest_first_and_scoped(db):
    first = _notify(db, title="First")
    second = _notify(db, title="Second")
    _notify(db, recipient="someone-else")

    notifications = NotificationService.get_user_notifications(db, "client1")

    assert [n.id for n in notifications] == [second.id, first.id]
    assert len(NotificationService.get_user_notifications(db, "client1", limit=1)) == 1


def test_mark_as_read(db):
    notification = _notify(db)

    updated = NotificationService.mark_as_read(db, notification.id, "client1")

    assert updated.status == NotificationStatus.READ
    assert updated.read_at is not None
    assert NotificationService.get_unread_count(db, "client1") == 0
    assert NotificationService.get_user_notifications(db, "client1", unread_only=True) == []


def test_mark_as_read_only_for_recipient(db):
    notification = _notify(db)

    with pytest.raises(NotFoundError):
        NotificationService.mark_as_read(db, notification.id, "someone-else")


def test_mark_all_as_read_counts_changes(db):
    _notify(db)
    _notify(db)
    _notify(db, recipient="someone-else")

    assert NotificationService.mark_all_as_read(db, "client1") == 2
    assert NotificationService.mark_all_as_read(db, "client1") == 0
    assert NotificationService.get_unread_count(db, "someone-else") == 1


def test_submit_notifies_each_reviewer_once(db, template, settings):
    WorkflowService.save_progress(db, template.id, "client1", COMPLETE_ANSWERS, 2)
    submission = WorkflowService.submit_draft(db, template.id, "client1")

    notifications = db.query(Notification).all()
    assert sorted(n.recipient_id for n in notifications) == ["admin", "reviewer1"]
    for n in notifications:
        assert n.type == NotificationType.FORM_SUBMITTED
        assert n.form_submission_id == submission.id
        assert n.title == "New Form Submission: Benefits Enrollment"


@pytest.mark.parametrize("page,expected", [(1, 0), (4, 0), (5, 1), (10, 1)])
def test_progress_milestones(db, template, page, expected):
    template.total_pages = 10
    submission = FormSubmission(
        form_template_id=template.id, submitted_by="client1", data={}, current_page=page
    )
    db.add(submission)
    db.commit()

    NotificationService.send_progress_saved(db, submission)

    assert db.query(Notification).count() == expected


def test_failed_review_notification_keeps_transition(db, template, settings, monkeypatch):
    WorkflowService.save_progress(db, template.id, "client1", COMPLETE_ANSWERS, 2)
    submission = WorkflowService.submit_draft(db, template.id, "client1")

    def broken_send(session, submission, reviewer_id):
        session.add(Notification(recipient_id=reviewer_id, title="x", message="x"))
        raise RuntimeError("queue unavailable")

    monkeypatch.setattr(NotificationService, "send_assigned_for_review", staticmethod(broken_send))

    assigned = WorkflowService.assign_for_review(db, submission.id, "reviewer1", performed_by="admin")

    assert assigned.assigned_reviewer == "reviewer1"
    assert db.query(Notification).filter(Notification.title == "x").count() == 0
