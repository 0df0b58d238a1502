"""
Service layer tests for the approval workflow.

Tests cover:
- Proposing edits: diffing, editor inference, direct application
- Approving and vetoing batches
- Rejection notices and the notification banner
"""

import pytest
from decimal import Decimal

from apps.approvals.models import ApprovalRequest, ApprovalStatus
from apps.approvals.services import (
    EntryDelta,
    diff_entries,
    infer_editor_delta,
    propose_edit,
    approve_request,
    reject_request,
    dismiss_rejection,
    list_pending_for_approver,
    list_session_batch,
    list_rejection_notices,
    get_notification_banner,
)
from apps.approvals.services.exceptions import (
    SessionNotClosedError,
    PendingApprovalsExistError,
    ApprovalNotFoundError,
    NotApproverError,
    ApprovalAlreadyResolvedError,
    NotNoticeOwnerError,
)
from apps.ledger.services.exceptions import InvalidEntriesError, NotGroupMemberError


def ledger(session):
    return {e.profile_id: e.amount for e in session.entries.all()}


def D(value):
    return Decimal(value)


# =============================================================================
# Diff Helpers
# =============================================================================

class TestDiffEntries:
    """Pure diffing of current vs proposed amounts."""

    def test_changed_added_removed(self, settings):
        settings.LEDGER_AMOUNT_TOLERANCE = D('0.01')
        current = {1: D('10'), 2: D('-10')}
        proposed = {1: D('15'), 3: D('-15')}

        deltas = diff_entries(current, proposed)

        assert deltas == [
            EntryDelta(1, D('10.00'), D('15.00')),
            EntryDelta(2, D('-10.00'), D('0.00')),
            EntryDelta(3, D('0.00'), D('-15.00')),
        ]

    def test_change_within_tolerance_ignored(self, settings):
        settings.LEDGER_AMOUNT_TOLERANCE = D('0.01')
        assert diff_entries({1: D('10.00')}, {1: D('10.01')}) == []

    def test_skip(self, settings):
        settings.LEDGER_AMOUNT_TOLERANCE = D('0.01')
        assert diff_entries({1: D('10'), 2: D('-10')}, {2: D('-10')}, skip=[1]) == []

    def test_infer_from_recorded_entry(self, settings):
        settings.LEDGER_AMOUNT_TOLERANCE = D('0.01')
        others = [EntryDelta(2, D('-10'), D('-15'))]

        delta = infer_editor_delta(1, {1: D('20'), 2: D('-10'), 3: D('-10')}, others)

        assert delta == EntryDelta(1, D('20'), D('25'))

    def test_infer_without_recorded_entry(self, settings):
        settings.LEDGER_AMOUNT_TOLERANCE = D('0.01')
        others = [EntryDelta(2, D('-10'), D('-15'))]

        delta = infer_editor_delta(1, {2: D('-10')}, others)

        assert delta == EntryDelta(1, D('10'), D('15'))

    def test_nothing_to_infer(self, settings):
        settings.LEDGER_AMOUNT_TOLERANCE = D('0.01')
        assert infer_editor_delta(1, {1: D('5')}, []) is None


# =============================================================================
# Propose Edit Tests
# =============================================================================

@pytest.mark.django_db
class TestProposeEdit:
    """Tests for propose_edit()."""

    def test_creates_batch_for_other_member(self, group, alice, bob, session_factory):
        """Editor changes both sides: other member pending, editor pre-approved."""
        session = session_factory(group, {alice: '10', bob: '-10'})

        result = propose_edit(
            session_id=session.id,
            editor=alice,
            entries=[(alice.id, D('15')), (bob.id, D('-15'))]
        )

        assert result.applied is False
        pending = ApprovalRequest.objects.get(session=session, status=ApprovalStatus.PENDING)
        assert (pending.approver, pending.old_amount, pending.new_amount) == (bob, D('-10'), D('-15'))
        own = ApprovalRequest.objects.get(session=session, status=ApprovalStatus.APPROVED)
        assert (own.approver, own.old_amount, own.new_amount) == (alice, D('10'), D('15'))
        assert ledger(session) == {alice.id: D('10'), bob.id: D('-10')}

    def test_only_editor_changed_applies_immediately(self, group, alice, bob, session_factory):
        session = session_factory(group, {alice: '10', bob: '-10'})

        result = propose_edit(
            session_id=session.id,
            editor=alice,
            entries=[(alice.id, D('15')), (bob.id, D('-10'))]
        )

        assert result.applied is True
        assert result.requests == []
        assert not ApprovalRequest.objects.filter(session=session).exists()
        assert ledger(session)[alice.id] == D('15')

    def test_infers_editor_change_when_omitted(self, group, alice, bob, carol, session_factory):
        session = session_factory(group, {alice: '20', bob: '-10', carol: '-10'})

        propose_edit(
            session_id=session.id,
            editor=alice,
            entries=[(bob.id, D('-15')), (carol.id, D('-10'))]
        )

        own = ApprovalRequest.objects.get(session=session, approver=alice)
        assert own.status == ApprovalStatus.APPROVED
        assert (own.old_amount, own.new_amount) == (D('20'), D('25'))
        assert ApprovalRequest.objects.filter(session=session).pending().count() == 1

    def test_infers_editor_change_when_listed_unchanged(self, group, alice, bob, session_factory):
        session = session_factory(group, {alice: '10', bob: '-10'})

        result = propose_edit(
            session_id=session.id,
            editor=alice,
            entries=[(alice.id, D('10')), (bob.id, D('-15'))]
        )

        assert result.applied is False
        own = ApprovalRequest.objects.get(session=session, approver=alice)
        assert own.status == ApprovalStatus.APPROVED
        assert (own.old_amount, own.new_amount) == (D('10'), D('15'))

        approve_request(request_id=request_for(session, bob).id, session_id=session.id, approver=bob)

        assert ledger(session) == {alice.id: D('15'), bob.id: D('-15')}
        assert sum(ledger(session).values()) == 0

    def test_editor_without_entry(self, group, alice, bob, carol, session_factory):
        """Balanced reshuffle by a non-participant needs no editor row."""
        session = session_factory(group, {alice: '10', bob: '-10'})

        result = propose_edit(
            session_id=session.id,
            editor=carol,
            entries=[(alice.id, D('12')), (bob.id, D('-12'))]
        )

        assert {r.approver_id for r in result.requests} == {alice.id, bob.id}
        assert all(r.status == ApprovalStatus.PENDING for r in result.requests)

    def test_removed_member_gets_zero(self, group, alice, bob, carol, session_factory):
        session = session_factory(group, {alice: '10', bob: '-5', carol: '-5'})

        propose_edit(
            session_id=session.id,
            editor=alice,
            entries=[(alice.id, D('10')), (bob.id, D('-10'))]
        )

        removed = ApprovalRequest.objects.get(session=session, approver=carol)
        assert (removed.old_amount, removed.new_amount) == (D('-5'), D('0'))
        assert not ApprovalRequest.objects.filter(session=session, approver=alice).exists()

    def test_description_saved_immediately(self, group, alice, bob, session_factory):
        session = session_factory(group, {alice: '10', bob: '-10'})

        propose_edit(
            session_id=session.id,
            editor=alice,
            entries=[(alice.id, D('15')), (bob.id, D('-15'))],
            description='Dinner and drinks'
        )

        session.refresh_from_db()
        assert session.description == 'Dinner and drinks'

    def test_pending_batch_blocks_new_proposal(self, group, alice, bob, session_factory):
        session = session_factory(group, {alice: '10', bob: '-10'})
        entries = [(alice.id, D('15')), (bob.id, D('-15'))]
        propose_edit(session_id=session.id, editor=alice, entries=entries)

        with pytest.raises(PendingApprovalsExistError):
            propose_edit(session_id=session.id, editor=bob, entries=entries)

    def test_live_session_rejected(self, group, alice, bob, session_factory):
        session = session_factory(group, {alice: '10', bob: '-10'}, is_live=True)

        with pytest.raises(SessionNotClosedError):
            propose_edit(session_id=session.id, editor=alice, entries=[(alice.id, D('5'))])

    def test_outsider_cannot_propose(self, group, alice, bob, outsider, session_factory):
        session = session_factory(group, {alice: '10', bob: '-10'})

        with pytest.raises(NotGroupMemberError):
            propose_edit(session_id=session.id, editor=outsider, entries=[(alice.id, D('5'))])

    def test_non_member_in_proposal(self, group, alice, bob, outsider, session_factory):
        session = session_factory(group, {alice: '10', bob: '-10'})

        with pytest.raises(InvalidEntriesError):
            propose_edit(
                session_id=session.id,
                editor=alice,
                entries=[(alice.id, D('10')), (outsider.id, D('-10'))]
            )


# =============================================================================
# Resolution Tests
# =============================================================================

@pytest.fixture
def proposed(group, alice, bob, carol, session_factory):
    """Alice re-splits a three-way session; Bob and Carol must approve."""
    session = session_factory(group, {alice: '30', bob: '-15', carol: '-15'})
    propose_edit(
        session_id=session.id,
        editor=alice,
        entries=[(alice.id, D('30')), (bob.id, D('-20')), (carol.id, D('-10'))]
    )
    return session


def request_for(session, profile):
    return ApprovalRequest.objects.get(session=session, approver=profile, status=ApprovalStatus.PENDING)


@pytest.mark.django_db
class TestApprove:
    """Tests for approve_request()."""

    def test_single_approval_applies_batch(self, group, alice, bob, session_factory):
        session = session_factory(group, {alice: '10', bob: '-10'})
        propose_edit(session_id=session.id, editor=alice, entries=[(alice.id, D('15')), (bob.id, D('-15'))])

        applied = approve_request(request_id=request_for(session, bob).id, session_id=session.id, approver=bob)

        assert applied is True
        assert ledger(session) == {alice.id: D('15'), bob.id: D('-15')}
        assert not ApprovalRequest.objects.filter(session=session).exists()

    def test_waits_for_every_approver(self, proposed, bob, carol, alice):
        applied = approve_request(request_id=request_for(proposed, bob).id, session_id=proposed.id, approver=bob)

        assert applied is False
        assert ledger(proposed)[bob.id] == D('-15')

        applied = approve_request(request_id=request_for(proposed, carol).id, session_id=proposed.id, approver=carol)

        assert applied is True
        assert ledger(proposed) == {alice.id: D('30'), bob.id: D('-20'), carol.id: D('-10')}
        assert not ApprovalRequest.objects.filter(session=proposed).exists()

    def test_zero_new_amount_deletes_entry(self, group, alice, bob, carol, session_factory):
        session = session_factory(group, {alice: '10', bob: '-5', carol: '-5'})
        propose_edit(session_id=session.id, editor=alice, entries=[(alice.id, D('10')), (bob.id, D('-10'))])

        approve_request(request_id=request_for(session, bob).id, session_id=session.id, approver=bob)
        approve_request(request_id=request_for(session, carol).id, session_id=session.id, approver=carol)

        assert ledger(session) == {alice.id: D('10'), bob.id: D('-10')}

    def test_only_addressed_member_may_approve(self, proposed, bob, carol):
        with pytest.raises(NotApproverError):
            approve_request(request_id=request_for(proposed, bob).id, session_id=proposed.id, approver=carol)

    def test_request_must_belong_to_session(self, proposed, group, alice, bob, session_factory):
        other = session_factory(group, {alice: '1', bob: '-1'})

        with pytest.raises(ApprovalNotFoundError):
            approve_request(request_id=request_for(proposed, bob).id, session_id=other.id, approver=bob)

    def test_already_approved(self, proposed, bob):
        request_id = request_for(proposed, bob).id
        approve_request(request_id=request_id, session_id=proposed.id, approver=bob)

        with pytest.raises(ApprovalAlreadyResolvedError):
            approve_request(request_id=request_id, session_id=proposed.id, approver=bob)


@pytest.mark.django_db
class TestReject:
    """Tests for reject_request()."""

    def test_veto_cancels_batch(self, group, alice, bob, session_factory):
        session = session_factory(group, {alice: '10', bob: '-10'})
        propose_edit(session_id=session.id, editor=alice, entries=[(alice.id, D('15')), (bob.id, D('-15'))])

        notice = reject_request(request_id=request_for(session, bob).id, session_id=session.id, approver=bob)

        assert ledger(session) == {alice.id: D('10'), bob.id: D('-10')}
        assert not ApprovalRequest.objects.filter(session=session).batch().exists()
        assert notice.status == ApprovalStatus.REJECTED
        assert notice.editor == alice
        assert notice.rejected_by == bob
        assert (notice.old_amount, notice.new_amount) == (D('0'), D('0'))

    def test_veto_after_partial_approval(self, proposed, bob, carol):
        approve_request(request_id=request_for(proposed, bob).id, session_id=proposed.id, approver=bob)

        reject_request(request_id=request_for(proposed, carol).id, session_id=proposed.id, approver=carol)

        assert not ApprovalRequest.objects.filter(session=proposed).batch().exists()
        assert ledger(proposed)[bob.id] == D('-15')

    def test_one_notice_per_session_and_editor(self, group, alice, bob, session_factory):
        session = session_factory(group, {alice: '10', bob: '-10'})
        entries = [(alice.id, D('15')), (bob.id, D('-15'))]

        propose_edit(session_id=session.id, editor=alice, entries=entries)
        first = reject_request(request_id=request_for(session, bob).id, session_id=session.id, approver=bob)
        propose_edit(session_id=session.id, editor=alice, entries=entries)
        second = reject_request(request_id=request_for(session, bob).id, session_id=session.id, approver=bob)

        assert first.id == second.id
        assert ApprovalRequest.objects.filter(session=session).rejection_notices().count() == 1

    def test_new_proposal_allowed_after_veto(self, proposed, alice, bob, carol):
        reject_request(request_id=request_for(proposed, bob).id, session_id=proposed.id, approver=bob)

        result = propose_edit(
            session_id=proposed.id,
            editor=alice,
            entries=[(alice.id, D('35')), (bob.id, D('-15')), (carol.id, D('-20'))]
        )

        assert result.applied is False
        assert [r.approver for r in list_pending_for_approver(profile=carol)] == [carol]


@pytest.mark.django_db
class TestDismissRejection:
    """Tests for dismiss_rejection()."""

    @pytest.fixture
    def notice(self, proposed, bob):
        return reject_request(request_id=request_for(proposed, bob).id, session_id=proposed.id, approver=bob)

    def test_dismiss(self, notice, alice):
        result = dismiss_rejection(request_id=notice.id, viewer=alice)

        assert result.dismissed_at is not None
        assert list(list_rejection_notices(profile=alice)) == []

    def test_dismiss_twice_keeps_timestamp(self, notice, alice):
        first = dismiss_rejection(request_id=notice.id, viewer=alice).dismissed_at
        second = dismiss_rejection(request_id=notice.id, viewer=alice).dismissed_at

        assert first == second

    def test_only_editor_dismisses(self, notice, bob):
        with pytest.raises(NotNoticeOwnerError):
            dismiss_rejection(request_id=notice.id, viewer=bob)

    def test_pending_request_is_not_a_notice(self, proposed, alice, carol):
        with pytest.raises(ApprovalNotFoundError):
            dismiss_rejection(request_id=request_for(proposed, carol).id, viewer=alice)


# =============================================================================
# Queries and Banner
# =============================================================================

@pytest.mark.django_db
class TestQueries:

    def test_pending_for_approver(self, proposed, alice, bob):
        assert [r.approver for r in list_pending_for_approver(profile=bob)] == [bob]
        assert list(list_pending_for_approver(profile=alice)) == []

    def test_session_batch_includes_editor_row(self, group, alice, bob, session_factory):
        session = session_factory(group, {alice: '10', bob: '-10'})
        propose_edit(session_id=session.id, editor=alice, entries=[(alice.id, D('15')), (bob.id, D('-15'))])

        batch = list(list_session_batch(session_id=session.id, profile=bob))

        assert {(r.approver_id, r.status) for r in batch} == {
            (bob.id, ApprovalStatus.PENDING),
            (alice.id, ApprovalStatus.APPROVED),
        }


@pytest.mark.django_db
class TestNotificationBanner:
    """Tests for get_notification_banner()."""

    def test_hidden_when_nothing_to_show(self, alice):
        banner = get_notification_banner(profile=alice)

        assert banner.visible is False
        assert banner.kind is None

    def test_approval_required(self, proposed, bob):
        banner = get_notification_banner(profile=bob)

        assert banner.kind == 'approval_required'
        assert banner.message == 'You must review 1 edit(s)'
        assert banner.pending_count == 1

    def test_edit_rejected_then_dismissed(self, proposed, alice, bob):
        notice = reject_request(request_id=request_for(proposed, bob).id, session_id=proposed.id, approver=bob)

        banner = get_notification_banner(profile=alice)
        assert banner.kind == 'edit_rejected'
        assert banner.rejected_count == 1

        dismiss_rejection(request_id=notice.id, viewer=alice)
        assert get_notification_banner(profile=alice).visible is False

    def test_mixed(self, group, proposed, alice, bob, carol, session_factory):
        reject_request(request_id=request_for(proposed, bob).id, session_id=proposed.id, approver=bob)
        other = session_factory(group, {bob: '8', alice: '-8'})
        propose_edit(session_id=other.id, editor=bob, entries=[(bob.id, D('9')), (alice.id, D('-9'))])

        banner = get_notification_banner(profile=alice)

        assert banner.kind == 'mixed'
        assert (banner.pending_count, banner.rejected_count) == (1, 1)
