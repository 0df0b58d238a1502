from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.services import get_or_create_profile
from apps.ledger.services import (
    LedgerServiceError,
    SessionNotFoundError,
    NotGroupMemberError,
)

from .serializers import (
    ApprovalRequestSerializer,
    ProposeEditSerializer,
    ResolveRequestSerializer,
    BannerSerializer,
)

from apps.approvals.services import (
    propose_edit,
    approve_request,
    reject_request,
    dismiss_rejection,
    list_pending_for_approver,
    list_session_batch,
    list_rejection_notices,
    get_notification_banner,
    # Exceptions
    ApprovalsServiceError,
    ApprovalNotFoundError,
    NotApproverError,
    NotNoticeOwnerError,
    PendingApprovalsExistError,
)

NOT_FOUND_ERRORS = (SessionNotFoundError, ApprovalNotFoundError)
FORBIDDEN_ERRORS = (NotGroupMemberError, NotApproverError, NotNoticeOwnerError)


def approval_error_response(error):
    """Translate a ledger or approvals service error into an HTTP response."""
    if isinstance(error, NOT_FOUND_ERRORS):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, FORBIDDEN_ERRORS):
        code = status.HTTP_403_FORBIDDEN
    elif isinstance(error, PendingApprovalsExistError):
        code = status.HTTP_409_CONFLICT
    else:
        code = status.HTTP_400_BAD_REQUEST
    return Response({'error': str(error)}, status=code)


@extend_schema(
    request=ProposeEditSerializer,
    responses={200: ApprovalRequestSerializer(many=True)},
    description=(
        "Propose new entries for a closed session. Applied at once when only "
        "the editor is affected, otherwise sent to the other members for approval."
    ),
    tags=['approvals'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def propose_session_edit(request, session_id):
    serializer = ProposeEditSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    try:
        result = propose_edit(
            session_id=session_id,
            editor=get_or_create_profile(user=request.user),
            entries=[(e['user_id'], e['amount']) for e in data['entries']],
            description=data.get('description')
        )
    except (LedgerServiceError, ApprovalsServiceError) as e:
        return approval_error_response(e)

    return Response(
        {
            'applied': result.applied,
            'requests': ApprovalRequestSerializer(result.requests, many=True).data,
        },
        status=status.HTTP_200_OK if result.applied else status.HTTP_201_CREATED
    )


@extend_schema(request=ResolveRequestSerializer, tags=['approvals'])
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def approve(request, pk):
    """Approve a request addressed to the caller."""
    serializer = ResolveRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        applied = approve_request(
            request_id=pk,
            session_id=serializer.validated_data['session'],
            approver=get_or_create_profile(user=request.user)
        )
    except (LedgerServiceError, ApprovalsServiceError) as e:
        return approval_error_response(e)

    return Response({'status': 'approved', 'applied': applied})


@extend_schema(request=ResolveRequestSerializer, responses={200: ApprovalRequestSerializer}, tags=['approvals'])
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def reject(request, pk):
    """Veto a request addressed to the caller, cancelling the edit."""
    serializer = ResolveRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        notice = reject_request(
            request_id=pk,
            session_id=serializer.validated_data['session'],
            approver=get_or_create_profile(user=request.user)
        )
    except (LedgerServiceError, ApprovalsServiceError) as e:
        return approval_error_response(e)

    return Response(ApprovalRequestSerializer(notice).data)


@extend_schema(request=None, responses={200: ApprovalRequestSerializer}, tags=['approvals'])
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def dismiss(request, pk):
    """Dismiss a rejection notice of one of the caller's edits."""
    try:
        notice = dismiss_rejection(
            request_id=pk,
            viewer=get_or_create_profile(user=request.user)
        )
    except ApprovalsServiceError as e:
        return approval_error_response(e)

    return Response(ApprovalRequestSerializer(notice).data)


@extend_schema(responses={200: ApprovalRequestSerializer(many=True)}, tags=['approvals'])
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_pending_requests(request):
    """Requests waiting on the caller."""
    requests = list_pending_for_approver(profile=get_or_create_profile(user=request.user))
    return Response(ApprovalRequestSerializer(requests, many=True).data)


@extend_schema(responses={200: ApprovalRequestSerializer(many=True)}, tags=['approvals'])
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_rejection_notices(request):
    notices = list_rejection_notices(profile=get_or_create_profile(user=request.user))
    return Response(ApprovalRequestSerializer(notices, many=True).data)


@extend_schema(responses={200: ApprovalRequestSerializer(many=True)}, tags=['approvals'])
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def session_batch(request, session_id):
    """Full change set of the edit awaiting approval on a session."""
    try:
        requests = list_session_batch(
            session_id=session_id,
            profile=get_or_create_profile(user=request.user)
        )
    except LedgerServiceError as e:
        return approval_error_response(e)

    return Response(ApprovalRequestSerializer(requests, many=True).data)


@extend_schema(responses={200: BannerSerializer}, tags=['approvals'])
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notification_banner(request):
    banner = get_notification_banner(profile=get_or_create_profile(user=request.user))
    return Response(BannerSerializer(banner.as_dict()).data)
