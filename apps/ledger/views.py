from uuid import UUID

from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.accounts.services import get_or_create_profile

from .serializers import (
    SessionSerializer,
    SessionCreateSerializer,
    LiveSessionCreateSerializer,
    LiveEntrySerializer,
    LedgerEntrySerializer,
    PaymentCreateSerializer,
    MemberBalanceSerializer,
)

from apps.ledger.services import (
    create_session,
    get_session,
    list_group_sessions,
    create_live_session,
    set_live_entry,
    remove_live_entry,
    close_live_session,
    record_payment,
    compute_balance,
    group_balances,
    # Exceptions
    LedgerServiceError,
    SessionNotFoundError,
    NotGroupMemberError,
    UnbalancedSessionError,
)

GROUP_PARAMETER = OpenApiParameter(name='group', type=str, required=True, description='Group UUID')


def ledger_error_response(error):
    """Translate a ledger service error into an HTTP response."""
    if isinstance(error, SessionNotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, NotGroupMemberError):
        code = status.HTTP_403_FORBIDDEN
    else:
        code = status.HTTP_400_BAD_REQUEST

    body = {'error': str(error)}
    if isinstance(error, UnbalancedSessionError) and error.total is not None:
        body['total'] = str(error.total)
    return Response(body, status=code)


def group_param(request):
    """Parsed ``?group=`` value, or None when absent or malformed."""
    raw = request.query_params.get('group')
    if not raw:
        return None
    try:
        return UUID(raw)
    except ValueError:
        return None


class SessionPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class SessionViewSet(viewsets.GenericViewSet):
    """
    Sessions of the groups the current user belongs to.

    list: Sessions of one group (``?group=<uuid>``)
    create: Closed session from a full set of zero-sum entries
    retrieve: One session with its entries
    live: Open a live session
    entry: PUT/DELETE the caller's own entry on a live session
    close: Close a live session
    """

    serializer_class = SessionSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = SessionPagination
    lookup_value_regex = r'\d+'

    def get_profile(self):
        if not hasattr(self, '_profile'):
            self._profile = get_or_create_profile(user=self.request.user)
        return self._profile

    @extend_schema(parameters=[GROUP_PARAMETER], responses={200: SessionSerializer(many=True)})
    def list(self, request):
        group_id = group_param(request)
        if group_id is None:
            return Response(
                {'error': 'Query parameter "group" is required'},
                status=status.HTTP_400_BAD_REQUEST
            )

        try:
            sessions = list_group_sessions(group_id=group_id, profile=self.get_profile())
        except LedgerServiceError as e:
            return ledger_error_response(e)

        page = self.paginate_queryset(sessions)
        if page is not None:
            return self.get_paginated_response(SessionSerializer(page, many=True).data)
        return Response(SessionSerializer(sessions, many=True).data)

    @extend_schema(request=SessionCreateSerializer, responses={201: SessionSerializer})
    def create(self, request):
        serializer = SessionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            session = create_session(
                group_id=data['group'],
                creator=self.get_profile(),
                entries=[(e['user_id'], e['amount']) for e in data['entries']],
                description=data['description']
            )
        except LedgerServiceError as e:
            return ledger_error_response(e)

        return Response(SessionSerializer(session).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        try:
            session = get_session(session_id=pk, profile=self.get_profile())
        except LedgerServiceError as e:
            return ledger_error_response(e)

        return Response(SessionSerializer(session).data)

    @extend_schema(request=LiveSessionCreateSerializer, responses={201: SessionSerializer})
    @action(detail=False, methods=['post'])
    def live(self, request):
        """Open a live session."""
        serializer = LiveSessionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            session = create_live_session(
                group_id=serializer.validated_data['group'],
                creator=self.get_profile(),
                description=serializer.validated_data['description']
            )
        except LedgerServiceError as e:
            return ledger_error_response(e)

        return Response(SessionSerializer(session).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=LiveEntrySerializer, responses={200: LedgerEntrySerializer})
    @action(detail=True, methods=['put', 'delete'])
    def entry(self, request, pk=None):
        """Set or remove the caller's own entry on a live session."""
        profile = self.get_profile()

        if request.method == 'DELETE':
            try:
                remove_live_entry(session_id=pk, profile=profile)
            except LedgerServiceError as e:
                return ledger_error_response(e)
            return Response(status=status.HTTP_204_NO_CONTENT)

        serializer = LiveEntrySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            entry = set_live_entry(
                session_id=pk,
                profile=profile,
                amount=serializer.validated_data['amount'],
                description=serializer.validated_data['description']
            )
        except LedgerServiceError as e:
            return ledger_error_response(e)

        if entry is None:
            return Response(status=status.HTTP_204_NO_CONTENT)
        return Response(LedgerEntrySerializer(entry).data)

    @extend_schema(request=None, responses={200: SessionSerializer})
    @action(detail=True, methods=['post'])
    def close(self, request, pk=None):
        """Close a live session whose entries sum to zero."""
        try:
            session = close_live_session(session_id=pk, profile=self.get_profile())
        except LedgerServiceError as e:
            return ledger_error_response(e)

        return Response(SessionSerializer(session).data)


@extend_schema(
    request=PaymentCreateSerializer,
    responses={201: SessionSerializer},
    description="Record a direct payment from the caller to another member.",
    tags=['ledger'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def create_payment(request):
    serializer = PaymentCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    try:
        session = record_payment(
            group_id=data['group'],
            payer=get_or_create_profile(user=request.user),
            payee_id=data['payee_id'],
            amount=data['amount'],
            description=data['description']
        )
    except LedgerServiceError as e:
        return ledger_error_response(e)

    return Response(SessionSerializer(session).data, status=status.HTTP_201_CREATED)


@extend_schema(parameters=[GROUP_PARAMETER], tags=['ledger'])
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_balance(request):
    """Caller's balance in a group."""
    group_id = group_param(request)
    if group_id is None:
        return Response(
            {'error': 'Query parameter "group" is required'},
            status=status.HTTP_400_BAD_REQUEST
        )

    try:
        balance = compute_balance(
            group_id=group_id,
            profile=get_or_create_profile(user=request.user)
        )
    except LedgerServiceError as e:
        return ledger_error_response(e)

    return Response({'group': str(group_id), 'balance': str(balance)})


@extend_schema(parameters=[GROUP_PARAMETER], responses={200: MemberBalanceSerializer(many=True)}, tags=['ledger'])
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def member_balances(request):
    """Balance of every member of a group."""
    group_id = group_param(request)
    if group_id is None:
        return Response(
            {'error': 'Query parameter "group" is required'},
            status=status.HTTP_400_BAD_REQUEST
        )

    try:
        balances = group_balances(
            group_id=group_id,
            profile=get_or_create_profile(user=request.user)
        )
    except LedgerServiceError as e:
        return ledger_error_response(e)

    return Response(MemberBalanceSerializer(balances, many=True).data)
