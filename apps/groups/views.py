from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from apps.accounts.services import get_or_create_profile

from .models import Group
from .serializers import (
    GroupSerializer,
    GroupCreateSerializer,
    GroupListSerializer,
    GroupMemberSerializer,
    JoinGroupSerializer,
    InviteCreateSerializer,
    InviteSerializer,
)
from .permissions import IsGroupOwner

from apps.groups.services import (
    create_group,
    join_group_by_pin,
    leave_group,
    get_group_members,
    regenerate_pin,
    create_invite,
    accept_invite,
    # Exceptions
    InvalidPinError,
    AlreadyMemberError,
    NotMemberError,
    OwnerCannotLeaveError,
    InsufficientPermissionsError,
    InviteNotFoundError,
    InviteExpiredError,
    InviteAlreadyAcceptedError,
    InviteEmailMismatchError,
)


class GroupPagination(PageNumberPagination):
    """Custom pagination for groups."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class GroupViewSet(viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for groups the current user belongs to.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Get all groups (user is member of)
    create: Create a new group
    retrieve: Get a specific group
    """

    serializer_class = GroupSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = GroupPagination

    def get_profile(self):
        if not hasattr(self, '_profile'):
            self._profile = get_or_create_profile(user=self.request.user)
        return self._profile

    def get_queryset(self):
        """Return only groups where user is a member."""
        return Group.objects.filter(
            memberships__profile=self.get_profile()
        ).select_related('created_by').prefetch_related('memberships').distinct()

    def get_serializer_class(self):
        """Use different serializers for different actions."""
        if self.action == 'list':
            return GroupListSerializer
        elif self.action == 'create':
            return GroupCreateSerializer
        return GroupSerializer

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['profile'] = self.get_profile()
        return context

    def get_permissions(self):
        """Set permissions based on action."""
        if self.action == 'regenerate_pin':
            return [IsAuthenticated(), IsGroupOwner()]
        return [IsAuthenticated()]

    @extend_schema(request=GroupCreateSerializer, responses={201: GroupSerializer})
    def create(self, request, *args, **kwargs):
        """Create a new group."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        group = create_group(
            name=serializer.validated_data['name'],
            creator=self.get_profile()
        )

        output_serializer = GroupSerializer(group, context=self.get_serializer_context())
        return Response(output_serializer.data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['get'])
    def members(self, request, pk=None):
        """Get all members of the group."""
        group = self.get_object()
        memberships = get_group_members(group_id=group.id)
        serializer = GroupMemberSerializer(memberships, many=True)
        return Response(serializer.data)

    @action(detail=True, methods=['post'])
    def leave(self, request, pk=None):
        """Leave a group."""
        group = self.get_object()
        try:
            leave_group(group_id=group.id, profile=self.get_profile())
        except (OwnerCannotLeaveError, NotMemberError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'])
    def regenerate_pin(self, request, pk=None):
        """Regenerate join pin (owner only)."""
        group = self.get_object()
        try:
            new_pin = regenerate_pin(group_id=group.id, profile=self.get_profile())
        except InsufficientPermissionsError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

        return Response({
            'join_pin': new_pin,
            'message': 'Join pin regenerated successfully'
        })

    @extend_schema(request=InviteCreateSerializer, responses={201: InviteSerializer})
    @action(detail=True, methods=['post'])
    def invite(self, request, pk=None):
        """Invite an email address to the group."""
        group = self.get_object()
        serializer = InviteCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            invite = create_invite(
                group_id=group.id,
                email=serializer.validated_data['email'],
                invited_by=self.get_profile()
            )
        except NotMemberError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

        return Response(InviteSerializer(invite).data, status=status.HTTP_201_CREATED)


@extend_schema(
    request=JoinGroupSerializer,
    responses={201: GroupMemberSerializer},
    description="Join a group using its 6-digit pin.",
    tags=['groups'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def join_by_pin(request):
    """Join a group using its pin."""
    serializer = JoinGroupSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    profile = get_or_create_profile(user=request.user)

    try:
        membership = join_group_by_pin(
            pin=serializer.validated_data['pin'],
            profile=profile
        )
    except InvalidPinError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except AlreadyMemberError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(GroupMemberSerializer(membership).data, status=status.HTTP_201_CREATED)


@extend_schema(
    request=None,
    responses={201: GroupMemberSerializer},
    description="Accept an email invite with its token.",
    tags=['groups'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def accept_invite_view(request, token):
    """Accept an invite."""
    profile = get_or_create_profile(user=request.user)

    try:
        membership = accept_invite(token=token, profile=profile)
    except InviteNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except InviteEmailMismatchError as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
    except (InviteExpiredError, InviteAlreadyAcceptedError, AlreadyMemberError) as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(GroupMemberSerializer(membership).data, status=status.HTTP_201_CREATED)
