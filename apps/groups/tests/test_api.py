import pytest
from django.urls import reverse
from rest_framework import status

from apps.groups.models import Group, GroupMembership, GroupRole, Invite


# =============================================================================
# Group ViewSet Tests
# =============================================================================

@pytest.mark.django_db
class TestGroupList:
    """Tests for GET/POST /api/groups/"""

    def test_list_only_my_groups(self, owner_client, group, outsider):
        Group.objects.create(name='Not mine', created_by=outsider, join_pin='000111')

        response = owner_client.get(reverse('groups:group-list'))

        assert response.status_code == status.HTTP_200_OK
        names = [g['name'] for g in response.data['results']]
        assert names == ['Flatmates']

    def test_create_group(self, owner_client, owner):
        response = owner_client.post(reverse('groups:group-list'), {'name': 'Ski week'})

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['user_role'] == GroupRole.OWNER
        assert len(response.data['join_pin']) == 6
        assert GroupMembership.objects.filter(profile=owner, role=GroupRole.OWNER).count() == 1

    def test_unauthenticated(self, api_client):
        response = api_client.get(reverse('groups:group-list'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestGroupDetail:
    """Tests for GET /api/groups/{id}/ and its actions"""

    def test_retrieve_as_member(self, member_client, group):
        response = member_client.get(reverse('groups:group-detail', args=[group.id]))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['member_count'] == 2
        assert response.data['user_role'] == GroupRole.MEMBER

    def test_retrieve_as_outsider(self, outsider_client, group):
        response = outsider_client.get(reverse('groups:group-detail', args=[group.id]))

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_members(self, member_client, group):
        response = member_client.get(reverse('groups:group-members', args=[group.id]))

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 2

    def test_leave(self, member_client, member, group):
        response = member_client.post(reverse('groups:group-leave', args=[group.id]))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not group.has_member(member)

    def test_owner_cannot_leave(self, owner_client, group):
        response = owner_client.post(reverse('groups:group-leave', args=[group.id]))

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_regenerate_pin_owner(self, owner_client, group):
        response = owner_client.post(reverse('groups:group-regenerate-pin', args=[group.id]))

        assert response.status_code == status.HTTP_200_OK
        group.refresh_from_db()
        assert response.data['join_pin'] == group.join_pin

    def test_regenerate_pin_member_forbidden(self, member_client, group):
        response = member_client.post(reverse('groups:group-regenerate-pin', args=[group.id]))

        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# Join / Invite Tests
# =============================================================================

@pytest.mark.django_db
class TestJoinByPin:
    """Tests for POST /api/groups/join/"""

    def test_join(self, outsider_client, outsider, group):
        response = outsider_client.post(reverse('groups:join'), {'pin': group.join_pin})

        assert response.status_code == status.HTTP_201_CREATED
        assert group.has_member(outsider)

    def test_unknown_pin(self, outsider_client, group):
        response = outsider_client.post(reverse('groups:join'), {'pin': '000000'})

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_malformed_pin(self, outsider_client):
        response = outsider_client.post(reverse('groups:join'), {'pin': '12ab'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_already_member(self, member_client, group):
        response = member_client.post(reverse('groups:join'), {'pin': group.join_pin})

        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestInvites:
    """Tests for invite creation and acceptance"""

    def test_member_invites(self, member_client, group):
        response = member_client.post(
            reverse('groups:group-invite', args=[group.id]),
            {'email': 'outsider@example.com'}
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert Invite.objects.filter(group=group, email='outsider@example.com').exists()

    def test_accept(self, outsider_client, outsider, owner, group):
        invite = Invite.objects.create(group=group, email=outsider.email, invited_by=owner)

        response = outsider_client.post(reverse('groups:accept-invite', args=[invite.token]))

        assert response.status_code == status.HTTP_201_CREATED
        assert group.has_member(outsider)

    def test_accept_wrong_email(self, outsider_client, owner, group):
        invite = Invite.objects.create(group=group, email='friend@example.com', invited_by=owner)

        response = outsider_client.post(reverse('groups:accept-invite', args=[invite.token]))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_accept_unknown(self, outsider_client):
        response = outsider_client.post(reverse('groups:accept-invite', args=['missing']))

        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestProfileResolutionFailure:
    """Caller whose profile cannot be created gets a 400, not a 500"""

    def test_list_groups(self, profileless_client):
        response = profileless_client.get(reverse('groups:group-list'))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'error' in response.data

    def test_join_by_pin(self, profileless_client, group):
        response = profileless_client.post(reverse('groups:join'), {'pin': group.join_pin})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert not group.memberships.filter(profile__user__email='stuck@example.com').exists()
