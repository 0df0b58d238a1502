import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, Profile
from apps.groups.models import Group, GroupMembership, GroupRole


def make_profile(email, username):
    """Principal plus linked directory record."""
    user = User.objects.create_user(email=email, password='TestPass123!')
    return Profile.objects.create(email=email, username=username, user=user)


def client_for(profile):
    """API client authenticated as the profile's principal."""
    client = APIClient()
    refresh = RefreshToken.for_user(profile.user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def owner(db):
    return make_profile('owner@example.com', 'owner')


@pytest.fixture
def member(db):
    return make_profile('member@example.com', 'member')


@pytest.fixture
def outsider(db):
    """Profile not in any group."""
    return make_profile('outsider@example.com', 'outsider')


@pytest.fixture
def group(owner, member):
    """Group with an owner and one member."""
    group = Group.objects.create(name='Flatmates', created_by=owner, join_pin='123456')
    GroupMembership.objects.create(group=group, profile=owner, role=GroupRole.OWNER)
    GroupMembership.objects.create(group=group, profile=member, role=GroupRole.MEMBER)
    return group


@pytest.fixture
def owner_client(owner):
    return client_for(owner)


@pytest.fixture
def member_client(member):
    return client_for(member)


@pytest.fixture
def outsider_client(outsider):
    return client_for(outsider)


@pytest.fixture
def profileless_client(db):
    """Principal with no profile whose every candidate username is taken."""
    user = User.objects.create_user(email='stuck@example.com', password='TestPass123!')
    for i, username in enumerate(['stuck', 'stuck_1', 'stuck_2', 'stuck_3', 'stuck_4']):
        Profile.objects.create(email=f'taken{i}@example.com', username=username)
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client
