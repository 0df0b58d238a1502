import pytest
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, Profile
from apps.groups.models import Group, GroupMembership, GroupRole
from apps.ledger.models import Session, LedgerEntry


def make_profile(email, username):
    user = User.objects.create_user(email=email, password='TestPass123!')
    return Profile.objects.create(email=email, username=username, user=user)


def client_for(profile):
    client = APIClient()
    refresh = RefreshToken.for_user(profile.user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


def make_session(group, amounts, description='Dinner', is_live=False):
    """Session with one entry per ``{profile: amount}`` item."""
    session = Session.objects.create(
        group=group,
        description=description,
        is_live=is_live,
        created_by=next(iter(amounts), None)
    )
    for profile, amount in amounts.items():
        LedgerEntry.objects.create(session=session, profile=profile, amount=Decimal(amount))
    return session


@pytest.fixture
def alice(db):
    return make_profile('alice@example.com', 'alice')


@pytest.fixture
def bob(db):
    return make_profile('bob@example.com', 'bob')


@pytest.fixture
def carol(db):
    return make_profile('carol@example.com', 'carol')


@pytest.fixture
def outsider(db):
    return make_profile('outsider@example.com', 'outsider')


@pytest.fixture
def group(alice, bob, carol):
    """Alice owns the group; Bob and Carol are members."""
    group = Group.objects.create(name='Flatmates', created_by=alice, join_pin='424242')
    GroupMembership.objects.create(group=group, profile=alice, role=GroupRole.OWNER)
    GroupMembership.objects.create(group=group, profile=bob)
    GroupMembership.objects.create(group=group, profile=carol)
    return group


@pytest.fixture
def alice_client(alice):
    return client_for(alice)


@pytest.fixture
def bob_client(bob):
    return client_for(bob)


@pytest.fixture
def outsider_client(outsider):
    return client_for(outsider)


@pytest.fixture
def session_factory(db):
    """Build closed or live sessions from a ``{profile: amount}`` map."""
    return make_session


@pytest.fixture
def carol_client(carol):
    return client_for(carol)


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
