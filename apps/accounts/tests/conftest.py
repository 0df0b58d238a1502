import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, Profile


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def user(db):
    """Create and return a test user."""
    return User.objects.create_user(
        email='testuser@example.com',
        password='TestPass123!',
        display_name='Test User',
    )


@pytest.fixture
def user_inactive(db):
    """Create and return an inactive user."""
    return User.objects.create_user(
        email='inactive@example.com',
        password='TestPass123!',
        display_name='Inactive User',
        is_active=False,
    )


@pytest.fixture
def admin_user(db):
    """Create and return a staff user."""
    return User.objects.create_superuser(
        email='admin@example.com',
        password='AdminPass123!',
    )


@pytest.fixture
def profile(user):
    """Directory record linked to the test user."""
    return Profile.objects.create(email=user.email, username='testuser', user=user)


@pytest.fixture
def authenticated_client(api_client, user):
    """Return an authenticated API client using JWT."""
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def admin_client(admin_user):
    client = APIClient()
    refresh = RefreshToken.for_user(admin_user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client
