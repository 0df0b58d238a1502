import uuid

import pytest
from django.urls import reverse
from rest_framework import status
from apps.accounts.models import User, Profile


# =============================================================================
# Registration Tests
# =============================================================================

@pytest.mark.django_db
class TestRegistration:
    """Tests for POST /api/auth/register/"""

    def test_register_success(self, api_client):
        """Successfully register a new user."""
        url = reverse('users:register')
        data = {
            'email': 'newuser@example.com',
            'password': 'SecurePass123!',
            'password_confirm': 'SecurePass123!',
            'display_name': 'New User',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_201_CREATED
        assert 'access' in response.data['tokens']
        assert 'refresh' in response.data['tokens']
        assert response.data['profile']['username'] == 'newuser'
        assert Profile.objects.filter(email='newuser@example.com', user__isnull=False).exists()

    def test_register_with_username(self, api_client):
        url = reverse('users:register')
        data = {
            'email': 'minimal@example.com',
            'username': 'minnie',
            'password': 'SecurePass123!',
            'password_confirm': 'SecurePass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['profile']['username'] == 'minnie'

    def test_register_duplicate_email(self, api_client, user):
        """Existing email is a conflict on the email field."""
        url = reverse('users:register')
        data = {
            'email': user.email,
            'password': 'SecurePass123!',
            'password_confirm': 'SecurePass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['field'] == 'email'

    def test_register_duplicate_username(self, api_client, profile):
        """Taken username is a conflict and leaves no principal behind."""
        url = reverse('users:register')
        data = {
            'email': 'another@example.com',
            'username': profile.username,
            'password': 'SecurePass123!',
            'password_confirm': 'SecurePass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['field'] == 'username'
        assert not User.objects.filter(email='another@example.com').exists()

    def test_register_password_mismatch(self, api_client):
        """Registration fails when passwords don't match."""
        url = reverse('users:register')
        data = {
            'email': 'mismatch@example.com',
            'password': 'SecurePass123!',
            'password_confirm': 'DifferentPass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'password_confirm' in response.data

    def test_register_weak_password(self, api_client):
        url = reverse('users:register')
        data = {
            'email': 'weak@example.com',
            'password': '123',
            'password_confirm': '123',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_register_invalid_email(self, api_client):
        url = reverse('users:register')
        data = {
            'email': 'not-an-email',
            'password': 'SecurePass123!',
            'password_confirm': 'SecurePass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# Login Tests
# =============================================================================

@pytest.mark.django_db
class TestLogin:
    """Tests for POST /api/auth/login/"""

    def test_login_success(self, api_client, user):
        """Login returns tokens and creates the profile on first sight."""
        url = reverse('users:login')
        response = api_client.post(url, {'email': user.email, 'password': 'TestPass123!'})

        assert response.status_code == status.HTTP_200_OK
        assert 'access' in response.data['tokens']
        assert response.data['user']['email'] == user.email
        assert response.data['profile']['email'] == user.email
        assert Profile.objects.filter(user=user).exists()

    def test_login_wrong_password(self, api_client, user):
        url = reverse('users:login')
        response = api_client.post(url, {'email': user.email, 'password': 'WrongPass123!'})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_nonexistent_user(self, api_client):
        url = reverse('users:login')
        response = api_client.post(url, {'email': 'ghost@example.com', 'password': 'TestPass123!'})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_inactive_user(self, api_client, user_inactive):
        url = reverse('users:login')
        response = api_client.post(url, {'email': user_inactive.email, 'password': 'TestPass123!'})

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_token_refresh(self, api_client, user):
        login = api_client.post(
            reverse('users:login'),
            {'email': user.email, 'password': 'TestPass123!'}
        )
        response = api_client.post(
            reverse('token_refresh'),
            {'refresh': login.data['tokens']['refresh']}
        )

        assert response.status_code == status.HTTP_200_OK
        assert 'access' in response.data


# =============================================================================
# Current User Tests
# =============================================================================

@pytest.mark.django_db
class TestGetCurrentUser:
    """Tests for GET /api/auth/user/"""

    def test_get_current_user(self, authenticated_client, user):
        url = reverse('users:current-user')
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['user']['email'] == user.email
        assert isinstance(response.data['profile']['id'], int)

    def test_get_current_user_unauthenticated(self, api_client):
        url = reverse('users:current-user')
        response = api_client.get(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# Principal Deletion Tests
# =============================================================================

@pytest.mark.django_db
class TestDeleteUser:
    """Tests for DELETE /api/auth/users/{id}/delete/"""

    def test_admin_deletes_principal(self, admin_client, user):
        url = reverse('users:delete-user', args=[user.id])
        response = admin_client.delete(url)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not User.objects.filter(id=user.id).exists()

    def test_delete_is_idempotent(self, admin_client):
        url = reverse('users:delete-user', args=[uuid.uuid4()])
        response = admin_client.delete(url)

        assert response.status_code == status.HTTP_204_NO_CONTENT

    def test_non_admin_forbidden(self, authenticated_client, user):
        url = reverse('users:delete-user', args=[user.id])
        response = authenticated_client.delete(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert User.objects.filter(id=user.id).exists()
