from rest_framework import status, serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated, IsAdminUser
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken
from drf_spectacular.utils import extend_schema
from .serializers import (
    UserRegistrationSerializer,
    UserLoginSerializer,
    UserSerializer,
    ProfileSerializer,
)
from .services import (
    register_user,
    authenticate_user,
    delete_auth_user,
    get_or_create_profile,
    UserRegistrationError,
    InvalidCredentialsError,
    InactiveAccountError,
    ProfileCreationError,
)


# Response serializers for API documentation
class TokensResponseSerializer(serializers.Serializer):
    refresh = serializers.CharField()
    access = serializers.CharField()


class AuthResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    user = UserSerializer()
    profile = ProfileSerializer()
    tokens = TokensResponseSerializer()


class CurrentUserResponseSerializer(serializers.Serializer):
    user = UserSerializer()
    profile = ProfileSerializer()


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


class ConflictResponseSerializer(serializers.Serializer):
    error = serializers.CharField()
    field = serializers.CharField(allow_null=True)


def _tokens_for(user):
    refresh = RefreshToken.for_user(user)
    return {
        'refresh': str(refresh),
        'access': str(refresh.access_token),
    }


@extend_schema(
    request=UserRegistrationSerializer,
    responses={
        201: AuthResponseSerializer,
        400: ErrorResponseSerializer,
        409: ConflictResponseSerializer,
    },
    description="Register a new account and receive JWT tokens.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """Register a new user account."""
    serializer = UserRegistrationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    data = serializer.validated_data.copy()
    data.pop('password_confirm', None)

    try:
        profile = register_user(**data)
    except UserRegistrationError as e:
        if e.conflict is not None:
            return Response(
                {'error': str(e), 'field': e.conflict.value},
                status=status.HTTP_409_CONFLICT
            )
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response({
        'message': 'Registration successful',
        'user': UserSerializer(profile.user).data,
        'profile': ProfileSerializer(profile).data,
        'tokens': _tokens_for(profile.user),
    }, status=status.HTTP_201_CREATED)


@extend_schema(
    request=UserLoginSerializer,
    responses={
        200: AuthResponseSerializer,
        400: ErrorResponseSerializer,
        401: ErrorResponseSerializer,
        403: ErrorResponseSerializer,
    },
    description="Authenticate with email and password to receive JWT tokens.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    """Login with email and password."""
    serializer = UserLoginSerializer(data=request.data)

    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        result = authenticate_user(
            email=serializer.validated_data['email'],
            password=serializer.validated_data['password']
        )
    except InvalidCredentialsError as e:
        return Response({'error': str(e)}, status=status.HTTP_401_UNAUTHORIZED)
    except InactiveAccountError as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
    except ProfileCreationError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response({
        'message': 'Login successful',
        'user': UserSerializer(result.user).data,
        'profile': ProfileSerializer(result.profile).data,
        'tokens': _tokens_for(result.user),
    })


@extend_schema(
    responses={200: CurrentUserResponseSerializer},
    description="Get the authenticated principal and its directory profile.",
    tags=['auth'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_current_user(request):
    """Get current authenticated user and profile."""
    try:
        profile = get_or_create_profile(user=request.user)
    except ProfileCreationError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response({
        'user': UserSerializer(request.user).data,
        'profile': ProfileSerializer(profile).data,
    })


@extend_schema(
    request=None,
    responses={204: None},
    description="Delete an auth principal outright (staff only). Idempotent.",
    tags=['auth'],
)
@api_view(['DELETE'])
@permission_classes([IsAdminUser])
def delete_user(request, pk):
    """Delete an auth principal by id."""
    delete_auth_user(user_id=pk)
    return Response(status=status.HTTP_204_NO_CONTENT)
