import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import AuthenticationFailed, InvalidToken, TokenError
from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from .models import AuditLog
from .permissions import IsAdminRole
from .responses import success_response, paginated_response
from .serializers import UserSerializer, UserCreateSerializer, RegisterSerializer, AuditLogSerializer
from .utils import create_audit_log, get_object_or_not_found

logger = logging.getLogger(__name__)

User = get_user_model()


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')
        data['user'] = UserSerializer(self.user).data
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['role'] = user.role
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer

    def post(self, request, *args, **kwargs):
        response = super().post(request, *args, **kwargs)
        logger.info(f"User {request.data.get('username')} logged in")
        return success_response(response.data)


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh that reports deleted users as an invalid token"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except ObjectDoesNotExist:
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    serializer_class = CustomTokenRefreshSerializer

    def post(self, request, *args, **kwargs):
        response = super().post(request, *args, **kwargs)
        return success_response(response.data)


def _issue_tokens(user):
    token = CustomTokenObtainPairSerializer.get_token(user)
    return {
        'user': UserSerializer(user).data,
        'access': str(token.access_token),
        'refresh': str(token),
    }


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """User registration endpoint"""
    serializer = RegisterSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user = serializer.save()
    logger.info(f"Registered user {user.username}")
    create_audit_log(request=request, action='create', model_name='User', object_id=user.id,
                     object_name=user.username, user=user)
    return success_response(_issue_tokens(user), status_code=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def profile(request):
    """Current user"""
    return success_response(UserSerializer(request.user).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def verify(request):
    """Confirms the bearer token is valid"""
    return success_response({'valid': True, 'user': UserSerializer(request.user).data})


# User views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_list_create(request):
    """List all users or create a new user"""
    if request.method == 'GET':
        users = User.objects.all().order_by('username')
        role = request.query_params.get('role')
        if role:
            users = users.filter(role=role)
        return success_response(UserSerializer(users, many=True).data)

    serializer = UserCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user = serializer.save()
    create_audit_log(request=request, action='create', model_name='User', object_id=user.id,
                     object_name=user.username)
    return success_response(UserSerializer(user).data, status_code=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_detail(request, pk):
    """Retrieve, update or delete a user"""
    user = get_object_or_not_found(User, 'User not found', pk=pk)

    if request.method == 'GET':
        return success_response(UserSerializer(user).data)

    if request.method in ('PUT', 'PATCH'):
        serializer = UserSerializer(user, data=request.data, partial=request.method == 'PATCH')
        serializer.is_valid(raise_exception=True)
        serializer.save()
        create_audit_log(request=request, action='update', model_name='User', object_id=user.id,
                         object_name=user.username,
                         changes={k: str(v) for k, v in serializer.validated_data.items()})
        return success_response(serializer.data)

    data = UserSerializer(user).data
    user.delete()
    create_audit_log(request=request, action='delete', model_name='User', object_id=pk,
                     object_name=data['username'])
    return success_response(data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def audit_log_list(request):
    """Paginated audit trail, newest first"""
    queryset = AuditLog.objects.select_related('user').all()

    action = request.query_params.get('action')
    model_name = request.query_params.get('model_name')
    reference = request.query_params.get('reference')
    if action:
        queryset = queryset.filter(action=action)
    if model_name:
        queryset = queryset.filter(model_name=model_name)
    if reference:
        queryset = queryset.filter(object_reference=reference)

    return paginated_response(request, queryset, AuditLogSerializer, default_limit=50)
