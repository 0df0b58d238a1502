from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'groups'

# Router for ViewSets
router = DefaultRouter()
router.register(r'', views.GroupViewSet, basename='group')

urlpatterns = [
    # Group ViewSet routes
    # GET    /api/groups/                        - List user's groups
    # POST   /api/groups/                        - Create group
    # GET    /api/groups/{id}/                   - Get group details
    # GET    /api/groups/{id}/members/           - List members
    # POST   /api/groups/{id}/leave/             - Leave group
    # POST   /api/groups/{id}/regenerate_pin/    - New join pin (owner)
    # POST   /api/groups/{id}/invite/            - Invite by email

    # Additional endpoints
    path('join/', views.join_by_pin, name='join'),
    path('invites/<str:token>/accept/', views.accept_invite_view, name='accept-invite'),

    # Include router URLs
    path('', include(router.urls)),
]
