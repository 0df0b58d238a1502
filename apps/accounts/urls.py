from django.urls import path
from . import views

app_name = 'users'

urlpatterns = [
    # Authentication
    path('register/', views.register, name='register'),
    path('login/', views.login, name='login'),

    # Current principal + directory profile
    path('user/', views.get_current_user, name='current-user'),

    # Privileged principal deletion (signup compensation, staff only)
    path('users/<uuid:pk>/delete/', views.delete_user, name='delete-user'),
]
