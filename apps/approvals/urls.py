from django.urls import path
from . import views

app_name = 'approvals'

urlpatterns = [
    path('', views.my_pending_requests, name='pending'),
    path('banner/', views.notification_banner, name='banner'),
    path('rejections/', views.my_rejection_notices, name='rejections'),
    path('sessions/<int:session_id>/propose/', views.propose_session_edit, name='propose'),
    path('sessions/<int:session_id>/batch/', views.session_batch, name='session-batch'),
    path('<int:pk>/approve/', views.approve, name='approve'),
    path('<int:pk>/reject/', views.reject, name='reject'),
    path('<int:pk>/dismiss/', views.dismiss, name='dismiss'),
]
