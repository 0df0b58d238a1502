from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'ledger'

router = DefaultRouter()
router.register(r'sessions', views.SessionViewSet, basename='session')

urlpatterns = [
    # GET    /api/ledger/sessions/?group=<uuid>     - List group sessions
    # POST   /api/ledger/sessions/                  - Create closed session
    # POST   /api/ledger/sessions/live/             - Open live session
    # GET    /api/ledger/sessions/{id}/             - Session details
    # PUT    /api/ledger/sessions/{id}/entry/       - Set own live entry
    # DELETE /api/ledger/sessions/{id}/entry/       - Remove own live entry
    # POST   /api/ledger/sessions/{id}/close/       - Close live session

    path('payments/', views.create_payment, name='create-payment'),
    path('balance/', views.my_balance, name='my-balance'),
    path('balances/', views.member_balances, name='member-balances'),

    path('', include(router.urls)),
]
