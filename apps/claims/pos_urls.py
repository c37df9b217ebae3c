from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'pos'

router = DefaultRouter()
router.register(r'transactions', views.PosTransactionViewSet, basename='transaction')
router.register(r'sessions', views.PosSessionViewSet, basename='session')
router.register(r'claims', views.VendorClaimViewSet, basename='vendor-claim')

urlpatterns = [
    # Verification
    path('verify-claim-code/', views.verify_claim_code, name='verify-claim-code'),
    path('verify-qr/', views.verify_qr, name='verify-qr'),
    path('verify-token/', views.verify_token, name='verify-token'),
    path('verify-pin/', views.verify_pin, name='verify-pin'),

    # PIN checkout
    path('pin-transactions/', views.pin_transaction, name='pin-transaction'),

    # GET/POST /api/pos/transactions/            - Sales history / complete sale
    # GET/POST /api/pos/sessions/                - Sessions / open session
    # POST     /api/pos/sessions/{id}/close/     - Close session
    # GET      /api/pos/claims/                  - Claims on my deals
    # GET      /api/pos/claims/stats/            - Claim funnel for my deals
    path('', include(router.urls)),
]
