from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'claims'

router = DefaultRouter()
router.register(r'', views.ClaimViewSet, basename='claim')

urlpatterns = [
    # Admin reports
    path('analytics/', views.claim_analytics, name='claim-analytics'),

    # GET    /api/claims/                    - My claims
    # GET    /api/claims/{id}/               - Claim detail
    # GET    /api/claims/membership-token/   - Membership token (?qr=true)
    path('', include(router.urls)),
]
