from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'commissions'

router = DefaultRouter()
router.register(r'events', views.CommissionEventViewSet, basename='event')
router.register(r'payouts', views.PayoutBatchViewSet, basename='payout')

urlpatterns = [
    path('clicks/', views.record_click, name='record-click'),
    path('overview/', views.overview, name='overview'),
    path('performance/', views.performance, name='performance'),

    # GET      /api/commissions/events/                   - Ledger
    # POST     /api/commissions/events/{id}/confirm/      - Confirm conversion
    # GET/POST /api/commissions/payouts/                  - Batches / create batch
    # GET      /api/commissions/payouts/{id}/             - Batch with events
    # POST     /api/commissions/payouts/{id}/mark-paid/   - Mark batch paid
    path('', include(router.urls)),
]
