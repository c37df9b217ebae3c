from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'deals'

router = DefaultRouter()
router.register(r'', views.DealViewSet, basename='deal')

urlpatterns = [
    # GET    /api/deals/              - List deals
    # POST   /api/deals/              - Create deal (vendor)
    # GET    /api/deals/{id}/         - Deal detail
    # POST   /api/deals/{id}/claim/   - Issue a claim (customer)
    path('', include(router.urls)),
]
