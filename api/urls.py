from django.urls import path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView, SpectacularSwaggerView

from .views import (
    DailyUsageAPIView,
    DashboardAPIView,
    MonthlyCohortAPIView,
    SnapshotListAPIView,
    StoreHeatmapAPIView,
)

urlpatterns = [
    # Report endpoints
    path('dashboard/', DashboardAPIView.as_view(), name='dashboard'),
    path('monthly-cohort/', MonthlyCohortAPIView.as_view(), name='monthly-cohort'),
    path('store-heatmap/', StoreHeatmapAPIView.as_view(), name='store-heatmap'),
    path('daily-usage/', DailyUsageAPIView.as_view(), name='daily-usage'),
    path('snapshots/', SnapshotListAPIView.as_view(), name='snapshots'),
    # OpenAPI / Swagger
    path('schema/', SpectacularAPIView.as_view(), name='schema'),
    path('docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
]
