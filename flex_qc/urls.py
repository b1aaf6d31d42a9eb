from django.contrib import admin
from django.urls import path, include
from qc import views as qc_views

urlpatterns = [
    path("admin/", admin.site.urls),

    # Health endpoint
    path("health/", qc_views.health, name="health"),

    # QC app
    path("", include("qc.urls")),
]
