from django.contrib import admin
from django.urls import include, path

from .playground import api_playground

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/v1/", include("fees.api.urls")),
    path("playground/", api_playground, name="playground"),
]
