"""Root URL configuration."""

from django.urls import include, path

urlpatterns = [
    path("api/", include("baassist.web.api.urls")),
]
