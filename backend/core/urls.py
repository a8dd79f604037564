from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("django-admin/", admin.site.urls),
    path("api/auth/", include("authentication.urls")),
    path("api/", include("scribe.urls")),
]
