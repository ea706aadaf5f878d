"""Root URL configuration."""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('', include('server.apps.core.urls')),
    path('', include('server.apps.accounts.urls')),
    path('', include('server.apps.files.urls')),
    path('admin/', admin.site.urls),
]
