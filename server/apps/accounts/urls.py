"""URL routes for accounts app."""

from django.urls import path

from server.apps.accounts import views

app_name = 'accounts'

urlpatterns = [
    path('users', views.create_user, name='create_user'),
    path('users/me', views.me, name='me'),
    path('connect', views.connect, name='connect'),
    path('disconnect', views.disconnect, name='disconnect'),
]
