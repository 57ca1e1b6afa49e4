"""Account flows: signup, cookie session login/logout, own profile and password."""

from django.urls import path

from .views import LoginView, LogoutView, MeView, PasswordView, RegisterView

urlpatterns = [
    path("register/", RegisterView.as_view(), name="auth-register"),
    path("login/", LoginView.as_view(), name="auth-login"),
    path("logout/", LogoutView.as_view(), name="auth-logout"),
    path("me/", MeView.as_view(), name="auth-me"),
    path("password/", PasswordView.as_view(), name="auth-password"),
]
