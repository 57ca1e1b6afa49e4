"""Root URL configuration for the blog API.

One router serves every resource under ``/api/`` so the browsable API root
lists them together; account flows live under ``/auth/``.
"""
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView
from rest_framework.routers import DefaultRouter

from access_control.views import GroupViewSet
from articles.views import ArticleViewSet
from authentication.views import UserViewSet
from comments.views import CommentViewSet

api_router = DefaultRouter()
api_router.register(r"articles", ArticleViewSet, basename="article")
api_router.register(r"comments", CommentViewSet, basename="comment")
api_router.register(r"users", UserViewSet, basename="user")
api_router.register(r"groups", GroupViewSet, basename="group")

urlpatterns = [
    path("auth/", include("authentication.urls")),
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/", include(api_router.urls)),
]
