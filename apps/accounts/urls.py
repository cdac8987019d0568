from django.urls import path
from .views import LoginView, MeView, RefreshTokenView, RegisterView, ResetPasswordView

urlpatterns = [
    path('register/', RegisterView.as_view(), name='auth-register'),
    path('login/', LoginView.as_view(), name='auth-login'),
    path('refresh-token/', RefreshTokenView.as_view(), name='auth-refresh-token'),
    path('reset-password/', ResetPasswordView.as_view(), name='auth-reset-password'),
    path('me/', MeView.as_view(), name='auth-me'),
]
