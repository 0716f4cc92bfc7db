from django.urls import path

from . import views

urlpatterns = [
    path('auth/register', views.register, name='auth-register'),
    path('auth/login', views.login, name='auth-login'),
    path('auth/verify-token', views.verify_token, name='auth-verify-token'),
    path('auth/forgotPassword', views.forgot_password, name='auth-forgot-password'),
    path('auth/resetPassword', views.reset_password, name='auth-reset-password'),
    path('auth/createSuperAdmin', views.create_super_admin, name='auth-create-superadmin'),
    path('admin/getAllAdmin', views.list_admins, name='admin-list'),
]
