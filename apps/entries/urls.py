from django.urls import path

from . import views

urlpatterns = [
    path('', views.home, name='home'),
    path('admin/', views.admin_login, name='admin_login'),
    path('admin/logout/', views.admin_logout, name='admin_logout'),
    path('admin/dashboard/', views.dashboard, name='dashboard'),
    path('admin/dashboard/entries/<path:entry_id>/delete/', views.dashboard_delete_entry, name='dashboard_delete_entry'),
    path('admin/dashboard/entries/clear/', views.dashboard_clear_entries, name='dashboard_clear_entries'),
    path('api/entries/', views.api_entries, name='api_entries'),
    path('api/entries/all/', views.api_entries_all, name='api_entries_all'),
    path('api/entries/clear/', views.api_clear_entries, name='api_clear_entries'),
    path('api/entries/today/', views.api_today_entries, name='api_today_entries'),
    path('api/entries/today/count/', views.api_today_count, name='api_today_count'),
    path('api/entries/<path:entry_id>/delete/', views.api_delete_entry, name='api_delete_entry'),
]
