from django.urls import path
from . import views

urlpatterns = [
    path('', views.instructor_index, name='instructor_index'),
    path('create/', views.instructor_create, name='instructor_create'),
    path('<int:pk>/', views.instructor_detail, name='instructor_detail'),
    path('<int:pk>/edit/', views.instructor_edit, name='instructor_edit'),
    path('<int:pk>/delete/', views.instructor_delete, name='instructor_delete'),
]
