"""
URL configuration for contoso university project.
"""
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('', include('app.school.urls')),
    path('students/', include('app.students.urls')),
    path('courses/', include('app.courses.urls')),
    path('instructors/', include('app.instructors.urls')),
    path('departments/', include('app.departments.urls')),
]
