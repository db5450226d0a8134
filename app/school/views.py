from django.db.models import Count
from django.shortcuts import render
from .models import Student


def home(request):
    """Landing page."""
    return render(request, 'home.html')


def about(request):
    """Student body statistics: number of students per enrollment date."""
    enrollment_groups = (
        Student.objects.values('enrollment_date')
        .annotate(student_count=Count('id'))
        .order_by('enrollment_date')
    )
    return render(request, 'about.html', {'enrollment_groups': enrollment_groups})
