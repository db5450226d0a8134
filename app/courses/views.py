import logging
from django.contrib import messages
from django.db import DatabaseError
from django.shortcuts import render, redirect, get_object_or_404
from app.school.models import Course, Department
from .forms import CourseForm

logger = logging.getLogger(__name__)

SAVE_ERROR_MESSAGE = "Unable to save changes. Try again, and if the problem persists see your system administrator."


def course_index(request):
    """Course list, optionally narrowed to one department."""
    departments = Department.objects.order_by('name')
    selected_department = request.GET.get('department', '')

    courses = Course.objects.select_related('department').order_by('course_id')
    if selected_department.isdigit():
        courses = courses.filter(department_id=int(selected_department))

    context = {
        'courses': courses,
        'departments': departments,
        'selected_department': selected_department,
    }
    return render(request, 'courses/index.html', context)


def course_detail(request, pk):
    course = get_object_or_404(Course.objects.select_related('department'), pk=pk)
    return render(request, 'courses/detail.html', {'course': course})


def _save_course(request, form, success_message):
    try:
        course = form.save()
    except DatabaseError:
        logger.exception("Failed to save course")
        form.add_error(None, SAVE_ERROR_MESSAGE)
        return None
    messages.success(request, success_message.format(title=course.title))
    return course


def course_create(request):
    if request.method == 'POST':
        form = CourseForm(request.POST)
        if form.is_valid() and _save_course(request, form, 'Course {title} created.'):
            return redirect('course_index')
    else:
        form = CourseForm()
    return render(request, 'courses/form.html', {'form': form, 'creating': True})


def course_edit(request, pk):
    course = get_object_or_404(Course, pk=pk)
    if request.method == 'POST':
        form = CourseForm(request.POST, instance=course)
        if form.is_valid() and _save_course(request, form, 'Course {title} saved.'):
            return redirect('course_index')
    else:
        form = CourseForm(instance=course)
    return render(request, 'courses/form.html', {'form': form, 'course': course})


def course_delete(request, pk):
    course = get_object_or_404(Course.objects.select_related('department'), pk=pk)
    if request.method == 'POST':
        try:
            course.delete()
        except DatabaseError:
            logger.exception("Failed to delete course %s", pk)
            messages.error(request, 'Unable to delete the course. Try again.')
            return redirect('course_delete', pk=pk)
        messages.success(request, 'Course deleted.')
        return redirect('course_index')
    return render(request, 'courses/delete.html', {'course': course})
