import logging
from django.contrib import messages
from django.db import DatabaseError, transaction
from django.db.models import Prefetch
from django.shortcuts import render, redirect, get_object_or_404
from app.departments.concurrency import release_administrators
from app.school.models import Course, Enrollment, Instructor
from .forms import InstructorForm

logger = logging.getLogger(__name__)

SAVE_ERROR_MESSAGE = "Unable to save changes. Try again, and if the problem persists see your system administrator."


def instructor_index(request):
    """
    Instructor list. ``?id=`` selects an instructor and shows their courses;
    ``&course=`` additionally shows the enrollments of one of those courses.
    """
    instructors = (
        Instructor.objects.select_related('office_assignment')
        .prefetch_related(Prefetch('courses', queryset=Course.objects.select_related('department')))
        .order_by('last_name', 'first_mid_name')
    )

    selected_instructor = None
    courses = []
    selected_course = None
    enrollments = []

    instructor_id = request.GET.get('id', '')
    if instructor_id.isdigit():
        selected_instructor = next((i for i in instructors if i.pk == int(instructor_id)), None)
        if selected_instructor is not None:
            courses = list(selected_instructor.courses.all())

    course_id = request.GET.get('course', '')
    if selected_instructor is not None and course_id.isdigit():
        selected_course = next((c for c in courses if c.pk == int(course_id)), None)
        if selected_course is not None:
            enrollments = (
                Enrollment.objects.filter(course=selected_course)
                .select_related('student')
                .order_by('student__last_name')
            )

    context = {
        'instructors': instructors,
        'selected_instructor': selected_instructor,
        'courses': courses,
        'selected_course': selected_course,
        'enrollments': enrollments,
    }
    return render(request, 'instructors/index.html', context)


def instructor_detail(request, pk):
    instructor = get_object_or_404(Instructor.objects.select_related('office_assignment'), pk=pk)
    return render(request, 'instructors/detail.html', {'instructor': instructor})


def _save_instructor(request, form, success_message):
    try:
        with transaction.atomic():
            instructor = form.save()
    except DatabaseError:
        logger.exception("Failed to save instructor")
        form.add_error(None, SAVE_ERROR_MESSAGE)
        return None
    messages.success(request, success_message.format(name=instructor.full_name))
    return instructor


def instructor_create(request):
    if request.method == 'POST':
        form = InstructorForm(request.POST)
        if form.is_valid() and _save_instructor(request, form, 'Instructor {name} created.'):
            return redirect('instructor_index')
    else:
        form = InstructorForm()
    return render(request, 'instructors/form.html', {'form': form, 'creating': True})


def instructor_edit(request, pk):
    instructor = get_object_or_404(Instructor, pk=pk)
    if request.method == 'POST':
        form = InstructorForm(request.POST, instance=instructor)
        if form.is_valid() and _save_instructor(request, form, 'Instructor {name} saved.'):
            return redirect('instructor_index')
    else:
        form = InstructorForm(instance=instructor)
    return render(request, 'instructors/form.html', {'form': form, 'instructor': instructor})


def instructor_delete(request, pk):
    instructor = get_object_or_404(Instructor.objects.select_related('office_assignment'), pk=pk)
    if request.method == 'POST':
        try:
            with transaction.atomic():
                release_administrators([instructor.pk])
                instructor.delete()
        except DatabaseError:
            logger.exception("Failed to delete instructor %s", pk)
            messages.error(request, 'Unable to delete the instructor. Try again.')
            return redirect('instructor_delete', pk=pk)
        messages.success(request, 'Instructor deleted.')
        return redirect('instructor_index')
    return render(request, 'instructors/delete.html', {'instructor': instructor})
