import logging
from django.conf import settings
from django.contrib import messages
from django.core.paginator import Paginator
from django.db import DatabaseError
from django.db.models import Q
from django.shortcuts import render, redirect, get_object_or_404
from django.urls import reverse
from app.school.models import Student
from .forms import StudentForm

logger = logging.getLogger(__name__)

SAVE_ERROR_MESSAGE = "Unable to save changes. Try again, and if the problem persists see your system administrator."
DELETE_ERROR_MESSAGE = "Delete failed. Try again, and if the problem persists see your system administrator."

# sort parameter -> order_by arguments; anything else sorts by last name
SORT_ORDERS = {
    'name_desc': ['-last_name', '-first_mid_name'],
    'date': ['enrollment_date', 'last_name'],
    'date_desc': ['-enrollment_date', 'last_name'],
}


def student_index(request):
    """Student list with search, sorting and paging."""
    sort_order = request.GET.get('sort', '')
    search_string = request.GET.get('search')
    page_number = request.GET.get('page', 1)

    # A new search starts over at the first page; otherwise keep the current filter.
    if search_string is not None:
        page_number = 1
    else:
        search_string = request.GET.get('current_filter', '')
    search_string = search_string.strip()

    students = Student.objects.all()
    if search_string:
        students = students.filter(
            Q(last_name__icontains=search_string) | Q(first_mid_name__icontains=search_string)
        )
    students = students.order_by(*SORT_ORDERS.get(sort_order, ['last_name', 'first_mid_name']))

    paginator = Paginator(students, settings.STUDENTS_PAGE_SIZE)
    page = paginator.get_page(page_number)

    context = {
        'page': page,
        'current_sort': sort_order,
        'current_filter': search_string,
        'name_sort': '' if sort_order == 'name_desc' else 'name_desc',
        'date_sort': 'date_desc' if sort_order == 'date' else 'date',
    }
    return render(request, 'students/index.html', context)


def student_detail(request, pk):
    student = get_object_or_404(Student, pk=pk)
    enrollments = student.enrollments.select_related('course').order_by('course__title')
    return render(request, 'students/detail.html', {'student': student, 'enrollments': enrollments})


def student_create(request):
    if request.method == 'POST':
        form = StudentForm(request.POST)
        if form.is_valid():
            try:
                student = form.save()
            except DatabaseError:
                logger.exception("Failed to create student")
                form.add_error(None, SAVE_ERROR_MESSAGE)
            else:
                messages.success(request, f'Student {student.full_name} created.')
                return redirect('student_index')
    else:
        form = StudentForm()
    return render(request, 'students/form.html', {'form': form, 'creating': True})


def student_edit(request, pk):
    student = get_object_or_404(Student, pk=pk)
    if request.method == 'POST':
        form = StudentForm(request.POST, instance=student)
        if form.is_valid():
            try:
                form.save()
            except DatabaseError:
                logger.exception("Failed to update student %s", pk)
                form.add_error(None, SAVE_ERROR_MESSAGE)
            else:
                messages.success(request, f'Student {student.full_name} saved.')
                return redirect('student_index')
    else:
        form = StudentForm(instance=student)
    return render(request, 'students/form.html', {'form': form, 'student': student})


def student_delete(request, pk):
    if request.method == 'POST':
        try:
            Student.objects.filter(pk=pk).delete()
        except DatabaseError:
            logger.exception("Failed to delete student %s", pk)
            return redirect(reverse('student_delete', args=[pk]) + '?save_error=1')
        messages.success(request, 'Student deleted.')
        return redirect('student_index')

    student = get_object_or_404(Student, pk=pk)
    context = {
        'student': student,
        'error_message': DELETE_ERROR_MESSAGE if request.GET.get('save_error') == '1' else None,
    }
    return render(request, 'students/delete.html', context)
