import logging
from django.conf import settings
from django.contrib import messages
from django.http import Http404
from django.shortcuts import render, redirect, get_object_or_404
from django.urls import reverse
from app.school.models import Department
from app.school.templatetags.school_format import format_currency
from .concurrency import (
    Applied,
    RecordGone,
    ValidationConflict,
    VersionConflict,
    StoreUnavailable,
    create_department,
    propose_update,
    propose_delete,
)
from .forms import DepartmentForm

logger = logging.getLogger(__name__)

CONCURRENCY_EDIT_MESSAGE = (
    "The record you attempted to edit was modified by another user after you got "
    "the original value. The edit operation was canceled and the current values in "
    "the database have been displayed. If you still want to edit this record, click "
    "the Save button again. Otherwise click the Back to List hyperlink."
)
CONCURRENCY_DELETE_MESSAGE = (
    "The record you attempted to delete was modified by another user after you got "
    "the original values. The delete operation was canceled and the current values in "
    "the database have been displayed. If you still want to delete this record, click "
    "the Delete button again. Otherwise click the Back to List hyperlink."
)
DELETED_BY_OTHER_EDIT_MESSAGE = "Unable to save changes. The department was deleted by another user."
DELETED_BY_OTHER_DELETE_MESSAGE = (
    "The record you attempted to delete was deleted by another user after you got "
    "the original values."
)
STORE_UNAVAILABLE_MESSAGE = (
    "Unable to save changes. Try again, and if the problem persists "
    "contact your system administrator."
)


def _with_store_retry(operation, *args):
    """Run a concurrency operation, retrying only when the store is unreachable."""
    attempts = max(1, settings.STORE_RETRY_ATTEMPTS)
    for attempt in range(1, attempts + 1):
        try:
            return operation(*args)
        except StoreUnavailable:
            if attempt == attempts:
                raise
            logger.warning("Store unavailable, retrying (%s/%s)", attempt, attempts)


def _parse_version(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def display_value(field, value):
    """Format a stored value the way the edit form shows it."""
    if value is None:
        return 'None'
    if field == 'budget':
        return format_currency(value)
    if field == 'start_date':
        return value.strftime('%Y-%m-%d')
    if field == 'administrator':
        return value.full_name
    return str(value)


def department_index(request):
    """List all departments with their administrators."""
    departments = Department.objects.select_related('administrator').order_by('name')
    return render(request, 'departments/index.html', {'departments': departments})


def department_detail(request, pk):
    department = get_object_or_404(Department.objects.select_related('administrator'), pk=pk)
    return render(request, 'departments/detail.html', {'department': department})


def department_create(request):
    if request.method == 'POST':
        form = DepartmentForm(request.POST)
        if form.is_valid():
            try:
                outcome = _with_store_retry(create_department, form.proposed_fields())
            except StoreUnavailable:
                form.add_error(None, STORE_UNAVAILABLE_MESSAGE)
            else:
                if isinstance(outcome, Applied):
                    messages.success(request, f"Department {form.cleaned_data['name']} created.")
                    return redirect('department_index')
                form.add_error(None, outcome.message)
    else:
        form = DepartmentForm()

    return render(request, 'departments/form.html', {'form': form, 'creating': True})


def department_edit(request, pk):
    """
    Edit a department with optimistic concurrency.

    The form carries the version it was rendered with. On a version conflict
    the form is re-rendered with the stored value beside each diverging field
    and the hidden version refreshed, so saving again overrides deliberately.
    """
    if request.method != 'POST':
        department = get_object_or_404(Department, pk=pk)
        form = DepartmentForm(instance=department, initial={'version': department.version})
        return render(request, 'departments/form.html', {'form': form, 'department_id': pk})

    form = DepartmentForm(request.POST)
    if not form.is_valid():
        return render(request, 'departments/form.html', {'form': form, 'department_id': pk})

    try:
        outcome = _with_store_retry(
            propose_update, pk, form.proposed_fields(), form.cleaned_data['version']
        )
    except StoreUnavailable:
        form.add_error(None, STORE_UNAVAILABLE_MESSAGE)
        return render(request, 'departments/form.html', {'form': form, 'department_id': pk})

    if isinstance(outcome, Applied):
        messages.success(request, f"Department {form.cleaned_data['name']} saved.")
        return redirect('department_index')

    if isinstance(outcome, RecordGone):
        form.add_error(None, DELETED_BY_OTHER_EDIT_MESSAGE)
    elif isinstance(outcome, ValidationConflict):
        form.add_error(None, outcome.message)
    elif isinstance(outcome, VersionConflict):
        data = request.POST.copy()
        data['version'] = outcome.current_version
        form = DepartmentForm(data)
        form.is_valid()
        for d in outcome.diff:
            form.add_error(d.field, f"Current value: {display_value(d.field, d.current)}")
        form.add_error(None, CONCURRENCY_EDIT_MESSAGE)

    return render(request, 'departments/form.html', {'form': form, 'department_id': pk})


def department_delete(request, pk):
    """Confirm and delete a department; a stale version bounces back with a message."""
    if request.method == 'POST':
        version = _parse_version(request.POST.get('version'))
        try:
            outcome = _with_store_retry(propose_delete, pk, version)
        except StoreUnavailable:
            # The store is down, so the page is built from the request alone
            context = {
                'department': None,
                'version': request.POST.get('version', ''),
                'error_message': STORE_UNAVAILABLE_MESSAGE,
            }
            return render(request, 'departments/delete.html', context)

        if isinstance(outcome, Applied):
            messages.success(request, 'Department deleted.')
            return redirect('department_index')
        return redirect(reverse('department_delete', args=[pk]) + '?concurrency_error=1')

    concurrency_error = request.GET.get('concurrency_error') in ('1', 'true', 'True')
    department = Department.objects.select_related('administrator').filter(pk=pk).first()
    if department is None:
        if concurrency_error:
            messages.error(request, DELETED_BY_OTHER_DELETE_MESSAGE)
            return redirect('department_index')
        raise Http404('Department not found')

    context = {
        'department': department,
        'version': department.version,
        'error_message': CONCURRENCY_DELETE_MESSAGE if concurrency_error else None,
    }
    return render(request, 'departments/delete.html', context)
