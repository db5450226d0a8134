from django.contrib import admin, messages
from django.db import transaction
from django.http import HttpResponseRedirect
from django.urls import reverse
from app.departments.concurrency import (
    Applied,
    RecordGone,
    ValidationConflict,
    create_department,
    propose_update,
    release_administrators,
)
from app.departments.forms import DepartmentAdminForm
from app.departments.views import CONCURRENCY_EDIT_MESSAGE, DELETED_BY_OTHER_EDIT_MESSAGE
from .models import Student, Instructor, OfficeAssignment, Department, Course, Enrollment


def _written(obj):
    return isinstance(getattr(obj, 'write_outcome', None), Applied)


def _rejection_message(outcome):
    """A write the form checks let through but the service refused."""
    if isinstance(outcome, RecordGone):
        return DELETED_BY_OTHER_EDIT_MESSAGE
    if isinstance(outcome, ValidationConflict):
        return outcome.message
    return CONCURRENCY_EDIT_MESSAGE


class EnrollmentInline(admin.TabularInline):
    model = Enrollment
    extra = 0
    raw_id_fields = ['course']


class OfficeAssignmentInline(admin.StackedInline):
    model = OfficeAssignment
    extra = 0


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ['last_name', 'first_mid_name', 'enrollment_date']
    search_fields = ['last_name', 'first_mid_name']
    inlines = [EnrollmentInline]


@admin.register(Instructor)
class InstructorAdmin(admin.ModelAdmin):
    list_display = ['last_name', 'first_mid_name', 'hire_date']
    search_fields = ['last_name', 'first_mid_name']
    filter_horizontal = ['courses']
    inlines = [OfficeAssignmentInline]

    def delete_model(self, request, obj):
        with transaction.atomic():
            release_administrators([obj.pk])
            super().delete_model(request, obj)

    def delete_queryset(self, request, queryset):
        with transaction.atomic():
            release_administrators(queryset.values_list('pk', flat=True))
            super().delete_queryset(request, queryset)


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    """Admin writes go through the concurrency service like the public pages."""
    form = DepartmentAdminForm
    list_display = ['name', 'budget', 'start_date', 'administrator', 'version']
    search_fields = ['name']
    readonly_fields = ['version']

    def save_model(self, request, obj, form, change):
        if change:
            outcome = propose_update(obj.pk, form.proposed_fields(), form.cleaned_data['loaded_version'])
        else:
            outcome = create_department(form.proposed_fields())
        if isinstance(outcome, Applied):
            obj.pk = outcome.department_id
            obj.version = outcome.version
        obj.write_outcome = outcome

    def log_addition(self, request, obj, message):
        if _written(obj):
            return super().log_addition(request, obj, message)

    def log_change(self, request, obj, message):
        if _written(obj):
            return super().log_change(request, obj, message)

    def response_add(self, request, obj, post_url_continue=None):
        if _written(obj):
            return super().response_add(request, obj, post_url_continue)
        self.message_user(request, _rejection_message(obj.write_outcome), messages.ERROR)
        return HttpResponseRedirect(request.path)

    def response_change(self, request, obj):
        if _written(obj):
            return super().response_change(request, obj)
        outcome = obj.write_outcome
        self.message_user(request, _rejection_message(outcome), messages.ERROR)
        if isinstance(outcome, RecordGone):
            return HttpResponseRedirect(reverse('admin:school_department_changelist'))
        return HttpResponseRedirect(request.path)


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ['course_id', 'title', 'credits', 'department']
    search_fields = ['title']
    list_filter = ['department']


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ['student', 'course', 'grade']
    list_filter = ['grade', 'course']
    search_fields = ['student__last_name', 'course__title']
    raw_id_fields = ['student', 'course']
