from django import forms
from app.school.models import Department, Instructor
from .concurrency import TRACKED_FIELDS, _check_administrator


class DepartmentForm(forms.ModelForm):
    """Department fields plus the version the page was rendered with."""
    version = forms.IntegerField(widget=forms.HiddenInput, required=False)

    class Meta:
        model = Department
        fields = list(TRACKED_FIELDS)
        labels = {'start_date': 'Start Date'}
        widgets = {
            'start_date': forms.DateInput(attrs={'type': 'date'}, format='%Y-%m-%d'),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        administrator = self.fields['administrator']
        administrator.queryset = Instructor.objects.order_by('last_name', 'first_mid_name')
        administrator.label_from_instance = lambda instructor: instructor.full_name

    def proposed_fields(self):
        return {name: self.cleaned_data[name] for name in TRACKED_FIELDS}


class DepartmentAdminForm(forms.ModelForm):
    """
    Admin change form for departments.

    Carries the version the change page was opened with and runs the same
    administrator and version checks the public edit page gets from the
    service, so the admin reports problems as form errors.
    """
    loaded_version = forms.IntegerField(widget=forms.HiddenInput, required=False)

    class Meta:
        model = Department
        fields = list(TRACKED_FIELDS)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if self.instance.pk:
            self.fields['loaded_version'].initial = self.instance.version

    def proposed_fields(self):
        return {name: self.cleaned_data[name] for name in TRACKED_FIELDS}

    def clean(self):
        cleaned_data = super().clean()
        if 'administrator' in cleaned_data:
            collision = _check_administrator(self.instance.pk, cleaned_data['administrator'])
            if collision:
                self.add_error('administrator', collision.message)
        # self.instance still holds the stored row here
        if self.instance.pk and cleaned_data.get('loaded_version') != self.instance.version:
            raise forms.ValidationError(
                "This department was changed by another user after you opened it "
                "(now at version %(version)s). Reload the page to see the current values.",
                code='stale',
                params={'version': self.instance.version},
            )
        return cleaned_data
