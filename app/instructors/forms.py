from django import forms
from app.school.models import Course, Instructor, OfficeAssignment


class InstructorForm(forms.ModelForm):
    """Instructor fields plus office location and course assignments."""
    office_location = forms.CharField(max_length=50, required=False, label='Office Location')
    courses = forms.ModelMultipleChoiceField(
        queryset=Course.objects.order_by('course_id'),
        required=False,
        widget=forms.CheckboxSelectMultiple,
    )

    class Meta:
        model = Instructor
        fields = ['last_name', 'first_mid_name', 'hire_date', 'courses']
        labels = {
            'last_name': 'Last Name',
            'first_mid_name': 'First Name',
            'hire_date': 'Hire Date',
        }
        error_messages = {
            'first_mid_name': {'max_length': 'First name cannot be longer than 50 characters.'},
        }
        widgets = {
            'hire_date': forms.DateInput(attrs={'type': 'date'}, format='%Y-%m-%d'),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if self.instance.pk:
            self.fields['office_location'].initial = self.instance.office_location

    def save(self, commit=True):
        instructor = super().save(commit=commit)
        if commit:
            self._save_office(instructor)
        return instructor

    def _save_office(self, instructor):
        """A blank location removes the office assignment."""
        location = self.cleaned_data.get('office_location', '').strip()
        if location:
            OfficeAssignment.objects.update_or_create(
                instructor=instructor,
                defaults={'location': location},
            )
        else:
            OfficeAssignment.objects.filter(instructor=instructor).delete()
