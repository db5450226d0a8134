from django import forms
from app.school.models import Student


class StudentForm(forms.ModelForm):
    class Meta:
        model = Student
        fields = ['last_name', 'first_mid_name', 'enrollment_date']
        labels = {
            'last_name': 'Last Name',
            'first_mid_name': 'First Name',
            'enrollment_date': 'Enrollment Date',
        }
        error_messages = {
            'first_mid_name': {'max_length': 'First name cannot be longer than 50 characters.'},
        }
        widgets = {
            'enrollment_date': forms.DateInput(attrs={'type': 'date'}, format='%Y-%m-%d'),
        }
