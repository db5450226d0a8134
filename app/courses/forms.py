from django import forms
from app.school.models import Course, Department


class CourseForm(forms.ModelForm):
    class Meta:
        model = Course
        fields = ['course_id', 'title', 'credits', 'department']
        labels = {'course_id': 'Number'}

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['department'].queryset = Department.objects.order_by('name')
        # The course number is the primary key; it cannot change after creation.
        if self.instance and self.instance.pk is not None:
            self.fields['course_id'].disabled = True
