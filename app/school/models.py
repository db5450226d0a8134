from django.db import models
from django.core.validators import MinLengthValidator, MinValueValidator, MaxValueValidator


class Person(models.Model):
    """Common name fields for students and instructors."""
    last_name = models.CharField(max_length=50)
    first_mid_name = models.CharField(
        max_length=50,
        db_column='first_name',
        verbose_name='first name',
        error_messages={'max_length': 'First name cannot be longer than 50 characters.'},
    )

    class Meta:
        abstract = True

    @property
    def full_name(self):
        return f"{self.last_name}, {self.first_mid_name}"

    def __str__(self):
        return self.full_name


class Student(Person):
    enrollment_date = models.DateField()

    class Meta:
        ordering = ['last_name', 'first_mid_name']


class Instructor(Person):
    hire_date = models.DateField()
    courses = models.ManyToManyField('Course', related_name='instructors', blank=True)

    class Meta:
        ordering = ['last_name', 'first_mid_name']

    @property
    def office_location(self):
        office = getattr(self, 'office_assignment', None)
        return office.location if office else ''


class OfficeAssignment(models.Model):
    """Office location; at most one per instructor."""
    instructor = models.OneToOneField(
        Instructor,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name='office_assignment',
    )
    location = models.CharField(max_length=50, verbose_name='office location')

    def __str__(self):
        return f"{self.location} ({self.instructor.full_name})"


class Department(models.Model):
    """
    Academic department.

    ``version`` is the optimistic-concurrency token: it starts at 1 and is
    bumped on every successful write by app.departments.concurrency.
    Administrator uniqueness is enforced there too, not by a constraint.
    """
    name = models.CharField(max_length=50, validators=[MinLengthValidator(3)])
    budget = models.DecimalField(max_digits=19, decimal_places=4)
    start_date = models.DateField()
    administrator = models.ForeignKey(
        Instructor,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='administered_departments',
    )
    version = models.PositiveIntegerField(default=1, editable=False)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class Course(models.Model):
    course_id = models.IntegerField(primary_key=True, verbose_name='number')
    title = models.CharField(max_length=50, validators=[MinLengthValidator(3)])
    credits = models.IntegerField(validators=[MinValueValidator(0), MaxValueValidator(5)])
    department = models.ForeignKey(Department, on_delete=models.CASCADE, related_name='courses')

    class Meta:
        ordering = ['course_id']

    def __str__(self):
        return f"{self.course_id} {self.title}"


class Enrollment(models.Model):
    GRADE_CHOICES = [
        ('A', 'A'),
        ('B', 'B'),
        ('C', 'C'),
        ('D', 'D'),
        ('F', 'F'),
    ]

    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='enrollments')
    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name='enrollments')
    grade = models.CharField(max_length=1, choices=GRADE_CHOICES, blank=True, null=True)

    class Meta:
        ordering = ['course', 'student']

    def __str__(self):
        return f"{self.student.full_name} - {self.course.title} ({self.grade or 'No grade'})"
