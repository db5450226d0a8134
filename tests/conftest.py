"""
Shared fixtures: a small school with two instructors and two departments.
"""
from datetime import date
from decimal import Decimal

import pytest

from app.school.models import Course, Department, Instructor, Student


@pytest.fixture
def abercrombie(db):
    return Instructor.objects.create(last_name='Abercrombie', first_mid_name='Kim', hire_date=date(1995, 3, 11))


@pytest.fixture
def fakhouri(db):
    return Instructor.objects.create(last_name='Fakhouri', first_mid_name='Fadi', hire_date=date(2002, 7, 6))


@pytest.fixture
def english(abercrombie):
    return Department.objects.create(
        name='English',
        budget=Decimal('350000'),
        start_date=date(2007, 9, 1),
        administrator=abercrombie,
    )


@pytest.fixture
def mathematics(db):
    return Department.objects.create(
        name='Mathematics',
        budget=Decimal('100000'),
        start_date=date(2007, 9, 1),
    )


@pytest.fixture
def composition(english):
    return Course.objects.create(course_id=2021, title='Composition', credits=3, department=english)


@pytest.fixture
def students(db):
    rows = [
        ('Alexander', 'Carson', date(2005, 9, 1)),
        ('Alonso', 'Meredith', date(2002, 9, 1)),
        ('Anand', 'Arturo', date(2003, 9, 1)),
        ('Barzdukas', 'Gytis', date(2002, 9, 1)),
        ('Li', 'Yan', date(2002, 9, 1)),
    ]
    return [
        Student.objects.create(last_name=last, first_mid_name=first, enrollment_date=enrolled)
        for last, first, enrolled in rows
    ]


def department_fields(department, **overrides):
    """Full row of tracked fields for ``department`` with optional changes."""
    fields = {
        'name': department.name,
        'budget': department.budget,
        'start_date': department.start_date,
        'administrator': department.administrator,
    }
    fields.update(overrides)
    return fields


def department_post(department, version=None, **overrides):
    """Form data for the department edit page."""
    fields = department_fields(department, **overrides)
    administrator = fields['administrator']
    return {
        'name': fields['name'],
        'budget': str(fields['budget']),
        'start_date': fields['start_date'].isoformat(),
        'administrator': administrator.pk if administrator else '',
        'version': department.version if version is None else version,
    }
