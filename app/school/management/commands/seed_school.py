"""
Load sample school data from a YAML file into the database.
"""
import logging
from decimal import Decimal
from pathlib import Path
from typing import Dict

import yaml
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from app.departments.concurrency import ValidationConflict, create_department
from app.school.models import Course, Department, Enrollment, Instructor, OfficeAssignment, Student

logger = logging.getLogger(__name__)


def load_seed_file(seed_path) -> Dict:
    """Read and sanity-check the seed YAML."""
    path = Path(seed_path)
    if not path.exists():
        raise CommandError(f"Seed file not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise CommandError(f"Seed file must contain a mapping, got {type(data).__name__}")
    return data


def seed_school(data: Dict) -> Dict[str, int]:
    """
    Create whatever in ``data`` does not exist yet.

    Existing rows (matched by natural key) are left untouched, so running the
    seed twice is harmless. Returns the number of rows created per entity.
    """
    created = {
        'students': 0,
        'instructors': 0,
        'departments': 0,
        'courses': 0,
        'enrollments': 0,
    }

    with transaction.atomic():
        students = {}
        for row in data.get('students', []):
            student, was_created = Student.objects.get_or_create(
                last_name=row['last'],
                first_mid_name=row['first'],
                defaults={'enrollment_date': row['enrollment_date']},
            )
            students[row['last']] = student
            created['students'] += was_created

        instructors = {}
        for row in data.get('instructors', []):
            instructor, was_created = Instructor.objects.get_or_create(
                last_name=row['last'],
                first_mid_name=row['first'],
                defaults={'hire_date': row['hire_date']},
            )
            if row.get('office'):
                OfficeAssignment.objects.get_or_create(
                    instructor=instructor,
                    defaults={'location': row['office']},
                )
            instructors[row['last']] = instructor
            created['instructors'] += was_created

        departments = {}
        for row in data.get('departments', []):
            department = Department.objects.filter(name=row['name']).first()
            if department is None:
                outcome = create_department({
                    'name': row['name'],
                    'budget': Decimal(str(row['budget'])),
                    'start_date': row['start_date'],
                    'administrator': instructors.get(row.get('administrator')),
                })
                if isinstance(outcome, ValidationConflict):
                    raise CommandError(outcome.message)
                department = Department.objects.get(pk=outcome.department_id)
                created['departments'] += 1
            departments[row['name']] = department

        courses = {}
        for row in data.get('courses', []):
            if row['department'] not in departments:
                raise CommandError(f"Course {row['number']} references unknown department {row['department']}")
            course, was_created = Course.objects.get_or_create(
                course_id=row['number'],
                defaults={
                    'title': row['title'],
                    'credits': row['credits'],
                    'department': departments[row['department']],
                },
            )
            for last_name in row.get('instructors', []):
                instructors[last_name].courses.add(course)
            courses[row['number']] = course
            created['courses'] += was_created

        for row in data.get('enrollments', []):
            _, was_created = Enrollment.objects.get_or_create(
                student=students[row['student']],
                course=courses[row['course']],
                defaults={'grade': row.get('grade')},
            )
            created['enrollments'] += was_created

    logger.info("Seed complete: %s", created)
    return created


class Command(BaseCommand):
    help = 'Load sample students, instructors, departments, courses and enrollments'

    def add_arguments(self, parser):
        parser.add_argument('--file', type=str, default=None, help='Path to seed YAML (defaults to settings.SEED_FILE)')

    def handle(self, *args, **options):
        seed_path = options.get('file') or settings.SEED_FILE

        self.stdout.write(f"Seeding school data from {seed_path}...")
        created = seed_school(load_seed_file(seed_path))
        for entity, count in created.items():
            self.stdout.write(f"  {entity}: {count} created")
        self.stdout.write(self.style.SUCCESS('Seed complete'))
