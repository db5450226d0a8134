"""
Test suite for the department pages and how they render each write outcome.
"""
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.contrib.admin.models import LogEntry
from django.contrib.messages import get_messages
from django.db import OperationalError
from django.urls import reverse

from app.departments.concurrency import Applied, RecordGone, StoreUnavailable, VersionConflict, propose_update
from app.departments.views import CONCURRENCY_EDIT_MESSAGE
from app.school.models import Department
from conftest import department_fields, department_post

pytestmark = pytest.mark.django_db


class TestDepartmentPages:
    """Read-only pages."""

    def test_index_lists_budget_and_administrator(self, client, english, mathematics):
        response = client.get(reverse('department_index'))

        assert response.status_code == 200
        content = response.content.decode()
        assert 'English' in content
        assert '$350,000.00' in content
        assert 'Abercrombie, Kim' in content
        assert 'Mathematics' in content

    def test_detail(self, client, english):
        response = client.get(reverse('department_detail', args=[english.pk]))

        assert response.status_code == 200
        assert '2007-09-01' in response.content.decode()

    def test_detail_missing_is_404(self, client, db):
        assert client.get(reverse('department_detail', args=[42])).status_code == 404


class TestDepartmentCreate:

    def test_create(self, client, fakhouri):
        response = client.post(reverse('department_create'), {
            'name': 'Economics',
            'budget': '100000',
            'start_date': '2007-09-01',
            'administrator': fakhouri.pk,
        })

        assert response.status_code == 302
        assert response.url == reverse('department_index')
        department = Department.objects.get(name='Economics')
        assert department.version == 1
        assert department.administrator == fakhouri

    def test_create_with_taken_administrator(self, client, english, abercrombie):
        response = client.post(reverse('department_create'), {
            'name': 'Economics',
            'budget': '100000',
            'start_date': '2007-09-01',
            'administrator': abercrombie.pk,
        })

        assert response.status_code == 200
        assert 'is already administrator of the English department' in response.content.decode()
        assert not Department.objects.filter(name='Economics').exists()

    def test_create_rejects_short_name(self, client, db):
        response = client.post(reverse('department_create'), {
            'name': 'Ec',
            'budget': '100000',
            'start_date': '2007-09-01',
            'administrator': '',
        })

        assert response.status_code == 200
        assert response.context['form'].errors['name']
        assert not Department.objects.exists()


class TestDepartmentEdit:
    """Edit form round trips through the concurrency service."""

    def test_get_carries_version(self, client, english):
        response = client.get(reverse('department_edit', args=[english.pk]))

        assert response.status_code == 200
        assert response.context['form']['version'].value() == 1
        assert 'name="version" value="1"' in response.content.decode()

    def test_get_missing_is_404(self, client, db):
        assert client.get(reverse('department_edit', args=[42])).status_code == 404

    def test_save_with_current_version(self, client, english):
        response = client.post(
            reverse('department_edit', args=[english.pk]),
            department_post(english, budget=Decimal('0')),
        )

        assert response.status_code == 302
        assert response.url == reverse('department_index')
        english.refresh_from_db()
        assert english.budget == Decimal('0')
        assert english.version == 2

    def test_stale_save_shows_current_values(self, client, english):
        propose_update(english.pk, department_fields(english, budget=Decimal('0')), english.version)

        response = client.post(
            reverse('department_edit', args=[english.pk]),
            department_post(english, version=1, budget=Decimal('350000')),
        )

        assert response.status_code == 200
        content = response.content.decode()
        assert 'Current value: $0.00' in content
        assert 'was modified by another user' in content
        form = response.context['form']
        assert form.errors['budget'] == ['Current value: $0.00']
        assert 'name' not in form.errors
        assert str(form['version'].value()) == '2'

        english.refresh_from_db()
        assert english.budget == Decimal('0')

    def test_second_save_after_conflict_overrides(self, client, english):
        propose_update(english.pk, department_fields(english, budget=Decimal('0')), english.version)
        url = reverse('department_edit', args=[english.pk])

        conflict = client.post(url, department_post(english, version=1))
        refreshed_version = conflict.context['form']['version'].value()

        response = client.post(url, department_post(english, version=refreshed_version))

        assert response.status_code == 302
        english.refresh_from_db()
        assert english.budget == Decimal('350000')
        assert english.version == 3

    def test_stale_save_names_current_administrator(self, client, english, fakhouri):
        propose_update(english.pk, department_fields(english, administrator=fakhouri), english.version)

        response = client.post(reverse('department_edit', args=[english.pk]), department_post(english, version=1))

        assert response.context['form'].errors['administrator'] == ['Current value: Fakhouri, Fadi']

    def test_taken_administrator_is_a_validation_message(self, client, english, mathematics, abercrombie):
        response = client.post(
            reverse('department_edit', args=[mathematics.pk]),
            department_post(mathematics, administrator=abercrombie),
        )

        assert response.status_code == 200
        assert response.context['form'].non_field_errors() == [
            'Instructor Kim Abercrombie is already administrator of the English department.'
        ]
        mathematics.refresh_from_db()
        assert mathematics.administrator is None

    def test_save_after_delete_reports_gone(self, client, english):
        data = department_post(english)
        Department.objects.filter(pk=english.pk).delete()

        response = client.post(reverse('department_edit', args=[english.pk]), data)

        assert response.status_code == 200
        assert 'The department was deleted by another user.' in response.content.decode()

    def test_unreachable_store_is_retried_then_reported(self, client, english, settings):
        settings.STORE_RETRY_ATTEMPTS = 3

        with patch('app.departments.views.propose_update', side_effect=StoreUnavailable('down')) as mocked:
            response = client.post(reverse('department_edit', args=[english.pk]), department_post(english))

        assert mocked.call_count == 3
        assert response.status_code == 200
        assert 'Unable to save changes. Try again' in response.content.decode()

    def test_transient_store_failure_recovers(self, client, english, settings):
        settings.STORE_RETRY_ATTEMPTS = 2

        with patch(
            'app.departments.views.propose_update',
            side_effect=[StoreUnavailable('down'), Applied(version=2, department_id=english.pk)],
        ):
            response = client.post(reverse('department_edit', args=[english.pk]), department_post(english))

        assert response.status_code == 302


class TestDepartmentDelete:

    def test_get_carries_version(self, client, english):
        response = client.get(reverse('department_delete', args=[english.pk]))

        assert response.status_code == 200
        assert 'name="version" value="1"' in response.content.decode()
        assert response.context['error_message'] is None

    def test_delete_with_current_version(self, client, english):
        response = client.post(reverse('department_delete', args=[english.pk]), {'version': 1})

        assert response.status_code == 302
        assert response.url == reverse('department_index')
        assert not Department.objects.filter(pk=english.pk).exists()

    def test_stale_delete_shows_current_values(self, client, english):
        propose_update(english.pk, department_fields(english, budget=Decimal('0')), english.version)

        response = client.post(reverse('department_delete', args=[english.pk]), {'version': 1}, follow=True)

        assert response.redirect_chain[0][0] == reverse('department_delete', args=[english.pk]) + '?concurrency_error=1'
        content = response.content.decode()
        assert 'was modified by another user' in content
        assert '$0.00' in content
        assert 'name="version" value="2"' in content
        assert Department.objects.filter(pk=english.pk).exists()

    def test_delete_of_deleted_department(self, client, english):
        Department.objects.filter(pk=english.pk).delete()

        response = client.post(reverse('department_delete', args=[english.pk]), {'version': 1}, follow=True)

        assert response.status_code == 200
        assert response.redirect_chain[-1][0] == reverse('department_index')
        assert 'was deleted by another user' in response.content.decode()

    def test_garbage_version_is_a_conflict(self, client, english):
        response = client.post(reverse('department_delete', args=[english.pk]), {'version': 'abc'})

        assert response.status_code == 302
        assert 'concurrency_error=1' in response.url
        assert Department.objects.filter(pk=english.pk).exists()

    def test_get_missing_is_404(self, client, db):
        assert client.get(reverse('department_delete', args=[42])).status_code == 404

    def test_unreachable_store_renders_page_without_reading_the_store(self, client, english):
        with patch('app.departments.views.propose_delete', side_effect=StoreUnavailable('down')), \
                patch.object(Department.objects, 'select_related', side_effect=OperationalError('down')):
            response = client.post(reverse('department_delete', args=[english.pk]), {'version': 1})

        assert response.status_code == 200
        content = response.content.decode()
        assert 'Unable to save changes. Try again' in content
        assert 'name="version" value="1"' in content
        assert Department.objects.filter(pk=english.pk).exists()


def admin_post(department, loaded_version=None, **overrides):
    """Form data for the department admin change page."""
    data = department_post(department, **overrides)
    version = data.pop('version')
    data['loaded_version'] = version if loaded_version is None else loaded_version
    data['_save'] = 'Save'
    return data


class TestDepartmentAdmin:
    """Admin writes go through the same checks as the department pages."""

    def test_change_advances_version(self, admin_client, english):
        response = admin_client.post(
            reverse('admin:school_department_change', args=[english.pk]),
            admin_post(english, budget=Decimal('0')),
        )

        assert response.status_code == 302
        english.refresh_from_db()
        assert english.budget == Decimal('0')
        assert english.version == 2
        assert LogEntry.objects.count() == 1

    def test_change_page_carries_version(self, admin_client, english):
        response = admin_client.get(reverse('admin:school_department_change', args=[english.pk]))

        assert response.status_code == 200
        assert 'name="loaded_version" value="1"' in response.content.decode()

    def test_public_edit_after_admin_change_is_a_conflict(self, client, admin_client, english):
        admin_client.post(
            reverse('admin:school_department_change', args=[english.pk]),
            admin_post(english, budget=Decimal('0')),
        )

        response = client.post(reverse('department_edit', args=[english.pk]), department_post(english, version=1))

        assert response.status_code == 200
        assert response.context['form'].errors['budget'] == ['Current value: $0.00']
        english.refresh_from_db()
        assert english.budget == Decimal('0')

    def test_stale_admin_change_is_rejected(self, admin_client, english):
        propose_update(english.pk, department_fields(english, budget=Decimal('0')), english.version)

        response = admin_client.post(
            reverse('admin:school_department_change', args=[english.pk]),
            admin_post(english, loaded_version=1, budget=Decimal('500')),
        )

        assert response.status_code == 200
        assert 'changed by another user' in response.content.decode()
        english.refresh_from_db()
        assert english.budget == Decimal('0')
        assert english.version == 2

    def test_change_rejects_taken_administrator(self, admin_client, english, mathematics, abercrombie):
        response = admin_client.post(
            reverse('admin:school_department_change', args=[mathematics.pk]),
            admin_post(mathematics, administrator=abercrombie),
        )

        assert response.status_code == 200
        assert response.context['adminform'].form.errors['administrator'] == [
            'Instructor Kim Abercrombie is already administrator of the English department.'
        ]
        assert list(Department.objects.filter(administrator=abercrombie).values_list('name', flat=True)) == ['English']
        mathematics.refresh_from_db()
        assert mathematics.version == 1

    def test_add_goes_through_service(self, admin_client, fakhouri):
        response = admin_client.post(reverse('admin:school_department_add'), {
            'name': 'Economics',
            'budget': '100000',
            'start_date': '2007-09-01',
            'administrator': fakhouri.pk,
            'loaded_version': '',
            '_save': 'Save',
        })

        assert response.status_code == 302
        department = Department.objects.get(name='Economics')
        assert department.version == 1
        assert department.administrator == fakhouri

    def test_add_rejects_taken_administrator(self, admin_client, english, abercrombie):
        response = admin_client.post(reverse('admin:school_department_add'), {
            'name': 'Economics',
            'budget': '100000',
            'start_date': '2007-09-01',
            'administrator': abercrombie.pk,
            'loaded_version': '',
            '_save': 'Save',
        })

        assert response.status_code == 200
        assert 'administrator' in response.context['adminform'].form.errors
        assert not Department.objects.filter(name='Economics').exists()

    def test_conflict_after_form_checks_is_reported(self, admin_client, english):
        url = reverse('admin:school_department_change', args=[english.pk])

        with patch('app.school.admin.propose_update', return_value=VersionConflict(current={'version': 3})):
            response = admin_client.post(url, admin_post(english, budget=Decimal('0')))

        assert response.status_code == 302
        assert response.url == url
        assert [str(m) for m in get_messages(response.wsgi_request)] == [CONCURRENCY_EDIT_MESSAGE]
        assert not LogEntry.objects.exists()
        english.refresh_from_db()
        assert english.budget == Decimal('350000')

    def test_record_gone_after_form_checks_returns_to_list(self, admin_client, english):
        with patch('app.school.admin.propose_update', return_value=RecordGone()):
            response = admin_client.post(
                reverse('admin:school_department_change', args=[english.pk]),
                admin_post(english),
            )

        assert response.status_code == 302
        assert response.url == reverse('admin:school_department_changelist')
