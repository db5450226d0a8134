# Generated manually for school app

from django.db import migrations, models
import django.core.validators
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Student',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('last_name', models.CharField(max_length=50)),
                ('first_mid_name', models.CharField(db_column='first_name', error_messages={'max_length': 'First name cannot be longer than 50 characters.'}, max_length=50, verbose_name='first name')),
                ('enrollment_date', models.DateField()),
            ],
            options={'ordering': ['last_name', 'first_mid_name']},
        ),
        migrations.CreateModel(
            name='Instructor',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('last_name', models.CharField(max_length=50)),
                ('first_mid_name', models.CharField(db_column='first_name', error_messages={'max_length': 'First name cannot be longer than 50 characters.'}, max_length=50, verbose_name='first name')),
                ('hire_date', models.DateField()),
            ],
            options={'ordering': ['last_name', 'first_mid_name']},
        ),
        migrations.CreateModel(
            name='OfficeAssignment',
            fields=[
                ('instructor', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, primary_key=True, related_name='office_assignment', serialize=False, to='school.instructor')),
                ('location', models.CharField(max_length=50, verbose_name='office location')),
            ],
        ),
        migrations.CreateModel(
            name='Department',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=50, validators=[django.core.validators.MinLengthValidator(3)])),
                ('budget', models.DecimalField(decimal_places=4, max_digits=19)),
                ('start_date', models.DateField()),
                ('version', models.PositiveIntegerField(default=1, editable=False)),
                ('administrator', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='administered_departments', to='school.instructor')),
            ],
            options={'ordering': ['name']},
        ),
        migrations.CreateModel(
            name='Course',
            fields=[
                ('course_id', models.IntegerField(primary_key=True, serialize=False, verbose_name='number')),
                ('title', models.CharField(max_length=50, validators=[django.core.validators.MinLengthValidator(3)])),
                ('credits', models.IntegerField(validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(5)])),
                ('department', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='courses', to='school.department')),
            ],
            options={'ordering': ['course_id']},
        ),
        migrations.AddField(
            model_name='instructor',
            name='courses',
            field=models.ManyToManyField(blank=True, related_name='instructors', to='school.course'),
        ),
        migrations.CreateModel(
            name='Enrollment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('grade', models.CharField(blank=True, choices=[('A', 'A'), ('B', 'B'), ('C', 'C'), ('D', 'D'), ('F', 'F')], max_length=1, null=True)),
                ('course', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='enrollments', to='school.course')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='enrollments', to='school.student')),
            ],
            options={'ordering': ['course', 'student']},
        ),
    ]
