import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Organisation',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200, verbose_name='Name')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Created')),
            ],
            options={
                'verbose_name': 'Organisation',
                'verbose_name_plural': 'Organisations',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='OrganisationMember',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('role', models.CharField(blank=True, default='viewer', max_length=60)),
                ('organisation', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='members', to='fleet_reports.organisation')),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='organisation_membership', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Organisation member',
                'verbose_name_plural': 'Organisation members',
            },
        ),
        migrations.CreateModel(
            name='Asset',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('asset_number', models.CharField(max_length=50)),
                ('make', models.CharField(blank=True, max_length=100)),
                ('model', models.CharField(blank=True, max_length=100)),
                ('year', models.IntegerField(blank=True, null=True)),
                ('license_plate', models.CharField(blank=True, max_length=20)),
                ('status', models.CharField(default='active', max_length=30)),
                ('mileage', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('operational_hours', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('vin', models.CharField(blank=True, max_length=17)),
                ('category_id', models.UUIDField(blank=True, null=True)),
                ('is_archived', models.BooleanField(default=False)),
                ('organisation', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='fleet_reports_asset_set', to='fleet_reports.organisation')),
            ],
            options={
                'verbose_name': 'Asset',
                'verbose_name_plural': 'Assets',
            },
        ),
        migrations.CreateModel(
            name='WorkOrder',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('work_order_number', models.CharField(max_length=50)),
                ('title', models.CharField(max_length=200)),
                ('status', models.CharField(default='open', max_length=30)),
                ('priority', models.CharField(default='medium', max_length=20)),
                ('assigned_to_id', models.UUIDField(blank=True, null=True)),
                ('due_date', models.DateTimeField(blank=True, null=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('labor_cost', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('parts_cost', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('total_cost', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('estimated_duration', models.IntegerField(blank=True, null=True)),
                ('actual_duration', models.IntegerField(blank=True, null=True)),
                ('asset', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='work_orders', to='fleet_reports.asset')),
                ('organisation', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='fleet_reports_workorder_set', to='fleet_reports.organisation')),
            ],
            options={
                'verbose_name': 'Work order',
                'verbose_name_plural': 'Work orders',
            },
        ),
        migrations.CreateModel(
            name='MaintenanceSchedule',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(max_length=200)),
                ('schedule_type', models.CharField(default='time_based', max_length=30)),
                ('category_id', models.UUIDField(blank=True, null=True)),
                ('interval_type', models.CharField(blank=True, max_length=30)),
                ('interval_value', models.IntegerField(blank=True, null=True)),
                ('interval_mileage', models.IntegerField(blank=True, null=True)),
                ('interval_hours', models.IntegerField(blank=True, null=True)),
                ('next_due_date', models.DateTimeField(blank=True, null=True)),
                ('last_generated_at', models.DateTimeField(blank=True, null=True)),
                ('is_active', models.BooleanField(default=True)),
                ('asset', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='maintenance_schedules', to='fleet_reports.asset')),
                ('organisation', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='fleet_reports_maintenanceschedule_set', to='fleet_reports.organisation')),
            ],
            options={
                'verbose_name': 'Maintenance schedule',
                'verbose_name_plural': 'Maintenance schedules',
            },
        ),
        migrations.CreateModel(
            name='FuelTransaction',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('quantity', models.DecimalField(decimal_places=3, max_digits=12)),
                ('unit_cost', models.DecimalField(blank=True, decimal_places=4, max_digits=12, null=True)),
                ('total_cost', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('fuel_type', models.CharField(default='diesel', max_length=30)),
                ('odometer', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('engine_hours', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('vendor', models.CharField(blank=True, max_length=200)),
                ('transaction_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('has_discrepancy', models.BooleanField(default=False)),
                ('source', models.CharField(default='manual', max_length=30)),
                ('asset', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='fuel_transactions', to='fleet_reports.asset')),
                ('organisation', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='fleet_reports_fueltransaction_set', to='fleet_reports.organisation')),
            ],
            options={
                'verbose_name': 'Fuel transaction',
                'verbose_name_plural': 'Fuel transactions',
            },
        ),
        migrations.CreateModel(
            name='Inspection',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('template_id', models.UUIDField(blank=True, null=True)),
                ('operator_id', models.UUIDField(blank=True, null=True)),
                ('status', models.CharField(default='in_progress', max_length=30)),
                ('initiation_method', models.CharField(default='manual', max_length=30)),
                ('overall_result', models.CharField(blank=True, max_length=30)),
                ('started_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('sync_status', models.CharField(default='synced', max_length=30)),
                ('asset', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='inspections', to='fleet_reports.asset')),
                ('organisation', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='fleet_reports_inspection_set', to='fleet_reports.organisation')),
            ],
            options={
                'verbose_name': 'Inspection',
                'verbose_name_plural': 'Inspections',
            },
        ),
        migrations.CreateModel(
            name='CustomReport',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200, verbose_name='Name')),
                ('description', models.TextField(blank=True, verbose_name='Description')),
                ('data_source', models.CharField(choices=[('assets', 'Assets'), ('work_orders', 'Work orders'), ('maintenance_schedules', 'Maintenance schedules'), ('fuel_transactions', 'Fuel transactions'), ('inspections', 'Inspections')], max_length=40, verbose_name='Data source')),
                ('definition', models.JSONField(default=dict, help_text='Columns, filters, date range, grouping, aggregations and ordering.', verbose_name='Definition')),
                ('is_shared', models.BooleanField(default=False, verbose_name='Shared')),
                ('is_archived', models.BooleanField(default=False, verbose_name='Archived')),
                ('last_run_at', models.DateTimeField(blank=True, null=True, verbose_name='Last run')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated')),
                ('organisation', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='custom_reports', to='fleet_reports.organisation', verbose_name='Organisation')),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='custom_reports', to=settings.AUTH_USER_MODEL, verbose_name='Owner')),
            ],
            options={
                'verbose_name': 'Custom report',
                'verbose_name_plural': 'Custom reports',
                'ordering': ['-updated_at'],
                'indexes': [
                    models.Index(fields=['organisation'], name='custom_report_org_idx'),
                    models.Index(fields=['owner'], name='custom_report_owner_idx'),
                    models.Index(fields=['data_source'], name='custom_report_source_idx'),
                    models.Index(fields=['is_shared'], name='custom_report_shared_idx'),
                    models.Index(fields=['is_archived'], name='custom_report_archived_idx'),
                ],
            },
        ),
    ]
