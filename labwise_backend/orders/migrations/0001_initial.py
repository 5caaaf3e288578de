import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('patients', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Order',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('order_id', models.CharField(db_index=True, max_length=32, unique=True)),
                ('icd10_code', models.CharField(max_length=16)),
                ('order_status', models.CharField(choices=[('Pending', 'Pending'), ('Partially Collected', 'Partially Collected'), ('In Progress', 'In Progress'), ('Partially Complete', 'Partially Complete'), ('Complete', 'Complete'), ('Cancelled', 'Cancelled')], default='Pending', max_length=32)),
                ('priority', models.CharField(choices=[('Routine', 'Routine'), ('STAT', 'STAT')], default='Routine', max_length=16)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_orders', to=settings.AUTH_USER_MODEL)),
                ('patient', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='orders', to='patients.patient')),
                ('physician', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='ordered_orders', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='OrderSample',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sample_type', models.CharField(max_length=64)),
                ('status', models.CharField(choices=[('AwaitingCollection', 'AwaitingCollection'), ('Collected', 'Collected'), ('InLab', 'InLab'), ('Testing', 'Testing'), ('AwaitingVerification', 'AwaitingVerification'), ('Verified', 'Verified'), ('Archived', 'Archived'), ('Rejected', 'Rejected')], default='AwaitingCollection', max_length=32)),
                ('collection_timestamp', models.DateTimeField(blank=True, null=True)),
                ('received_timestamp', models.DateTimeField(blank=True, db_index=True, null=True)),
                ('accession_number', models.CharField(blank=True, max_length=32, null=True, unique=True)),
                ('rejection_reason', models.TextField(blank=True, default='')),
                ('rejected_at', models.DateTimeField(blank=True, null=True)),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='samples', to='orders.order')),
                ('rejected_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='rejected_samples', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='OrderTest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('test_code', models.CharField(max_length=32)),
                ('name', models.CharField(max_length=200)),
                ('status', models.CharField(choices=[('Pending', 'Pending'), ('In Progress', 'In Progress'), ('AwaitingVerification', 'AwaitingVerification'), ('Verified', 'Verified'), ('Cancelled', 'Cancelled')], default='Pending', max_length=32)),
                ('result_value', models.CharField(blank=True, default='', max_length=64)),
                ('result_units', models.CharField(blank=True, default='', max_length=32)),
                ('reference_range', models.CharField(blank=True, default='N/A', max_length=64)),
                ('is_abnormal', models.BooleanField(default=False)),
                ('is_critical', models.BooleanField(default=False)),
                ('flags', models.JSONField(blank=True, default=list)),
                ('notes', models.TextField(blank=True, default='')),
                ('is_reflex', models.BooleanField(default=False)),
                ('verified_at', models.DateTimeField(blank=True, null=True)),
                ('sample', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='tests', to='orders.ordersample')),
                ('verified_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='verified_tests', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['id'],
            },
        ),
    ]
