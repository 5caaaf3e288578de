import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

	initial = True

	dependencies = [
		('orders', '0001_initial'),
		('patients', '0001_initial'),
	]

	operations = [
		migrations.CreateModel(
			name='Appointment',
			fields=[
				('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
				('appointment_type', models.CharField(choices=[('Consultation', 'Consultation'), ('Sample Collection', 'Sample Collection')], default='Sample Collection', max_length=32)),
				('scheduled_time', models.DateTimeField(db_index=True)),
				('duration_minutes', models.PositiveIntegerField(default=15)),
				('end_time', models.DateTimeField(db_index=True, editable=False)),
				('status', models.CharField(choices=[('Scheduled', 'Scheduled'), ('CheckedIn', 'CheckedIn'), ('Completed', 'Completed'), ('NoShow', 'NoShow')], default='Scheduled', max_length=16)),
				('notes', models.TextField(blank=True, default='')),
				('created_at', models.DateTimeField(auto_now_add=True)),
				('updated_at', models.DateTimeField(auto_now=True)),
				('order', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='appointments', to='orders.order')),
				('patient', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='appointments', to='patients.patient')),
			],
			options={
				'ordering': ['scheduled_time', 'id'],
			},
		),
	]
