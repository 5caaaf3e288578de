from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='TestCatalogItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('test_code', models.CharField(db_index=True, max_length=32, unique=True)),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True, default='')),
                ('tube_type', models.CharField(max_length=64)),
                ('min_volume', models.DecimalField(blank=True, decimal_places=2, max_digits=8, null=True)),
                ('volume_units', models.CharField(blank=True, default='mL', max_length=16)),
                ('special_handling', models.CharField(blank=True, default='', max_length=255)),
                ('turnaround_value', models.PositiveIntegerField(default=24)),
                ('turnaround_units', models.CharField(choices=[('hours', 'hours'), ('days', 'days')], default='hours', max_length=8)),
                ('price', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('is_panel', models.BooleanField(default=False)),
                ('panel_components', models.JSONField(blank=True, default=list)),
                ('reference_ranges', models.JSONField(blank=True, default=list)),
                ('reflex_rules', models.JSONField(blank=True, default=list)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Test catalog item',
                'verbose_name_plural': 'Test catalog',
                'ordering': ['name', 'id'],
            },
        ),
    ]
