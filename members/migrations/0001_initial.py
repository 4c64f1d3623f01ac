import django.core.validators
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='Member',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('full_name', models.CharField(max_length=255)),
                ('gender', models.CharField(choices=[('male', 'Male'), ('female', 'Female'), ('other', 'Other')], max_length=10)),
                ('age', models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(18)])),
                ('phone', models.CharField(max_length=10, unique=True, validators=[django.core.validators.RegexValidator('^\\d{10}$', 'Enter a valid 10-digit phone number.')])),
                ('email', models.EmailField(max_length=254, unique=True)),
                ('emergency_contact', models.CharField(help_text='Parent or guardian phone number', max_length=10, validators=[django.core.validators.RegexValidator('^\\d{10}$', 'Enter a valid 10-digit phone number.')])),
                ('address', models.TextField()),
                ('occupation', models.CharField(max_length=255)),
                ('amount', models.DecimalField(decimal_places=2, help_text='Monthly rent', max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ('room_number', models.CharField(max_length=20)),
                ('floor', models.CharField(max_length=5)),
                ('share_type', models.CharField(choices=[('single', 'Single'), ('double', 'Double'), ('triple', 'Triple'), ('shared', 'Shared')], default='single', max_length=10)),
                ('status', models.CharField(choices=[('active', 'Active'), ('inactive', 'Inactive')], default='active', max_length=10)),
                ('joining_date', models.DateField(default=django.utils.timezone.localdate)),
                ('profile_pic', models.CharField(blank=True, help_text='Stored asset reference', max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Member',
                'verbose_name_plural': 'Members',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['status', 'room_number'], name='member_status_room_idx'),
                    models.Index(fields=['floor'], name='member_floor_idx'),
                    models.Index(fields=['created_at'], name='member_created_idx'),
                ],
            },
        ),
    ]
