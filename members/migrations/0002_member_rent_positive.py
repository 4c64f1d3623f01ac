from decimal import Decimal

import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('members', '0001_initial'),
    ]

    operations = [
        migrations.AlterField(
            model_name='member',
            name='amount',
            field=models.DecimalField(decimal_places=2, help_text='Monthly rent', max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))]),
        ),
        migrations.AddConstraint(
            model_name='member',
            constraint=models.CheckConstraint(check=models.Q(('amount__gt', 0)), name='member_rent_positive'),
        ),
    ]
