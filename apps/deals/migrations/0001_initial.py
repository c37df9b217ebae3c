# Generated manually for the deal catalogue

import uuid
from decimal import Decimal
from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator, RegexValidator
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Vendor',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('business_name', models.CharField(max_length=200)),
                ('city', models.CharField(blank=True, max_length=100)),
                ('is_approved', models.BooleanField(default=False)),
                ('commission_enabled', models.BooleanField(default=False)),
                ('click_commission_rate', models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True, validators=[MinValueValidator(Decimal('0.00')), MaxValueValidator(Decimal('100.00'))])),
                ('conversion_commission_rate', models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True, validators=[MinValueValidator(Decimal('0.00')), MaxValueValidator(Decimal('100.00'))])),
                ('total_redemptions', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='vendor_profile', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'vendors',
                'ordering': ['business_name'],
            },
        ),
        migrations.CreateModel(
            name='Deal',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('kind', models.CharField(choices=[('in_store', 'In store'), ('online', 'Online')], default='in_store', max_length=20)),
                ('discount_percentage', models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(100)])),
                ('original_price', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True, validators=[MinValueValidator(Decimal('0.00'))])),
                ('discounted_price', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True, validators=[MinValueValidator(Decimal('0.00'))])),
                ('verification_code', models.CharField(blank=True, max_length=6, validators=[RegexValidator('^[A-Z0-9]{6}$', 'PIN must be 6 characters A-Z or 0-9.')])),
                ('affiliate_link', models.URLField(blank=True, max_length=500)),
                ('is_active', models.BooleanField(default=True)),
                ('is_approved', models.BooleanField(default=False)),
                ('max_redemptions', models.PositiveIntegerField(blank=True, null=True)),
                ('current_redemptions', models.PositiveIntegerField(default=0)),
                ('valid_until', models.DateTimeField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('vendor', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='deals', to='deals.vendor')),
            ],
            options={
                'db_table': 'deals',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['vendor', 'is_active'], name='deals_vendor_active_idx'),
                    models.Index(fields=['valid_until'], name='deals_valid_until_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('verification_code', ''), _negated=True), fields=('vendor', 'verification_code'), name='unique_vendor_verification_code'),
                ],
            },
        ),
    ]
