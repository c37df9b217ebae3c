# Generated manually for claims, POS sessions and transactions

import uuid
from decimal import Decimal
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('deals', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Claim',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('claim_code', models.CharField(editable=False, max_length=16, unique=True)),
                ('issued_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('expires_at', models.DateTimeField()),
                ('status', models.CharField(choices=[('claimed', 'Claimed'), ('verified', 'Verified'), ('used', 'Used'), ('expired', 'Expired')], default='claimed', max_length=20)),
                ('verified_at', models.DateTimeField(blank=True, null=True)),
                ('verification_method', models.CharField(blank=True, choices=[('claim_code', 'Claim code'), ('qr', 'QR code'), ('pin', 'Deal PIN')], max_length=20)),
                ('used_at', models.DateTimeField(blank=True, null=True)),
                ('bill_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('actual_savings', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='claims', to=settings.AUTH_USER_MODEL)),
                ('deal', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='claims', to='deals.deal')),
                ('verified_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='verified_claims', to='deals.vendor')),
            ],
            options={
                'db_table': 'claims',
                'ordering': ['-issued_at'],
                'indexes': [
                    models.Index(fields=['deal', 'status'], name='claims_deal_status_idx'),
                    models.Index(fields=['customer', '-issued_at'], name='claims_customer_issued_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='PosSession',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('terminal_id', models.CharField(max_length=64)),
                ('session_token', models.CharField(editable=False, max_length=64, unique=True)),
                ('is_active', models.BooleanField(default=True)),
                ('started_at', models.DateTimeField(auto_now_add=True)),
                ('ended_at', models.DateTimeField(blank=True, null=True)),
                ('total_transactions', models.PositiveIntegerField(default=0)),
                ('total_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('total_savings', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('vendor', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='pos_sessions', to='deals.vendor')),
            ],
            options={
                'db_table': 'pos_sessions',
                'ordering': ['-started_at'],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('is_active', True)), fields=('vendor', 'terminal_id'), name='unique_active_session_per_terminal'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Transaction',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('bill_amount', models.DecimalField(decimal_places=2, max_digits=10, validators=[MinValueValidator(Decimal('0.01'))])),
                ('savings_amount', models.DecimalField(decimal_places=2, max_digits=10)),
                ('payment_method', models.CharField(choices=[('cash', 'Cash'), ('card', 'Card'), ('upi', 'UPI'), ('wallet', 'Wallet')], max_length=20)),
                ('receipt_number', models.CharField(editable=False, max_length=32, unique=True)),
                ('notes', models.TextField(blank=True)),
                ('processed_at', models.DateTimeField(auto_now_add=True)),
                ('claim', models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name='transaction', to='claims.claim')),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='transactions', to=settings.AUTH_USER_MODEL)),
                ('deal', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='transactions', to='deals.deal')),
                ('session', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='transactions', to='claims.possession')),
                ('vendor', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='transactions', to='deals.vendor')),
            ],
            options={
                'db_table': 'pos_transactions',
                'ordering': ['-processed_at'],
                'indexes': [
                    models.Index(fields=['vendor', '-processed_at'], name='pos_tx_vendor_processed_idx'),
                ],
            },
        ),
    ]
