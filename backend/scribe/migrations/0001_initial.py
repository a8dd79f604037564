from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('authentication', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Organization',
            fields=[
                ('organization_id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=255)),
                ('shared_credits', models.IntegerField(default=0)),
                ('used_credits', models.IntegerField(default=0)),
                ('low_credit_threshold', models.IntegerField(default=100)),
                ('free_credits', models.BooleanField(default=False)),
                ('free_credits_expiry', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='owned_organizations', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['owner'], name='org_owner_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='OrganizationMember',
            fields=[
                ('member_id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('email', models.EmailField(max_length=254)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('accepted', 'Accepted'), ('rejected', 'Rejected')], default='pending', max_length=20)),
                ('allocated_credits', models.IntegerField(default=0)),
                ('used_credits', models.IntegerField(default=0)),
                ('invited_at', models.DateTimeField(auto_now_add=True)),
                ('joined_at', models.DateTimeField(blank=True, null=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('organization', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='members', to='scribe.organization')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='memberships', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-invited_at'],
                'indexes': [
                    models.Index(fields=['organization', 'status'], name='org_member_org_status_idx'),
                    models.Index(fields=['email', 'status'], name='org_member_email_status_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('status__in', ['pending', 'accepted'])), fields=('organization', 'email'), name='unique_open_membership_per_email'),
                    models.UniqueConstraint(condition=models.Q(('status', 'accepted')), fields=('organization', 'user'), name='unique_accepted_membership_per_user'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Credits',
            fields=[
                ('credits_id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('total_credits', models.IntegerField(default=0)),
                ('remaining_credits', models.IntegerField(default=0)),
                ('used_credits', models.IntegerField(default=0)),
                ('expires_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='credits', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name_plural': 'credits',
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('remaining_credits__gte', 0)), name='credits_remaining_non_negative'),
                ],
            },
        ),
        migrations.CreateModel(
            name='CreditRequest',
            fields=[
                ('request_id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('message', models.TextField()),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('declined', 'Declined')], default='pending', max_length=20)),
                ('credits_approved', models.IntegerField(blank=True, null=True)),
                ('admin_note', models.TextField(blank=True, default='')),
                ('resolved_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='credit_requests', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['user', '-created_at'], name='credit_req_user_created_idx'),
                    models.Index(fields=['status'], name='credit_req_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='CreditTransaction',
            fields=[
                ('transaction_id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('reference_id', models.CharField(blank=True, default='', max_length=64)),
                ('amount', models.IntegerField()),
                ('type', models.CharField(choices=[('signup', 'Signup'), ('approval', 'Approval'), ('purchase', 'Purchase'), ('subscription', 'Subscription'), ('consumption', 'Consumption'), ('refund', 'Refund'), ('allocation', 'Allocation'), ('adjustment', 'Adjustment')], max_length=20)),
                ('source', models.CharField(choices=[('personal', 'Personal'), ('organization', 'Organization'), ('free', 'Free')], default='personal', max_length=20)),
                ('reason', models.TextField()),
                ('balance_after', models.IntegerField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('organization', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='credit_transactions', to='scribe.organization')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='credit_transactions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['user', '-created_at'], name='credit_tx_user_created_idx'),
                    models.Index(fields=['organization', '-created_at'], name='credit_tx_org_created_idx'),
                    models.Index(fields=['type'], name='credit_tx_type_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Payment',
            fields=[
                ('payment_id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=10)),
                ('credits_purchased', models.IntegerField(default=0)),
                ('payment_type', models.CharField(choices=[('credits', 'Credits'), ('subscription', 'Subscription')], default='credits', max_length=20)),
                ('plan', models.CharField(blank=True, default='', max_length=20)),
                ('payment_method', models.CharField(default='card', max_length=50)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('completed', 'Completed'), ('failed', 'Failed')], default='pending', max_length=20)),
                ('transaction_id', models.CharField(blank=True, max_length=255, null=True, unique=True)),
                ('raw_response', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='payments', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['user', '-created_at'], name='payment_user_created_idx'),
                    models.Index(fields=['status'], name='payment_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Project',
            fields=[
                ('project_id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True, default='')),
                ('status', models.CharField(choices=[('active', 'Active'), ('archived', 'Archived')], default='active', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('organization', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='projects', to='scribe.organization')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='projects', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Hearing',
            fields=[
                ('hearing_id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=255)),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('recording', 'Recording'), ('transcribed', 'Transcribed'), ('completed', 'Completed')], default='draft', max_length=20)),
                ('audio_duration', models.CharField(blank=True, default='', max_length=20)),
                ('plain_text', models.TextField(blank=True, default='')),
                ('case_brief', models.TextField(blank=True, default='')),
                ('chat_history', models.JSONField(blank=True, default=list)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('organization', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='hearings', to='scribe.organization')),
                ('project', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='hearings', to='scribe.project')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='hearings', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['user', '-created_at'], name='hearing_user_created_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Transcription',
            fields=[
                ('transcription_id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=255)),
                ('content', models.TextField(blank=True, default='')),
                ('audio_duration', models.FloatField(default=0)),
                ('speaker_count', models.IntegerField(default=0)),
                ('confidence_score', models.FloatField(default=0)),
                ('file_name', models.CharField(blank=True, default='', max_length=255)),
                ('file_size', models.BigIntegerField(default=0)),
                ('content_type', models.CharField(blank=True, default='', max_length=100)),
                ('local_path', models.CharField(blank=True, default='', max_length=500)),
                ('storage_path', models.CharField(blank=True, max_length=500, null=True)),
                ('case_number', models.CharField(blank=True, default='', max_length=100)),
                ('session_type', models.CharField(blank=True, default='', max_length=100)),
                ('status', models.CharField(choices=[('processing', 'Processing'), ('completed', 'Completed'), ('failed', 'Failed')], default='processing', max_length=20)),
                ('error_message', models.TextField(blank=True, null=True)),
                ('credits_charged', models.IntegerField(default=0)),
                ('charge_source', models.CharField(blank=True, default='', max_length=20)),
                ('charge_member_id', models.UUIDField(blank=True, null=True)),
                ('charge_organization_id', models.UUIDField(blank=True, null=True)),
                ('task_id', models.CharField(blank=True, max_length=255, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('hearing', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='transcriptions', to='scribe.hearing')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='transcriptions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['user', '-created_at'], name='transcription_user_idx'),
                    models.Index(fields=['status'], name='transcription_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='TranscriptionSegment',
            fields=[
                ('segment_id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('segment_order', models.IntegerField()),
                ('speaker_label', models.CharField(max_length=100)),
                ('text_content', models.TextField()),
                ('start_time', models.FloatField(default=0)),
                ('end_time', models.FloatField(default=0)),
                ('confidence_score', models.FloatField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('transcription', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='segments', to='scribe.transcription')),
            ],
            options={
                'ordering': ['segment_order'],
                'constraints': [
                    models.UniqueConstraint(fields=('transcription', 'segment_order'), name='unique_segment_order_per_transcription'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Message',
            fields=[
                ('message_id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('subject', models.CharField(max_length=255)),
                ('content', models.TextField()),
                ('from_admin', models.BooleanField(default=False)),
                ('read', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='messages', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['user', '-created_at'], name='message_user_created_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Notification',
            fields=[
                ('notification_id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('type', models.CharField(choices=[('payment', 'Payment'), ('credits', 'Credits'), ('organization', 'Organization'), ('transcription', 'Transcription'), ('system', 'System')], default='system', max_length=20)),
                ('title', models.CharField(max_length=255)),
                ('message', models.TextField()),
                ('read', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['user', 'read'], name='notification_user_read_idx'),
                ],
            },
        ),
    ]
