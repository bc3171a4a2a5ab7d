import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import invitations.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('batches', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Invitation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('email', models.EmailField(max_length=254)),
                ('role', models.CharField(choices=[('Super Admin', 'Super Admin'), ('Admin', 'Admin'), ('Mentor', 'Mentor'), ('Student', 'Student')], default='Student', max_length=20)),
                ('token', models.CharField(default=invitations.models.generate_token, max_length=64, unique=True)),
                ('expires_at', models.DateTimeField(default=invitations.models.default_expiry)),
                ('status', models.CharField(choices=[('Pending', 'Pending'), ('Accepted', 'Accepted'), ('Expired', 'Expired')], default='Pending', max_length=10)),
                ('accepted_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('batches', models.ManyToManyField(blank=True, related_name='invitations', to='batches.batch')),
                ('invited_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='sent_invitations', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['email', 'status'], name='invitation_email_status_idx'),
                    models.Index(fields=['expires_at'], name='invitation_expires_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='InvitationSubscription',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('expires_on', models.DateTimeField(blank=True, null=True)),
                ('batch', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='+', to='batches.batch')),
                ('invitation', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='batch_subscriptions', to='invitations.invitation')),
            ],
            options={
                'constraints': [models.UniqueConstraint(fields=('invitation', 'batch'), name='unique_invitation_batch_subscription')],
            },
        ),
    ]
