# Generated manually for approvals app

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('accounts', '0001_initial'),
        ('ledger', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='ApprovalRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('old_amount', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('new_amount', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')], default='pending', max_length=20)),
                ('dismissed_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('approver', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='approval_requests', to='accounts.profile')),
                ('editor', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='proposed_edits', to='accounts.profile')),
                ('rejected_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='vetoed_edits', to='accounts.profile')),
                ('session', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='approval_requests', to='ledger.session')),
            ],
            options={
                'db_table': 'approval_requests',
                'ordering': ['created_at', 'id'],
                'indexes': [
                    models.Index(fields=['session', 'status'], name='approvals_session_idx'),
                    models.Index(fields=['approver', 'status'], name='approvals_approver_idx'),
                    models.Index(fields=['editor', 'status'], name='approvals_editor_idx'),
                ],
            },
        ),
    ]
