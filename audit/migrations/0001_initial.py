import django.core.serializers.json
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='AuditLogEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('actor_type', models.CharField(choices=[('admin', 'Admin'), ('player', 'Player'), ('system', 'System')], db_index=True, max_length=10)),
                ('actor_id', models.CharField(db_index=True, max_length=64)),
                ('actor_name', models.CharField(blank=True, max_length=150)),
                ('action', models.CharField(db_index=True, max_length=50)),
                ('action_label', models.CharField(max_length=100)),
                ('target_type', models.CharField(max_length=30)),
                ('target_id', models.CharField(blank=True, max_length=64, null=True)),
                ('target_label', models.CharField(blank=True, max_length=150, null=True)),
                ('changes', models.JSONField(blank=True, default=dict, encoder=django.core.serializers.json.DjangoJSONEncoder)),
                ('details', models.JSONField(blank=True, default=dict, encoder=django.core.serializers.json.DjangoJSONEncoder)),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'Audit Log Entry',
                'verbose_name_plural': 'Audit Log Entries',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['target_type', 'target_id'], name='audit_target_idx'),
                    models.Index(fields=['actor_type', 'actor_id'], name='audit_actor_idx'),
                ],
            },
        ),
    ]
