from django.db import migrations, models

import apps.entries.models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Entry',
            fields=[
                ('id', models.CharField(default=apps.entries.models.new_entry_id, editable=False, max_length=64, primary_key=True, serialize=False)),
                ('timestamp', models.DateTimeField(db_index=True)),
                ('username', models.TextField()),
                ('amount', models.CharField(db_index=True, max_length=64)),
                ('image', models.TextField(blank=True)),
                ('prize', models.FloatField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'entries',
                'ordering': ['-timestamp'],
                'verbose_name_plural': 'entries',
            },
        ),
    ]
