import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='File',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('type', models.CharField(choices=[('folder', 'Folder'), ('file', 'File'), ('image', 'Image')], max_length=16)),
                ('is_public', models.BooleanField(default=False)),
                ('local_path', models.CharField(blank=True, default='', help_text='Absolute path of the content, empty for folders', max_length=1024)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('parent', models.ForeignKey(blank=True, help_text='Containing folder, empty for the root', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='children', to='files.file')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='files', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'File',
                'verbose_name_plural': 'Files',
                'ordering': ['id'],
                'indexes': [models.Index(fields=['user', 'parent'], name='files_user_parent_idx')],
                'constraints': [models.CheckConstraint(condition=models.Q(models.Q(('local_path', ''), ('type', 'folder')), models.Q(models.Q(('type', 'folder'), _negated=True), models.Q(('local_path', ''), _negated=True)), _connector='OR'), name='files_local_path_matches_type')],
            },
        ),
    ]
