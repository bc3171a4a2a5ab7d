import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('batches', '0001_initial'),
        ('courses', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='QuizBatch',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('start_date', models.DateTimeField(blank=True, null=True)),
                ('end_date', models.DateTimeField(blank=True, null=True)),
                ('attempts', models.PositiveIntegerField(blank=True, null=True)),
                ('custom_instructions', models.TextField(blank=True, default='')),
                ('assigned_at', models.DateTimeField(auto_now_add=True)),
                ('assigned_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('batch', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='quiz_assignments', to='batches.batch')),
                ('quiz', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='batch_assignments', to='courses.quiz')),
            ],
            options={
                'verbose_name_plural': 'Quiz batches',
                'constraints': [models.UniqueConstraint(fields=('quiz', 'batch'), name='unique_quiz_batch')],
            },
        ),
    ]
