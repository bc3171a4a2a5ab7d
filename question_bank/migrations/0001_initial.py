import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Tag',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('category', models.CharField(choices=[('exam_type', 'Exam type'), ('subject', 'Subject'), ('chapter', 'Chapter'), ('topic', 'Topic'), ('difficulty_level', 'Difficulty level'), ('question_type', 'Question type'), ('source', 'Source')], max_length=20)),
                ('name', models.CharField(max_length=150)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('parent', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='children', to='question_bank.tag')),
            ],
            options={
                'ordering': ['category', 'id'],
                'constraints': [
                    models.UniqueConstraint(fields=('category', 'name', 'parent'), name='unique_tag_per_parent'),
                    models.UniqueConstraint(condition=models.Q(('parent__isnull', True)), fields=('category', 'name'), name='unique_root_tag'),
                ],
            },
        ),
        migrations.CreateModel(
            name='BankQuestion',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('external_id', models.CharField(max_length=100)),
                ('question_text', models.TextField()),
                ('option_a', models.TextField()),
                ('option_b', models.TextField()),
                ('option_c', models.TextField()),
                ('option_d', models.TextField()),
                ('correct_answer', models.CharField(max_length=50)),
                ('explanation', models.TextField(blank=True, default='')),
                ('image_url', models.CharField(blank=True, default='', max_length=500)),
                ('option_a_image_url', models.CharField(blank=True, default='', max_length=500)),
                ('option_b_image_url', models.CharField(blank=True, default='', max_length=500)),
                ('option_c_image_url', models.CharField(blank=True, default='', max_length=500)),
                ('option_d_image_url', models.CharField(blank=True, default='', max_length=500)),
                ('explanation_image_url', models.CharField(blank=True, default='', max_length=500)),
                ('exam_type', models.CharField(max_length=150)),
                ('subject', models.CharField(max_length=150)),
                ('chapter', models.CharField(blank=True, default='', max_length=150)),
                ('topic', models.CharField(blank=True, default='', max_length=150)),
                ('difficulty_level', models.CharField(choices=[('Easy', 'Easy'), ('Medium', 'Medium'), ('Hard', 'Hard')], max_length=10)),
                ('question_type', models.CharField(choices=[('MCQ', 'Single correct'), ('MMCQ', 'Multiple correct')], max_length=10)),
                ('source', models.CharField(blank=True, default='', max_length=150)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['subject', 'chapter'], name='bankq_subject_chapter_idx'),
                    models.Index(fields=['exam_type', 'difficulty_level'], name='bankq_exam_difficulty_idx'),
                ],
            },
        ),
    ]
