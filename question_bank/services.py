"""
Tag hierarchy and question bank.

Tags are stored one row per node. The API addresses a node by its category
and name (plus the parent's name when adding), the way the frontend's tag
document does, so a rename or delete applies to every node with that name in
the category.
"""
import csv
import io
import json
import logging

from django.core.paginator import EmptyPage, Paginator
from django.db import IntegrityError, transaction
from django.db.models import Q

from lms_backend.exceptions import ConflictError, NotFoundError, ValidationError

from . import tags as tag_rules
from .models import BankQuestion, Tag

logger = logging.getLogger(__name__)

# Request key naming the parent when adding a child tag
PARENT_KEYS = {
    tag_rules.SUBJECT: ("examType", "exam_type"),
    tag_rules.CHAPTER: ("subject",),
    tag_rules.TOPIC: ("chapter",),
}
TAG_FIELDS = ("exam_type", "subject", "chapter", "topic", "difficulty_level", "question_type", "source")
QUESTION_FIELDS = (
    "question_text", "option_a", "option_b", "option_c", "option_d", "correct_answer", "explanation",
    "image_url", "option_a_image_url", "option_b_image_url", "option_c_image_url", "option_d_image_url",
    "explanation_image_url",
)
REQUIRED_FIELDS = ("question_text", "option_a", "option_b", "option_c", "option_d", "correct_answer")
DEFAULT_PAGE_SIZE = 10


def _category(plural) -> str:
    try:
        return tag_rules.CATEGORY_BY_PLURAL[plural]
    except KeyError:
        raise ValidationError(f"Unknown tag category: {plural}")


# Tags -----------------------------------------------------------------------


def ensure_default_tags() -> None:
    if Tag.objects.filter(category__in=list(tag_rules.DEFAULT_TAGS)).exists():
        return
    Tag.objects.bulk_create([
        Tag(category=category, name=name)
        for category, names in tag_rules.DEFAULT_TAGS.items()
        for name in names
    ])
    logger.info("Created the default tag vocabularies")


def tag_tree() -> dict:
    ensure_default_tags()
    rows = Tag.objects.select_related("parent").order_by("id")
    tree = tag_rules.TagTree.from_rows(
        (tag.category, tag.name, tag.parent.name if tag.parent else None) for tag in rows
    )
    return tree.to_dict()


def add_tag(plural, data) -> list:
    """
    Add ``data["tag"]`` to a category. Child categories name their parent
    (``examType``, ``subject`` or ``chapter``); the tag is added under every
    parent node with that name. Returns the created rows.
    """
    category = _category(plural)
    name = (data.get("tag") or "").strip()
    if not name:
        raise ValidationError("Tag name is required")

    if category not in tag_rules.PARENT_CATEGORY:
        tag, created = Tag.objects.get_or_create(category=category, name=name, parent=None)
        return [tag] if created else []

    parent_name = next((data.get(key) for key in PARENT_KEYS[category] if data.get(key)), None)
    if not parent_name:
        raise ValidationError(f"A {category} tag needs a parent {tag_rules.PARENT_CATEGORY[category]}")
    parents = list(Tag.objects.filter(category=tag_rules.PARENT_CATEGORY[category], name=parent_name))
    if not parents:
        raise NotFoundError(f"{tag_rules.PARENT_CATEGORY[category]} '{parent_name}' not found")
    created_tags = []
    for parent in parents:
        tag, created = Tag.objects.get_or_create(category=category, name=name, parent=parent)
        if created:
            created_tags.append(tag)
    return created_tags


def rename_tag(plural, old_value, new_value) -> int:
    category = _category(plural)
    new_value = (new_value or "").strip()
    if not old_value or not new_value:
        raise ValidationError("oldValue and newValue are required")
    try:
        with transaction.atomic():
            updated = Tag.objects.filter(category=category, name=old_value).update(name=new_value)
    except IntegrityError as exc:
        raise ConflictError(f"Tag '{new_value}' already exists") from exc
    if not updated:
        raise NotFoundError("Tag not found")
    return updated


def delete_tag(plural, value) -> int:
    """Delete every node named ``value`` in the category with its subtree."""
    category = _category(plural)
    nodes = Tag.objects.filter(category=category, name=value)
    if not nodes.exists():
        raise NotFoundError("Tag not found")
    deleted, _ = nodes.delete()
    return deleted


def import_tags_csv(uploaded_file) -> int:
    """
    Load ``exam_type,subject,chapter,topic`` rows into the hierarchy.
    Returns the number of rows read.
    """
    if uploaded_file is None:
        raise ValidationError("No file uploaded")
    content = uploaded_file.read()
    if isinstance(content, bytes):
        content = content.decode("utf-8-sig")
    reader = csv.DictReader(io.StringIO(content))

    count = 0
    with transaction.atomic():
        for row in reader:
            parent = None
            for category in (tag_rules.EXAM_TYPE, tag_rules.SUBJECT, tag_rules.CHAPTER, tag_rules.TOPIC):
                name = (row.get(category) or "").strip()
                if not name:
                    break
                parent, _ = Tag.objects.get_or_create(category=category, name=name, parent=parent)
            count += 1
    logger.info("Imported %s tag rows", count)
    return count


# Questions ------------------------------------------------------------------


def _parse_filters(filters) -> dict:
    if not filters:
        return {}
    if isinstance(filters, str):
        try:
            filters = json.loads(filters)
        except ValueError:
            raise ValidationError("filters must be a JSON object")
    if not isinstance(filters, dict):
        raise ValidationError("filters must be a JSON object")
    unknown = set(filters) - set(TAG_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown filter: {', '.join(sorted(unknown))}")
    return {key: value for key, value in filters.items() if value}


def _positive_int(value, default, field) -> int:
    if value in (None, ""):
        return default
    try:
        value = int(value)
    except (TypeError, ValueError):
        raise ValidationError({field: "Must be a positive integer."})
    if value < 1:
        raise ValidationError({field: "Must be a positive integer."})
    return value


def search_questions(filters=None, search_query="", page=1, limit=DEFAULT_PAGE_SIZE) -> dict:
    queryset = BankQuestion.objects.filter(**_parse_filters(filters))
    if search_query:
        text_match = Q()
        for field in ("question_text", "option_a", "option_b", "option_c", "option_d", "explanation"):
            text_match |= Q(**{f"{field}__icontains": search_query})
        queryset = queryset.filter(text_match)

    page = _positive_int(page, 1, "page")
    limit = _positive_int(limit, DEFAULT_PAGE_SIZE, "limit")
    paginator = Paginator(queryset.order_by("-created_at"), limit)
    try:
        questions = list(paginator.page(page).object_list)
    except EmptyPage:
        questions = []
    return {
        "questions": questions,
        "pagination": {
            "currentPage": page,
            "totalPages": paginator.num_pages if paginator.count else 0,
            "totalQuestions": paginator.count,
            "questionsPerPage": limit,
        },
    }


def _tags_of(row) -> dict:
    tags = row.get("tags")
    if isinstance(tags, dict):
        return tags
    # Flat rows carry the tag columns next to the question fields
    return {field: row.get(field) for field in TAG_FIELDS if row.get(field)}


def _question_from_row(row, exam_types):
    """Return an unsaved BankQuestion, or None when the row is invalid."""
    if not isinstance(row, dict):
        return None
    external_id = row.get("id") or row.get("external_id")
    tags = _tags_of(row)
    if not external_id or not tags or any(not row.get(field) for field in REQUIRED_FIELDS):
        return None
    if tags.get("exam_type") not in exam_types or not tags.get("subject"):
        return None
    if tags.get("difficulty_level") not in BankQuestion.Difficulty.values:
        return None
    if tags.get("question_type") not in BankQuestion.QuestionType.values:
        return None

    question = BankQuestion(external_id=str(external_id))
    for field in QUESTION_FIELDS:
        if row.get(field) is not None:
            setattr(question, field, str(row[field]))
    for field in TAG_FIELDS:
        setattr(question, field, str(tags.get(field) or ""))
    return question


def import_questions(rows) -> int:
    """Insert the valid rows; invalid ones are skipped."""
    if not isinstance(rows, list):
        raise ValidationError("Expected a list of questions")
    exam_types = set(Tag.objects.filter(category=tag_rules.EXAM_TYPE).values_list("name", flat=True))
    questions = [question for question in (_question_from_row(row, exam_types) for row in rows) if question]
    if not questions:
        raise ValidationError("No valid questions to import")
    BankQuestion.objects.bulk_create(questions)
    skipped = len(rows) - len(questions)
    if skipped:
        logger.warning("Skipped %s invalid rows while importing questions", skipped)
    return len(questions)


def bulk_update_questions(questions) -> list:
    """
    Update questions addressed by their external ``id``. Only question and
    tag fields are written; entries without an id are ignored.
    """
    if not isinstance(questions, list) or not questions:
        raise ValidationError("No valid questions to update")
    updated = []
    with transaction.atomic():
        for entry in questions:
            if not isinstance(entry, dict) or not entry.get("id"):
                continue
            changes = {field: entry[field] for field in QUESTION_FIELDS + TAG_FIELDS if field in entry}
            changes.update({field: value for field, value in _tags_of(entry).items() if field in TAG_FIELDS})
            if "difficulty_level" in changes and changes["difficulty_level"] not in BankQuestion.Difficulty.values:
                raise ValidationError({"difficulty_level": "Must be Easy, Medium or Hard."})
            if "question_type" in changes and changes["question_type"] not in BankQuestion.QuestionType.values:
                raise ValidationError({"question_type": "Must be MCQ or MMCQ."})
            matches = BankQuestion.objects.filter(external_id=str(entry["id"]))
            for question in matches:
                for field, value in changes.items():
                    setattr(question, field, value)
                question.save()
                updated.append(question)
    return updated


def delete_question(question_id) -> None:
    try:
        question = BankQuestion.objects.get(pk=question_id)
    except (BankQuestion.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Question not found")
    question.delete()
