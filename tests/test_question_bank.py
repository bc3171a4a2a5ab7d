import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

from lms_backend.exceptions import ConflictError, NotFoundError, ValidationError
from question_bank import services
from question_bank.models import BankQuestion, Tag
from question_bank.tags import TagTree

pytestmark = pytest.mark.django_db


@pytest.fixture
def hierarchy():
    services.add_tag("exam_types", {"tag": "JEE"})
    services.add_tag("subjects", {"tag": "Physics", "examType": "JEE"})
    services.add_tag("chapters", {"tag": "Optics", "subject": "Physics"})
    services.add_tag("topics", {"tag": "Refraction", "chapter": "Optics"})


def row(external_id="Q1", **overrides):
    data = {
        "id": external_id,
        "question_text": "What bends light?",
        "option_a": "Lens",
        "option_b": "Mirror",
        "option_c": "Prism",
        "option_d": "Glass",
        "correct_answer": "A",
        "tags": {"exam_type": "JEE", "subject": "Physics", "difficulty_level": "Easy", "question_type": "MCQ"},
    }
    data.update(overrides)
    return data


def test_tag_tree_starts_with_the_default_vocabularies():
    document = services.tag_tree()

    assert document["difficulty_levels"] == ["Easy", "Medium", "Hard"]
    assert document["question_types"] == ["MCQ", "Numeric", "MMCQ"]
    assert document["exam_types"] == []
    assert document["subjects"] == {}


def test_tag_tree_nests_children_under_parents(hierarchy):
    document = services.tag_tree()

    assert document["exam_types"] == ["JEE"]
    assert document["subjects"] == {"JEE": ["Physics"]}
    assert document["chapters"] == {"Physics": ["Optics"]}
    assert document["topics"] == {"Optics": ["Refraction"]}


def test_child_tags_need_an_existing_parent():
    with pytest.raises(ValidationError):
        services.add_tag("subjects", {"tag": "Physics"})
    with pytest.raises(NotFoundError):
        services.add_tag("subjects", {"tag": "Physics", "examType": "NEET"})
    with pytest.raises(ValidationError):
        services.add_tag("planets", {"tag": "Mars"})


def test_adding_an_existing_tag_creates_nothing(hierarchy):
    assert services.add_tag("exam_types", {"tag": "JEE"}) == []
    assert Tag.objects.filter(category="exam_type").count() == 1


def test_rename_keeps_children(hierarchy):
    services.rename_tag("subjects", "Physics", "Applied Physics")

    document = services.tag_tree()
    assert document["subjects"] == {"JEE": ["Applied Physics"]}
    assert document["chapters"] == {"Applied Physics": ["Optics"]}


def test_rename_errors(hierarchy):
    services.add_tag("exam_types", {"tag": "NEET"})
    with pytest.raises(ConflictError):
        services.rename_tag("exam_types", "NEET", "JEE")
    with pytest.raises(NotFoundError):
        services.rename_tag("exam_types", "GATE", "CAT")


def test_delete_removes_the_subtree(hierarchy):
    services.delete_tag("subjects", "Physics")

    assert not Tag.objects.filter(category__in=["subject", "chapter", "topic"]).exists()
    assert services.tag_tree()["exam_types"] == ["JEE"]
    with pytest.raises(NotFoundError):
        services.delete_tag("subjects", "Physics")


def test_tag_csv_upload_builds_the_hierarchy():
    upload = SimpleUploadedFile(
        "tags.csv",
        b"exam_type,subject,chapter,topic\nJEE,Physics,Optics,Lenses\nJEE,Chemistry,,\n",
        content_type="text/csv",
    )

    assert services.import_tags_csv(upload) == 2
    document = services.tag_tree()
    assert document["subjects"] == {"JEE": ["Physics", "Chemistry"]}
    assert document["topics"] == {"Optics": ["Lenses"]}


def test_import_skips_invalid_rows(hierarchy):
    rows = [
        row("Q1"),
        row("Q2", tags={"exam_type": "GATE", "subject": "Physics", "difficulty_level": "Easy", "question_type": "MCQ"}),
        row("Q3", tags={"exam_type": "JEE", "subject": "Physics", "difficulty_level": "Brutal", "question_type": "MCQ"}),
        row("Q4", option_d=""),
        row(None),
        "not a row",
    ]

    assert services.import_questions(rows) == 1
    assert list(BankQuestion.objects.values_list("external_id", flat=True)) == ["Q1"]


def test_import_accepts_flat_tag_columns(hierarchy):
    flat = row("Q9", tags=None, exam_type="JEE", subject="Physics", difficulty_level="Hard", question_type="MMCQ")
    assert services.import_questions([flat]) == 1
    assert BankQuestion.objects.get().question_type == "MMCQ"


def test_import_without_valid_rows_fails(hierarchy):
    with pytest.raises(ValidationError, match="No valid questions"):
        services.import_questions([row(None)])


def test_search_filters_and_paginates(hierarchy):
    services.import_questions([row(f"Q{n}") for n in range(1, 4)] + [row("Q4", question_text="Speed of sound?")])

    result = services.search_questions({"subject": "Physics"}, "", page=1, limit=3)
    assert result["pagination"] == {"currentPage": 1, "totalPages": 2, "totalQuestions": 4, "questionsPerPage": 3}

    result = services.search_questions('{"exam_type": "JEE"}', "sound")
    assert [question.external_id for question in result["questions"]] == ["Q4"]

    with pytest.raises(ValidationError):
        services.search_questions({"colour": "red"})


def test_bulk_update_by_external_id(hierarchy):
    services.import_questions([row("Q1")])

    updated = services.bulk_update_questions([{"id": "Q1", "correct_answer": "C", "tags": {"difficulty_level": "Hard"}}])

    assert len(updated) == 1
    question = BankQuestion.objects.get()
    assert (question.correct_answer, question.difficulty_level) == ("C", "Hard")
    with pytest.raises(ValidationError):
        services.bulk_update_questions([{"id": "Q1", "difficulty_level": "Brutal"}])


def test_tree_document_shape():
    tree = TagTree.from_rows([
        ("exam_type", "JEE", None),
        ("subject", "Physics", "JEE"),
        ("subject", "Physics", "JEE"),
        ("chapter", "Optics", "Physics"),
        ("source", "NCERT", None),
    ])

    document = tree.to_dict()
    assert document["subjects"] == {"JEE": ["Physics"]}
    assert document["chapters"] == {"Physics": ["Optics"]}
    assert document["sources"] == ["NCERT"]
    assert document["topics"] == {}
    with pytest.raises(ValueError):
        tree.add("topic", "Lenses")
    with pytest.raises(KeyError):
        tree.add("planet", "Mars")
