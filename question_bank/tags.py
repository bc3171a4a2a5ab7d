"""
In-memory view of the tag hierarchy.

Nodes are addressed by (category, parent name); children keep insertion
order. ``to_dict`` produces the document the frontend consumes:

    {
        "exam_types": [...],
        "subjects": {exam_type: [...]},
        "chapters": {subject: [...]},
        "topics": {chapter: [...]},
        "difficulty_levels": [...],
        "question_types": [...],
        "sources": [...],
    }
"""
from collections import OrderedDict

EXAM_TYPE = "exam_type"
SUBJECT = "subject"
CHAPTER = "chapter"
TOPIC = "topic"
DIFFICULTY_LEVEL = "difficulty_level"
QUESTION_TYPE = "question_type"
SOURCE = "source"

PARENT_CATEGORY = {SUBJECT: EXAM_TYPE, CHAPTER: SUBJECT, TOPIC: CHAPTER}
ROOT_CATEGORIES = (EXAM_TYPE, DIFFICULTY_LEVEL, QUESTION_TYPE, SOURCE)
CATEGORIES = ROOT_CATEGORIES + tuple(PARENT_CATEGORY)

DEFAULT_TAGS = {
    DIFFICULTY_LEVEL: ["Easy", "Medium", "Hard"],
    QUESTION_TYPE: ["MCQ", "Numeric", "MMCQ"],
}

# URL/document names for each category
PLURAL_NAMES = {
    EXAM_TYPE: "exam_types",
    SUBJECT: "subjects",
    CHAPTER: "chapters",
    TOPIC: "topics",
    DIFFICULTY_LEVEL: "difficulty_levels",
    QUESTION_TYPE: "question_types",
    SOURCE: "sources",
}
CATEGORY_BY_PLURAL = {plural: category for category, plural in PLURAL_NAMES.items()}


class TagTree:
    def __init__(self):
        self._children = {category: OrderedDict() for category in CATEGORIES}

    @classmethod
    def from_rows(cls, rows):
        """Build from (category, name, parent_name) triples."""
        tree = cls()
        for category, name, parent_name in rows:
            tree.add(category, name, parent_name)
        return tree

    def _check(self, category, parent):
        if category not in self._children:
            raise KeyError(f"Unknown tag category: {category}")
        if category in PARENT_CATEGORY and not parent:
            raise ValueError(f"A {category} tag needs a parent {PARENT_CATEGORY[category]}")
        if category not in PARENT_CATEGORY and parent:
            raise ValueError(f"{category} tags have no parent")

    def add(self, category, name, parent=None) -> bool:
        self._check(category, parent)
        siblings = self._children[category].setdefault(parent, [])
        if name in siblings:
            return False
        siblings.append(name)
        return True

    def to_dict(self) -> dict:
        document = {}
        for category in CATEGORIES:
            nodes = self._children[category]
            if category in PARENT_CATEGORY:
                document[PLURAL_NAMES[category]] = {parent: list(names) for parent, names in nodes.items() if names}
            else:
                document[PLURAL_NAMES[category]] = list(nodes.get(None, []))
        return document
