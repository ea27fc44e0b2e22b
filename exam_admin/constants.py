# Subject names as stored in questions.subject and used as keys of the exam JSON columns,
# paired with the prefix of the exam's per-subject PDF URL column.
SUBJECT_COLUMNS = [
    ("语文", "chinese"),
    ("数学", "math"),
    ("英语", "english"),
    ("物理", "physics"),
    ("化学", "chemistry"),
    ("生物", "biology"),
    ("政治", "politics"),
    ("历史", "history"),
    ("地理", "geography"),
    ("技术", "technology"),
    ("日语", "japanese"),
]
SUBJECTS = [name for name, _ in SUBJECT_COLUMNS]
JAPANESE = "日语"
OTHER = "其他"

VOCABULARY_LEVELS = ["N1", "N2", "N3", "N4", "N5", OTHER]
DIFFICULTY_LEVELS = ["容易", "中等", "困难", "极难"]
CHOICE_QUESTION_TYPES = {"单选题", "多选题"}
DEFAULT_EXAM_TYPE = "联考"

ORGANIZATION_STATUSES = {"active", "inactive", "suspended"}
EXAM_STATUSES = {"draft", "published", "archived", "cancelled"}
QUESTION_STATUSES = {"draft", "published", "archived", "reviewed"}
PUBLISHED = "published"

# keyword -> suggestions shown when a question search finds fewer than 5 hits
SEARCH_SUGGESTIONS = {
    "函数": ["二次函数", "三角函数", "指数函数"],
    "语法": ["日语语法", "英语语法", "语法题"],
    "物理": ["力学", "电学", "光学"],
}
SUGGESTION_THRESHOLD = 5
