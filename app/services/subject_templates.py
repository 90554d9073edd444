# /marksheet-backend/app/services/subject_templates.py

"""
Static subject catalogue used by the marksheet form: suggestions per faculty
and category, and the subjects a new form is pre-filled with.
"""

from typing import Dict, List, Optional

from ..models.student_model import Faculty, SubjectCategory

DEFAULT_TOTAL_MARKS = 100

COMPULSORY_SUBJECTS = [
    "English", "Hindi", "Urdu", "Maithili", "Sanskrit", "Prakriti",
    "Magahi", "Bhojpuri", "Arabic", "Persian", "Pali", "Bangla",
]

ELECTIVE_SUBJECTS_BY_FACULTY = {
    Faculty.ARTS: [
        "Music", "Home Science", "Philosophy", "History", "Political Science",
        "Geography", "Psychology", "Sociology", "Economics", "Mathematics",
    ],
    Faculty.SCIENCE: ["Physics", "Chemistry", "Biology", "Agriculture", "Mathematics"],
    Faculty.COMMERCE: ["Business Studies", "Entrepreneurship", "Economics", "Accountancy"],
}

CORE_ADDITIONAL_SUBJECTS = ["Yoga and Physical Education", "Computer Science", "Multimedia and Web Tech"]

DEFAULT_SUBJECTS_BY_FACULTY: Dict[Faculty, List[Dict[str, str]]] = {
    Faculty.SCIENCE: [
        {"subjectName": "English", "category": SubjectCategory.COMPULSORY.value},
        {"subjectName": "Hindi", "category": SubjectCategory.COMPULSORY.value},
        {"subjectName": "Physics", "category": SubjectCategory.ELECTIVE.value},
        {"subjectName": "Chemistry", "category": SubjectCategory.ELECTIVE.value},
        {"subjectName": "Biology", "category": SubjectCategory.ELECTIVE.value},
        {"subjectName": "Mathematics", "category": SubjectCategory.ADDITIONAL.value},
    ],
    Faculty.ARTS: [
        {"subjectName": "English", "category": SubjectCategory.COMPULSORY.value},
        {"subjectName": "Hindi", "category": SubjectCategory.COMPULSORY.value},
        {"subjectName": "Geography", "category": SubjectCategory.ELECTIVE.value},
        {"subjectName": "Political Science", "category": SubjectCategory.ELECTIVE.value},
        {"subjectName": "Economics", "category": SubjectCategory.ADDITIONAL.value},
    ],
    Faculty.COMMERCE: [
        {"subjectName": "English", "category": SubjectCategory.COMPULSORY.value},
        {"subjectName": "Hindi", "category": SubjectCategory.COMPULSORY.value},
        {"subjectName": "Economics", "category": SubjectCategory.ELECTIVE.value},
        {"subjectName": "Accountancy", "category": SubjectCategory.ELECTIVE.value},
        {"subjectName": "Business Studies", "category": SubjectCategory.ELECTIVE.value},
    ],
}


def _additional_subjects(faculty: Faculty) -> List[str]:
    """
    Any subject may be taken as an additional one: the core additional list,
    then the faculty's electives, then the compulsory languages, without repeats.
    """
    names: List[str] = []
    for name in CORE_ADDITIONAL_SUBJECTS + ELECTIVE_SUBJECTS_BY_FACULTY[faculty] + COMPULSORY_SUBJECTS:
        if name not in names:
            names.append(name)
    return names


def _subject_names(faculty: Faculty, category: SubjectCategory) -> List[str]:
    if category == SubjectCategory.COMPULSORY:
        return COMPULSORY_SUBJECTS
    if category == SubjectCategory.ELECTIVE:
        return ELECTIVE_SUBJECTS_BY_FACULTY[faculty]
    return _additional_subjects(faculty)


def get_subject_suggestions(faculty: Optional[Faculty], category: Optional[SubjectCategory]) -> List[Dict]:
    if faculty is None or category is None:
        return []
    return [
        {"subjectName": name, "category": category.value, "totalMarks": DEFAULT_TOTAL_MARKS}
        for name in _subject_names(faculty, category)
    ]


def find_subject_template(subject_name: str, faculty: Optional[Faculty], category: Optional[SubjectCategory]) -> Optional[Dict]:
    for suggestion in get_subject_suggestions(faculty, category):
        if suggestion["subjectName"] == subject_name:
            return suggestion
    return None


def get_default_subjects(faculty: Faculty) -> List[Dict]:
    """The subjects a new marksheet form starts with, filled in with their template marks."""
    defaults = []
    for entry in DEFAULT_SUBJECTS_BY_FACULTY[faculty]:
        category = SubjectCategory(entry["category"])
        template = find_subject_template(entry["subjectName"], faculty, category)
        total_marks = template["totalMarks"] if template else DEFAULT_TOTAL_MARKS
        defaults.append({**entry, "totalMarks": total_marks})
    return defaults
