# Fichier: tuvung/db/base.py
# Importing every model registers its table on ``Base.metadata``.
from tuvung.db.base_class import Base  # noqa: F401
from tuvung.models.course_model import Course, Lecture  # noqa: F401
from tuvung.models.word_model import Word, WordMeaning  # noqa: F401
from tuvung.models.note_model import Note  # noqa: F401
