# Garante o registro de TODAS as models no mesmo registry
from student_records.db.base_class import Base  # noqa
from student_records.models.counter import Counter  # noqa
from student_records.models.student import Student  # noqa
