# scripts/seed.py
from __future__ import annotations

import os
import random

from student_records.core.errors import Duplicate
from student_records.core.logging import configure_logging, get_logger
from student_records.db import database, student_repo
from student_records.models.student import DISTRICTS
from student_records.services.student_code import next_code
from student_records.services.validation import validate_create

SEED_COUNT = int(os.getenv("SEED_COUNT", "25"))
SEED_RANDOM = int(os.getenv("SEED_RANDOM", "42"))

FIRST_NAMES = ["Avery", "Jordan", "Riley", "Morgan", "Casey", "Quinn", "Harper"]
MIDDLE_NAMES = ["", "Lee", "Ray", "", "Jo"]
LAST_NAMES = ["Johnson", "Smith", "Brown", "Garcia", "Miller", "Davis", "Lopez"]
CITIES = ["Springfield", "Riverside", "Fairview", "Greenville", "Kingston"]
STREETS = ["Rose St", "Oak Ave", "Maple Rd", "Hill Lane", "Park Blvd"]


def _fake_payload(rng: random.Random, i: int) -> dict:
    first = rng.choice(FIRST_NAMES)
    last = rng.choice(LAST_NAMES)
    year = rng.randint(2005, 2016)
    return {
        "name": {"first": first, "middle": rng.choice(MIDDLE_NAMES), "last": last},
        "birthDate": f"{year}-{rng.randint(1, 12):02d}-{rng.randint(1, 28):02d}",
        "address": {
            "line1": f"{rng.randint(1, 999)} {rng.choice(STREETS)}",
            "city": rng.choice(CITIES),
            "district": rng.choice(DISTRICTS),
        },
        "contactNumber": f"{rng.randint(0, 9_999_999_999):010d}",
        # metade com email, para exercitar unicidade esparsa
        "email": f"{first}.{last}.{i}@school.org".lower() if i % 2 == 0 else "",
    }


def main() -> None:
    configure_logging(json=False)
    log = get_logger()
    rng = random.Random(SEED_RANDOM)

    db = database.session()
    try:
        created = 0
        for i in range(SEED_COUNT):
            values = validate_create(_fake_payload(rng, i))
            try:
                st = student_repo.create(db, code=next_code(db), values=values)
            except Duplicate as exc:
                log.warning("seed.skip", field=exc.field)
                continue
            created += 1
            log.info("seed.student", code=st.code, name=f"{st.first_name} {st.last_name}")
        log.info("seed.done", created=created)
    finally:
        db.close()


if __name__ == "__main__":
    main()
