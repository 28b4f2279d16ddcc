"""
app/data/schools.py

Fixed school records loaded into the `schools` table.
"""

from __future__ import annotations

from datetime import datetime

from app.domain.bulk_import import ImportRecord, ImportTarget

SCHOOLS_TARGET = ImportTarget(
    table_name="schools",
    key_column="school_id",
    timestamp_column="created_at",
)

# (school_id, name, region, created_at)
_SCHOOL_ROWS: tuple[tuple[str, str, str, str], ...] = (
    ("mesala_enate", "mesala enate", "Dire dawa", "2025-04-11 20:48:27"),
    ("legraher_school", "Legehare School", "dire dawa", "2025-04-11 20:46:49"),
    ("mariyam_sefer", "mariyam sefer", "dire dawa", "2025-04-11 21:27:21"),
    ("sabiyab_no_3", "sabiyab no 3", "dire dawa", "2025-04-11 21:28:03"),
    ("Gende_Ada", "Gende Ada", "dire dawa", "2025-04-11 21:28:42"),
    ("goro", "goro", "dire dawa", "2025-04-11 21:29:18"),
    ("high_school", "high school", "dire dawa", "2025-04-11 20:45:57"),
    ("kezira", "kezira", "dire dawa", "2025-04-11 20:46:19"),
    ("medhanialem", "medhanialem", "dire dawa", "2025-04-11 20:47:28"),
    ("misrak_jegnoch", "Misrak Jegnoch", "dire dawa", "2025-04-11 20:48:56"),
    ("oxaday_school", "oxaday school", "dire dawa", "2025-04-11 20:50:26"),
    ("sabiyan_no_1", "Sabiyan no 1", "dire dawa", "2025-04-11 20:51:10"),
    ("ye_hetsanat_ken", "ye hetsanat ken", "dire dawa", "2025-04-11 20:51:48"),
    ("Melka_jebdu__school", "Melka jebdu elementary school", "dire dawa", "2025-04-11 21:24:50"),
    ("Aba_Yohanes", "Aba Yohanes", "Dira Dawa", "2025-04-11 20:36:36"),
    ("brhan", "Brhan", "", "2025-04-11 20:37:34"),
    ("Aftesa", "Aftesa", "", "2025-04-11 20:37:09"),
    ("Dechatu_hedase", "Dechatu hedase", "", "2025-04-11 20:38:12"),
)

DEFAULT_CHILDREN_SERVED = 100


def _school_record(school_id: str, name: str, region: str, created_at: str) -> ImportRecord:
    return ImportRecord(
        natural_key=school_id,
        fields={
            "name": name,
            "description": "",
            "region": region,
            "children_served": DEFAULT_CHILDREN_SERVED,
        },
        created_at=datetime.strptime(created_at, "%Y-%m-%d %H:%M:%S"),
    )


SCHOOL_RECORDS: tuple[ImportRecord, ...] = tuple(_school_record(*row) for row in _SCHOOL_ROWS)
