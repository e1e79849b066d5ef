"""Sectioned flat-file persistence for the catalog tables.

File layout::

    # comment
    [SERIES]
    id,name,intro
    [TECH]
    id,name,intro
    [MODEL]
    id,name,series_id,price,range_km,energy_type,body_type,seats,launch_year[,tech|ids]
    [MODEL_TECH]
    model_id,tech_id

Fields are comma separated and kept verbatim, surrounding whitespace
included. CSV quoting is used when a value contains a comma, a quote or a
line break; a quoted value may span several lines. The optional tenth
MODEL field lists tech ids separated by `|` and is turned into association
rows.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterator
from pathlib import Path

from byd_catalog.models.schemas import CarModel, CatalogSnapshot, ModelTech, Series, Tech
from byd_catalog.utils.exceptions import DataFileError
from byd_catalog.utils.logging import get_logger

logger = get_logger(__name__)

SECTION_SERIES = "SERIES"
SECTION_TECH = "TECH"
SECTION_MODEL = "MODEL"
SECTION_MODEL_TECH = "MODEL_TECH"

_MIN_FIELDS = {
    SECTION_SERIES: 3,
    SECTION_TECH: 3,
    SECTION_MODEL: 9,
    SECTION_MODEL_TECH: 2,
}

_HEADER = (
    "# BYD catalog data file\n"
    "# [SERIES] id,name,intro\n"
    "# [TECH] id,name,intro\n"
    "# [MODEL] id,name,series_id,price,range_km,energy_type,body_type,seats,launch_year\n"
    "# [MODEL_TECH] model_id,tech_id\n"
)


def parse_catalog(text: str) -> CatalogSnapshot:
    """Parse data file text. Field values are kept verbatim, including
    surrounding whitespace and line breaks inside quoted fields."""
    snapshot = CatalogSnapshot()
    pairs: dict[tuple[int, int], None] = {}
    section = ""

    for lineno, parts in _records(text):
        head = parts[0].strip() if parts else ""
        if not any(field.strip() for field in parts) or head.startswith("#"):
            continue
        if len(parts) == 1 and head.startswith("[") and head.endswith("]"):
            section = head[1:-1].strip().upper()
            if section not in _MIN_FIELDS:
                logger.warning("data_file_unknown_section", line=lineno, section=section)
            continue

        minimum = _MIN_FIELDS.get(section)
        if minimum is None:
            continue
        if len(parts) < minimum:
            logger.warning("data_file_row_skipped", line=lineno, section=section, fields=len(parts))
            continue

        try:
            if section == SECTION_SERIES:
                snapshot.series.append(
                    Series(series_id=int(parts[0]), series_name=parts[1], intro=parts[2])
                )
            elif section == SECTION_TECH:
                snapshot.techs.append(Tech(tech_id=int(parts[0]), tech_name=parts[1], intro=parts[2]))
            elif section == SECTION_MODEL:
                model = CarModel(
                    model_id=int(parts[0]),
                    model_name=parts[1],
                    series_id=int(parts[2]),
                    price=float(parts[3]),
                    range_km=float(parts[4]),
                    energy_type=parts[5],
                    body_type=parts[6],
                    seats=int(parts[7]),
                    launch_year=parts[8],
                )
                snapshot.models.append(model)
                if len(parts) > 9:
                    for tech_id in parts[9].split("|"):
                        if tech_id.strip():
                            pairs.setdefault((model.model_id, int(tech_id)), None)
            elif section == SECTION_MODEL_TECH:
                pairs.setdefault((int(parts[0]), int(parts[1])), None)
        except ValueError as exc:
            raise DataFileError(f"line {lineno}: invalid {section} row: {exc}") from exc

    snapshot.associations = [
        ModelTech(id=index, model_id=model_id, tech_id=tech_id)
        for index, (model_id, tech_id) in enumerate(pairs, start=1)
    ]
    return snapshot


def _records(text: str) -> Iterator[tuple[int, list[str]]]:
    """CSV records with the line number each one ends on."""
    reader = csv.reader(io.StringIO(text, newline=""))
    try:
        for parts in reader:
            yield reader.line_num, parts
    except csv.Error as exc:
        raise DataFileError(f"line {reader.line_num}: {exc}") from exc


def format_catalog(snapshot: CatalogSnapshot) -> str:
    buf = io.StringIO()
    buf.write(_HEADER)
    writer = csv.writer(buf, lineterminator="\n")

    buf.write(f"\n[{SECTION_SERIES}]\n")
    for s in snapshot.series:
        writer.writerow([s.series_id, s.series_name, s.intro])

    buf.write(f"\n[{SECTION_TECH}]\n")
    for t in snapshot.techs:
        writer.writerow([t.tech_id, t.tech_name, t.intro])

    buf.write(f"\n[{SECTION_MODEL}]\n")
    for m in snapshot.models:
        writer.writerow([
            m.model_id,
            m.model_name,
            m.series_id,
            repr(m.price),
            repr(m.range_km),
            m.energy_type,
            m.body_type,
            m.seats,
            m.launch_year,
        ])

    buf.write(f"\n[{SECTION_MODEL_TECH}]\n")
    for row in snapshot.associations:
        writer.writerow([row.model_id, row.tech_id])

    return buf.getvalue()


def load_catalog(path: str | Path) -> CatalogSnapshot:
    """Read and parse the data file. Raises FileNotFoundError if it is absent."""
    path = Path(path)
    with path.open(encoding="utf-8", newline="") as f:
        snapshot = parse_catalog(f.read())
    logger.info(
        "data_file_loaded",
        path=str(path),
        series=len(snapshot.series),
        techs=len(snapshot.techs),
        models=len(snapshot.models),
        associations=len(snapshot.associations),
    )
    return snapshot


def save_catalog(path: str | Path, snapshot: CatalogSnapshot) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(format_catalog(snapshot), encoding="utf-8", newline="")
    logger.info("data_file_saved", path=str(path), models=len(snapshot.models))
