# points.py
# Converts a project's point records into navigation nodes.
# Records come from the storage side as {label, lat, lng, imageX, imageY, projectId[, id]}.

import logging
import uuid
from typing import Iterable, List, Mapping, Optional, Sequence, Union

import pandas as pd

from .models import Coord, NavNode
from .nav_config import NON_NAVIGATIONAL_MARKERS

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("label", "lat", "lng")

PointRecords = Union[pd.DataFrame, Iterable[Mapping]]


def is_navigational(label: str, markers: Sequence[str] = NON_NAVIGATIONAL_MARKERS) -> bool:
    """False for calibration points such as 'SW corner' or 'Image bounds'."""
    name = (label or "").lower()
    return not any(marker in name for marker in markers)


def _to_frame(records: PointRecords) -> pd.DataFrame:
    frame = records if isinstance(records, pd.DataFrame) else pd.DataFrame(list(records))
    missing = [c for c in REQUIRED_COLUMNS if c not in frame.columns]
    if missing and not frame.empty:
        raise ValueError(f"Point records are missing columns: {missing}")
    return frame


def _number(value) -> float:
    return 0.0 if value is None or pd.isna(value) else float(value)


def _text(value) -> str:
    """Cell as text: "" when missing, 42.0 read back as "42"."""
    if value is None or pd.isna(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def assign_point_ids(frame: pd.DataFrame) -> pd.DataFrame:
    """
    Give every record without an id a random one, in place.

    Ids are assigned once and never derived from label or coordinates, so
    editing a point keeps its identity. Persist the frame afterwards.

    Args:
        frame: Point table; an "id" column is added when absent.

    Returns:
        The same frame, for chaining.
    """
    if "id" not in frame.columns:
        frame["id"] = None
    missing = frame["id"].isna() | (frame["id"].astype(str).str.strip() == "")
    if missing.any():
        frame.loc[missing, "id"] = [uuid.uuid4().hex for _ in range(int(missing.sum()))]
        logger.info(f"Assigned ids to {int(missing.sum())} point records.")
    return frame


def nodes_from_points(
    records: PointRecords,
    project_id: Optional[str] = None,
    markers: Sequence[str] = NON_NAVIGATIONAL_MARKERS,
) -> List[NavNode]:
    """
    Build NavNode objects from point records.

    Calibration corners are skipped; when project_id is given only that
    project's points are kept.

    Args:
        records:    DataFrame or iterable of dicts. A DataFrame gets its
                    missing ids filled in place (see assign_point_ids()).
        project_id: Optional project filter.
        markers:    Label substrings marking non-navigational points.

    Returns:
        List of NavNode objects in record order.

    Raises:
        ValueError: If label/lat/lng columns are missing.
    """
    frame = assign_point_ids(_to_frame(records))
    if frame.empty:
        return []

    if "projectId" in frame.columns:
        frame = frame.assign(projectId=frame["projectId"].map(_text))
        if project_id is not None:
            frame = frame[frame["projectId"] == str(project_id)]

    default_project = "" if project_id is None else str(project_id)
    nodes: List[NavNode] = []
    skipped = 0
    for rec in frame.to_dict("records"):
        label = str(rec["label"])
        if not is_navigational(label, markers):
            skipped += 1
            continue
        nodes.append(NavNode(
            id=str(rec["id"]),
            label=label,
            position=Coord(float(rec["lat"]), float(rec["lng"])),
            image_offset=(_number(rec.get("imageX")), _number(rec.get("imageY"))),
            project_id=rec.get("projectId") or default_project,
        ))

    logger.info(f"Created {len(nodes)} navigation nodes ({skipped} calibration points skipped).")
    return nodes


def read_points_csv(path: str) -> pd.DataFrame:
    """Load a point table written by the map tooling (one row per point)."""
    return pd.read_csv(path, dtype={"id": str, "projectId": str})
