"""Writers sending cost curve results to files, databases and XML stores."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Protocol, runtime_checkable

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from engine.outputs import CostCurveOutputs

LOGGER = logging.getLogger(__name__)

# Insertion point of the cost curve document inside a scenario document.
UPDATE_LOCATION = "/scenario/world/region[last()]"

DEFAULT_TABLE_NAME = "policy_costs"


@runtime_checkable
class XmlDocumentStore(Protocol):
    """Destination accepting XML fragments appended below an XPath location."""

    def append_data(self, xml_string: str, location: str) -> None: ...


def _find_location(root: ET.Element, location: str) -> ET.Element:
    """Return the element addressed by the absolute path ``location``."""

    steps = location.strip().lstrip("/")
    head, _, rest = steps.partition("/")
    root_tag = head.split("[", 1)[0]
    if root_tag != root.tag:
        raise LookupError(f"Document root is <{root.tag}>, not <{root_tag}> ({location})")
    if not rest:
        return root
    target = root.find(f"./{rest}")
    if target is None:
        raise LookupError(f"No element matches {location!r}")
    return target


class FileXmlDocumentStore:
    """XML document store backed by a single file on disk."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def append_data(self, xml_string: str, location: str) -> None:
        """Parse ``xml_string`` and append it below ``location`` in the stored document."""

        tree = ET.parse(self.path)
        target = _find_location(tree.getroot(), location)
        target.append(ET.fromstring(xml_string))
        ET.indent(tree)
        tree.write(self.path, encoding="utf-8", xml_declaration=True)
        LOGGER.info("Appended cost curves to %s at %s", self.path, location)


def write_xml_file(outputs: CostCurveOutputs, path: str | Path) -> Path:
    """Write the cost curve document to ``path`` and return the path."""

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(outputs.to_xml_string(), encoding="utf-8")
    return target


def write_to_database(
    outputs: CostCurveOutputs,
    database: str | Engine,
    *,
    table_name: str = DEFAULT_TABLE_NAME,
    if_exists: str = "append",
) -> int:
    """Write the unit-converted cost table to ``database`` and return the row count.

    Parameters
    ----------
    outputs:
        Results of a completed cost calculation.
    database:
        A SQLAlchemy engine or database URL such as ``sqlite:///costs.db``.
    table_name:
        Destination table.
    if_exists:
        Behaviour when the table already exists, passed to
        :meth:`pandas.DataFrame.to_sql`.
    """

    engine = create_engine(database) if isinstance(database, str) else database
    frame = outputs.to_frame()
    frame.insert(0, "scenario", outputs.scenario_name)
    frame.to_sql(table_name, engine, if_exists=if_exists, index=False)
    return len(frame)


def export_cost_curves(
    outputs: CostCurveOutputs,
    xml_path: str | Path,
    *,
    document_store: XmlDocumentStore | None = None,
    database: str | Engine | None = None,
    csv_dir: str | Path | None = None,
) -> dict[str, object]:
    """Send ``outputs`` to every configured sink.

    The XML file is always written. The document store, database and CSV
    directory are only used when supplied.
    """

    exported: dict[str, object] = {"xml": write_xml_file(outputs, xml_path)}
    if document_store is not None:
        document_store.append_data(outputs.to_xml_string(), UPDATE_LOCATION)
        exported["document_store"] = UPDATE_LOCATION
    if database is not None:
        exported["database_rows"] = write_to_database(outputs, database)
    if csv_dir is not None:
        outputs.to_csv(csv_dir)
        exported["csv"] = Path(csv_dir)
    return exported


__all__ = [
    "DEFAULT_TABLE_NAME",
    "FileXmlDocumentStore",
    "UPDATE_LOCATION",
    "XmlDocumentStore",
    "export_cost_curves",
    "write_to_database",
    "write_xml_file",
]
