"""Tests for cost curve outputs and their writers."""

from __future__ import annotations

import importlib
import xml.etree.ElementTree as ET

import pandas as pd
import pytest
from sqlalchemy import create_engine

from config.cost_curve_config import CostCurveConfig
from engine.outputs import COST_UNITS, CVRT_75_TO_90, TABLE_COLUMNS, CostCurveOutputs
from engine.reporting import (
    UPDATE_LOCATION,
    FileXmlDocumentStore,
    export_cost_curves,
    write_to_database,
    write_xml_file,
)
from engine.total_policy_cost import TotalPolicyCostCalculator

fixtures = importlib.import_module("tests.fixtures.scenarios")


@pytest.fixture(scope="module")
def outputs() -> CostCurveOutputs:
    calculator = TotalPolicyCostCalculator(
        fixtures.policy_scenario(), CostCurveConfig(num_points=2, discount_rate=0.0)
    )
    calculator.calculate_abatement_cost_curve()
    result = calculator.outputs()
    assert result is not None
    return result


def test_xml_document_structure(outputs: CostCurveOutputs) -> None:
    root = ET.fromstring(outputs.to_xml_string())

    assert root.tag == "CostCurvesInfo"
    periods = root.findall("./PeriodCostCurves/CostCurves")
    assert [element.get("year") for element in periods] == [str(year) for year in fixtures.YEARS]
    usa_first = periods[1].find("./PointSetCurve[@name='USA period cost curve']")
    assert usa_first is not None
    assert len(usa_first.findall("DataPoint")) == 3

    regional = root.findall("./RegionalCostCurvesByPeriod/PointSetCurve")
    assert len(regional) == 2

    costs = {
        element.get("name"): float(element.text)
        for element in root.findall("./RegionalUndiscountedCosts/UndiscountedCost")
    }
    assert costs == pytest.approx(fixtures.EXPECTED_REGIONAL_COSTS)
    assert float(root.findtext("GlobalUndiscountedTotalCost")) == pytest.approx(16125.0)
    assert float(root.findtext("GlobalDiscountedCost")) == pytest.approx(16125.0)


def test_cost_table_is_unit_converted(outputs: CostCurveOutputs) -> None:
    frame = outputs.to_frame()

    assert list(frame.columns) == TABLE_COLUMNS
    assert set(frame["units"]) == {COST_UNITS}
    assert set(frame["category"]) == {"General"}

    per_period = frame[(frame["variable"] == "PolicyCostUndisc") & (frame["region"] == "USA")]
    assert list(per_period["year"]) == list(fixtures.YEARS)
    assert per_period["value"].tolist() == pytest.approx(
        [fixtures.expected_period_cost("USA", p) * CVRT_75_TO_90 for p in range(len(fixtures.YEARS))]
    )

    totals = frame[frame["dimension"] == "AllYears"].set_index(["variable", "region"])
    assert totals.loc[("PolicyCostTotalUndisc", "China"), "value"] == pytest.approx(5375.0 * CVRT_75_TO_90)
    assert set(totals["year"]) == {fixtures.YEARS[-1]}


def test_summary_table_has_global_row(outputs: CostCurveOutputs) -> None:
    summary = outputs.summary_table().set_index("region")

    assert list(summary.index) == ["USA", "China", "global"]
    assert summary.loc["global", "undiscounted_cost"] == pytest.approx(16125.0)


def test_write_xml_file_creates_parent_directories(outputs, tmp_path) -> None:
    target = write_xml_file(outputs, tmp_path / "nested" / "costs.xml")

    assert target.exists()
    assert ET.parse(target).getroot().tag == "CostCurvesInfo"


def test_write_to_database_round_trips_rows(outputs, tmp_path) -> None:
    engine = create_engine(f"sqlite:///{tmp_path / 'costs.db'}")

    rows = write_to_database(outputs, engine)
    stored = pd.read_sql("SELECT * FROM policy_costs", engine)

    assert rows == len(outputs.to_frame())
    assert len(stored) == rows
    assert set(stored["scenario"]) == {"fixture"}

    write_to_database(outputs, engine)
    assert len(pd.read_sql("SELECT * FROM policy_costs", engine)) == 2 * rows


def test_file_document_store_appends_to_last_region(outputs, tmp_path) -> None:
    document = tmp_path / "scenario.xml"
    document.write_text(
        "<scenario><world><region name='USA'/><region name='China'/></world></scenario>",
        encoding="utf-8",
    )

    FileXmlDocumentStore(document).append_data(outputs.to_xml_string(), UPDATE_LOCATION)

    regions = ET.parse(document).getroot().findall("./world/region")
    assert regions[0].find("CostCurvesInfo") is None
    assert regions[1].find("CostCurvesInfo") is not None


def test_file_document_store_rejects_unknown_location(outputs, tmp_path) -> None:
    document = tmp_path / "other.xml"
    document.write_text("<results><world/></results>", encoding="utf-8")
    store = FileXmlDocumentStore(document)

    with pytest.raises(LookupError):
        store.append_data(outputs.to_xml_string(), UPDATE_LOCATION)
    with pytest.raises(LookupError):
        store.append_data(outputs.to_xml_string(), "/results/world/region[last()]")


def test_export_cost_curves_uses_every_configured_sink(outputs, tmp_path) -> None:
    document = tmp_path / "scenario.xml"
    document.write_text("<scenario><world><region name='USA'/></world></scenario>", encoding="utf-8")

    exported = export_cost_curves(
        outputs,
        tmp_path / "out" / "cost_curves.xml",
        document_store=FileXmlDocumentStore(document),
        database=f"sqlite:///{tmp_path / 'costs.db'}",
        csv_dir=tmp_path / "csv",
    )

    assert exported["xml"].exists()
    assert exported["document_store"] == UPDATE_LOCATION
    assert exported["database_rows"] == len(outputs.to_frame())
    for name in ("policy_costs.csv", "policy_cost_summary.csv", "period_cost_curves.csv"):
        assert (tmp_path / "csv" / name).exists()

    curves = pd.read_csv(tmp_path / "csv" / "period_cost_curves.csv")
    assert list(curves.columns) == ["year", "region", "reduction", "tax"]


def test_export_without_optional_sinks_writes_only_xml(outputs, tmp_path) -> None:
    exported = export_cost_curves(outputs, tmp_path / "cost_curves.xml")

    assert set(exported) == {"xml"}
    assert [path.name for path in tmp_path.iterdir()] == ["cost_curves.xml"]
