"""Structured container for cost curve results and their serialisations."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Sequence

import pandas as pd

from curves import PointSetCurve

# Converts 1975 dollars to 1990 dollars.
CVRT_75_TO_90: float = 2.212
COST_UNITS: str = "(millions)90US$"

TABLE_COLUMNS: list[str] = ["region", "category", "variable", "dimension", "units", "year", "value"]


@dataclass(frozen=True)
class CostCurveOutputs:
    """Results of a completed policy cost calculation."""

    scenario_name: str
    years: tuple[int, ...]
    period_cost_curves: Sequence[Mapping[str, PointSetCurve]]
    regional_cost_curves: Mapping[str, PointSetCurve]
    regional_costs: Mapping[str, float]
    regional_discounted_costs: Mapping[str, float]
    global_cost: float
    global_discounted_cost: float
    failed_trials: tuple[int, ...] = field(default_factory=tuple)

    def to_element(self) -> ET.Element:
        """Return the ``CostCurvesInfo`` document as an XML element tree."""

        root = ET.Element("CostCurvesInfo")

        periods = ET.SubElement(root, "PeriodCostCurves")
        for year, curves in zip(self.years, self.period_cost_curves):
            period_element = ET.SubElement(periods, "CostCurves", year=str(year))
            for curve in curves.values():
                period_element.append(curve.to_element())

        regional_curves = ET.SubElement(root, "RegionalCostCurvesByPeriod")
        for curve in self.regional_cost_curves.values():
            regional_curves.append(curve.to_element())

        undiscounted = ET.SubElement(root, "RegionalUndiscountedCosts")
        for region, cost in self.regional_costs.items():
            ET.SubElement(undiscounted, "UndiscountedCost", name=region).text = repr(float(cost))

        discounted = ET.SubElement(root, "RegionalDiscountedCosts")
        for region, cost in self.regional_discounted_costs.items():
            ET.SubElement(discounted, "DiscountedCost", name=region).text = repr(float(cost))

        ET.SubElement(root, "GlobalUndiscountedTotalCost").text = repr(float(self.global_cost))
        ET.SubElement(root, "GlobalDiscountedCost").text = repr(float(self.global_discounted_cost))
        return root

    def to_xml_string(self) -> str:
        """Return the ``CostCurvesInfo`` document as indented XML text."""

        root = self.to_element()
        ET.indent(root)
        return ET.tostring(root, encoding="unicode")

    def to_frame(self) -> pd.DataFrame:
        """Return the unit-converted cost table for a relational sink.

        Per-period undiscounted costs are reported under ``PolicyCostUndisc``;
        the total undiscounted and discounted costs are single rows stamped
        with the last model year.
        """

        records: list[dict[str, object]] = []
        for region, curve in self.regional_cost_curves.items():
            for year in self.years:
                records.append(
                    {
                        "region": region,
                        "category": "General",
                        "variable": "PolicyCostUndisc",
                        "dimension": "Period",
                        "units": COST_UNITS,
                        "year": int(year),
                        "value": curve.get_y(year) * CVRT_75_TO_90,
                    }
                )

        final_year = int(self.years[-1]) if self.years else 0
        for variable, costs in (
            ("PolicyCostTotalUndisc", self.regional_costs),
            ("PolicyCostTotalDisc", self.regional_discounted_costs),
        ):
            for region, cost in costs.items():
                records.append(
                    {
                        "region": region,
                        "category": "General",
                        "variable": variable,
                        "dimension": "AllYears",
                        "units": COST_UNITS,
                        "year": final_year,
                        "value": float(cost) * CVRT_75_TO_90,
                    }
                )

        return pd.DataFrame.from_records(records, columns=TABLE_COLUMNS)

    def summary_table(self) -> pd.DataFrame:
        """Return one row per region plus a ``global`` row with both total costs."""

        rows = [
            {
                "region": region,
                "undiscounted_cost": float(cost),
                "discounted_cost": float(self.regional_discounted_costs.get(region, 0.0)),
            }
            for region, cost in self.regional_costs.items()
        ]
        rows.append(
            {
                "region": "global",
                "undiscounted_cost": float(self.global_cost),
                "discounted_cost": float(self.global_discounted_cost),
            }
        )
        return pd.DataFrame(rows, columns=["region", "undiscounted_cost", "discounted_cost"])

    def period_curve_table(self) -> pd.DataFrame:
        """Return every period cost curve point in long format."""

        records = [
            {"year": int(year), "region": region, "reduction": x, "tax": y}
            for year, curves in zip(self.years, self.period_cost_curves)
            for region, curve in curves.items()
            for x, y in curve.points()
        ]
        return pd.DataFrame(records, columns=["year", "region", "reduction", "tax"])

    def to_csv(
        self,
        outdir: str | Path,
        *,
        costs_filename: str = "policy_costs.csv",
        summary_filename: str = "policy_cost_summary.csv",
        period_curves_filename: str = "period_cost_curves.csv",
    ) -> None:
        """Persist the cost tables to ``outdir`` as CSV files."""

        output_dir = Path(outdir)
        output_dir.mkdir(parents=True, exist_ok=True)

        self.to_frame().to_csv(output_dir / costs_filename, index=False)
        self.summary_table().to_csv(output_dir / summary_filename, index=False)
        self.period_curve_table().to_csv(output_dir / period_curves_filename, index=False)


__all__ = ["COST_UNITS", "CVRT_75_TO_90", "CostCurveOutputs", "TABLE_COLUMNS"]
