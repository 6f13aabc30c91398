from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Mapping

import typer

from common.utilities import setup_logger
from config.cost_curve_config import ConfigError, CostCurveConfig, load_config_data
from engine.reporting import FileXmlDocumentStore
from engine.total_policy_cost import TotalPolicyCostCalculator
from scenario.stub import StubScenario

LOGGER = logging.getLogger(__name__)

app = typer.Typer(help='Compute abatement cost curves and total policy costs.')


def _scenario_section(config: Mapping[str, Any]) -> Mapping[str, Any]:
    section = config.get('scenario')
    if not isinstance(section, Mapping):
        raise ConfigError('Configuration requires a [scenario] table')
    return section


def _build_scenario(config: Mapping[str, Any], gas: str) -> StubScenario:
    """Build the stub scenario described by the ``[scenario]`` table."""

    try:
        return StubScenario.from_mapping(_scenario_section(config), gas=gas)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f'Invalid scenario configuration: {exc}') from exc


@app.command()
def main(
    config: Path | None = typer.Option(
        None,
        '--config',
        '-c',
        help='Path to the TOML configuration file (defaults to config/run_config.toml).',
    ),
    num_points: int | None = typer.Option(
        None,
        '--num-points',
        '-n',
        help='Override the number of cost curve trials.',
    ),
    out: Path = typer.Option(
        Path('output'),
        '--out',
        '-o',
        help='Directory where the XML and CSV outputs will be written.',
    ),
    database: str | None = typer.Option(
        None,
        '--database',
        help='SQLAlchemy URL receiving the cost table (e.g. "sqlite:///costs.db").',
    ),
    xml_store: Path | None = typer.Option(
        None,
        '--xml-store',
        help='Existing scenario XML document the cost curves are appended to.',
    ),
    debug: bool = typer.Option(False, '--debug', help='Set logging level to DEBUG.'),
) -> None:
    """Run the baseline policy scenario, sweep the tax and export policy costs."""

    try:
        config_data = load_config_data(config)
        settings = CostCurveConfig.from_mapping(config_data)
        if num_points is not None:
            settings = replace(settings, num_points=num_points)
        scenario = _build_scenario(config_data, settings.gas)
    except Exception as exc:
        typer.secho(f'Failed to load configuration: {exc}', err=True, fg=typer.colors.RED)
        raise typer.Exit(1)

    log_file = setup_logger(out, debug=debug)
    LOGGER.info('Scenario %s with %s cost curve points', scenario.name, settings.num_points)

    if not scenario.run(run_tag=''):
        typer.secho('Baseline policy run failed to solve', err=True, fg=typer.colors.RED)
        raise typer.Exit(2)

    calculator = TotalPolicyCostCalculator(scenario, settings)
    try:
        success = calculator.calculate_abatement_cost_curve()
    except Exception as exc:  # pragma: no cover - defensive guard
        typer.secho(f'Cost curve calculation failed: {exc}', err=True, fg=typer.colors.RED)
        raise typer.Exit(3)
    if not success:
        typer.secho(
            'Some cost curve trials failed to solve; see the log for details.',
            err=True,
            fg=typer.colors.YELLOW,
        )

    try:
        exported = calculator.print_output(
            out,
            document_store=FileXmlDocumentStore(xml_store) if xml_store else None,
            database=database,
            csv_dir=out,
        )
    except Exception as exc:
        typer.secho(f'Failed to write outputs: {exc}', err=True, fg=typer.colors.RED)
        raise typer.Exit(4)

    if exported is None:
        typer.secho('No policy market found; no cost curves were produced.', fg=typer.colors.GREEN)
        return

    typer.secho(
        f'Global policy cost {calculator.global_cost:,.2f} '
        f'(discounted {calculator.global_discounted_cost:,.2f}); '
        f'results saved to {out.resolve()} (log: {log_file})',
        fg=typer.colors.GREEN,
    )


if __name__ == '__main__':  # pragma: no cover - CLI entry point
    app()
