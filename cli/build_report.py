# cli/build_report.py
import argparse
import json
import logging
import math
from pathlib import Path

from analysis.aggregate import round_for_display
from analysis.pipeline import build_report
from config import (
    DATE_COLUMN,
    DATE_FORMAT,
    DROP_COLUMNS,
    OUT,
    OUT_PER_CAPITA,
    OUT_RACE_REGION_RATES,
    OUT_REGION_RACE,
    OUT_REGION_RATES,
    OUT_REGRESSION_SUMMARY,
    OUT_REGRESSION_TERMS,
    OUT_STATS,
    REGRESSION_RACES,
)
from loaders import read_incidents
from normalize import normalize_incidents

log = logging.getLogger(__name__)


def parse_reference(pairs: list[str]) -> dict:
    out = {}
    for item in pairs or []:
        if "=" not in item:
            raise argparse.ArgumentTypeError(f"Expected predictor=level, got {item!r}")
        k, v = item.split("=", 1)
        out[k.strip()] = v.strip()
    return out


def json_safe(value):
    """Replace NaN/inf with None so the stats file stays valid JSON."""
    if isinstance(value, dict):
        return {k: json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [json_safe(v) for v in value]
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def write_outputs(report, out: Path, fmt: str = "csv", charts: bool = False) -> list[Path]:
    out.mkdir(parents=True, exist_ok=True)
    tables = {
        OUT_REGION_RATES: round_for_display(report.region_rates),
        OUT_REGION_RACE: round_for_display(report.region_race),
        OUT_RACE_REGION_RATES: round_for_display(report.race_region_rates),
    }
    if report.per_capita is not None:
        tables[OUT_PER_CAPITA] = report.per_capita
    if report.regression is not None:
        tables[OUT_REGRESSION_TERMS] = report.regression.to_frame()

    written = []
    for name, df in tables.items():
        path = out / f"{name}.{fmt}"
        if fmt == "csv":
            df.to_csv(path, index=False)
        else:
            df.to_parquet(path, index=False)
        written.append(path)

    ind = report.independence or {}
    stats = {k: ind.get(k) for k in ("chi2", "df", "p_value")}
    if report.regression is not None:
        stats["regression"] = report.regression.fit_stats()
        stats["regression"]["reference"] = report.regression.reference
    else:
        stats["regression_error"] = str(report.regression_error)
    if report.per_capita_error is not None:
        stats["per_capita_error"] = str(report.per_capita_error)
    with open(out / OUT_STATS, "w") as f:
        json.dump(json_safe(stats), f, indent=2, allow_nan=False)
    written.append(out / OUT_STATS)

    if report.regression is not None:
        summ = report.regression.summary_text()
    else:
        summ = f"Regression not run: {report.regression_error}"
    with open(out / OUT_REGRESSION_SUMMARY, "w") as f:
        f.write(summ)
    written.append(out / OUT_REGRESSION_SUMMARY)

    if charts:
        from charts import race_region_rate_chart, region_race_chart, region_rate_chart

        for fname, chart in [
            ("region_rates.html", region_rate_chart(report.region_rates)),
            ("region_race.html", region_race_chart(report.region_race)),
            ("race_region_rates.html", race_region_rate_chart(report.race_region_rates)),
        ]:
            chart.save(str(out / fname))
            written.append(out / fname)
    return written


def main(argv=None):
    ap = argparse.ArgumentParser(description="Shooting incident fatality report")
    ap.add_argument("--incidents", default=None, help="Path or URL of the incident CSV")
    ap.add_argument("--out", default=str(OUT), help="Directory for outputs")
    ap.add_argument("--races", nargs="*", default=REGRESSION_RACES, help="Victim races kept for the regression")
    ap.add_argument("--reference", nargs="*", default=[], help="Reference levels, e.g. victim_race=WHITE")
    ap.add_argument("--strict-dates", action="store_true", help="Fail on malformed dates instead of nulling them")
    ap.add_argument("--format", choices=["parquet", "csv"], default="csv")
    ap.add_argument("--charts", action="store_true", help="Also write Altair charts as HTML")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    raw = read_incidents(args.incidents)
    incidents = normalize_incidents(raw, DATE_COLUMN, DATE_FORMAT, DROP_COLUMNS, strict_dates=args.strict_dates)
    report = build_report(incidents, races=args.races, reference=parse_reference(args.reference))

    for p in write_outputs(report, Path(args.out), fmt=args.format, charts=args.charts):
        log.info("wrote %s", p)
    return report


if __name__ == "__main__":
    main()
