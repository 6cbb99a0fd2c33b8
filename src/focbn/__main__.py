from __future__ import annotations
import argparse
import logging
from pathlib import Path

from .config import PROC
from .ingest import load_station_names
from .pipeline import make_strict_dataset, make_summaries, make_models, make_figures


def setup_logging(log_file: Path | None = None) -> None:
    handlers = [logging.StreamHandler()]
    handlers[0].setLevel(logging.INFO)
    if log_file is not None:
        fh = logging.FileHandler(log_file, mode="w")
        fh.setLevel(logging.DEBUG)
        handlers.append(fh)
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        handlers=handlers,
    )
    logging.getLogger("matplotlib").setLevel(logging.WARNING)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="focbn",
        description="Build the strict FOCB nitrogen dataset, station summaries and figures.",
    )
    parser.add_argument("--species", type=Path, help="nitrogen species workbook")
    parser.add_argument("--tn", type=Path, help="total nitrogen workbook")
    parser.add_argument("--names", type=Path, help="station short names workbook")
    parser.add_argument("--out", type=Path, help="strict dataset CSV path")
    parser.add_argument("--no-figures", action="store_true", help="skip model fits and figures")
    parser.add_argument("--log-file", type=Path, help="write a DEBUG log here")
    args = parser.parse_args(argv)

    setup_logging(args.log_file)
    log = logging.getLogger("focbn")

    result = make_strict_dataset(args.species, args.tn, args.out)
    log.info("Strict dataset: %d records, NH4 threshold %.4g uM, %d records flagged",
             len(result.data), result.threshold, result.n_flagged)
    lookup = load_station_names(args.names)
    make_summaries(result.data, lookup)
    if not args.no_figures:
        tables = make_models(result.data)
        PROC.mkdir(parents=True, exist_ok=True)
        for kind, table in tables.items():
            table.to_csv(PROC / f"tn_{kind}_estimates.csv", index=False)
        make_figures(result.data, lookup, tables)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
