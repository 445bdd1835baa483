"""Command-line interface"""

import argparse
import json
import sys

from bootstats.errors import BootstatsError
from bootstats.utils.io import json_safe, read_table
from bootstats.utils.logging import setup_logging


def _print_json(obj: dict) -> None:
    print(json.dumps(json_safe(obj), indent=2, default=str))


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description="Bootstrap and classical hypothesis tests")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # Run command
    run_parser = subparsers.add_parser("run", help="Run a bootstrap analysis from a config file")
    run_parser.add_argument("--config", type=str, required=True, help="Path to config YAML file")

    # z-test command
    z_parser = subparsers.add_parser("ztest", help="z-test on CSV columns")
    z_parser.add_argument("--data", type=str, required=True, help="CSV file")
    z_parser.add_argument("--columns", type=str, required=True, help="One column, or two comma-separated columns")
    z_parser.add_argument("--paired", action="store_true", help="Test the paired differences second - first")
    z_parser.add_argument("--mu0", type=float, default=0.0, help="Hypothesized mean (or difference)")
    z_parser.add_argument("--sigma", type=float, default=None, help="Known population standard deviation")
    z_parser.add_argument("--alternative", choices=["two_sided", "greater", "less"], default="two_sided")
    z_parser.add_argument("--level", type=float, default=0.95, help="Confidence level")

    # Chi-square command
    chisq_parser = subparsers.add_parser("chisq", help="Chi-square independence test of two CSV columns")
    chisq_parser.add_argument("--data", type=str, required=True, help="CSV file")
    chisq_parser.add_argument("--row", type=str, required=True, help="Row factor column")
    chisq_parser.add_argument("--col", type=str, required=True, help="Column factor column")
    chisq_parser.add_argument("--no-correct", action="store_true", help="Disable Yates' continuity correction")

    # Regression command
    reg_parser = subparsers.add_parser("regress", help="Ordinary least squares fit")
    reg_parser.add_argument("--data", type=str, required=True, help="CSV file")
    reg_parser.add_argument("--outcome", type=str, required=True, help="Outcome column")
    reg_parser.add_argument("--predictors", type=str, required=True, help="Comma-separated predictor columns")
    reg_parser.add_argument("--no-intercept", action="store_true", help="Fit without an intercept")
    reg_parser.add_argument("--level", type=float, default=0.95, help="Confidence level")

    args = parser.parse_args(argv)

    try:
        if args.command == "run":
            from bootstats.run.runner import run_analysis
            run_dir = run_analysis(args.config)
            print(f"Run completed. Results in: {run_dir}")

        elif args.command == "ztest":
            from bootstats.parametric.ztest import z_test_one_sample, z_test_paired, z_test_two_sample
            setup_logging()
            columns = [c.strip() for c in args.columns.split(",")]
            df = read_table(args.data, columns)
            common = dict(alternative=args.alternative, confidence_level=args.level)
            if len(columns) == 1:
                result = z_test_one_sample(df[columns[0]].dropna(), args.mu0, sigma=args.sigma, **common)
            elif args.paired:
                pairs = df[columns].dropna()
                result = z_test_paired(pairs[columns[0]], pairs[columns[1]], args.mu0, sigma=args.sigma, **common)
            else:
                result = z_test_two_sample(
                    df[columns[0]].dropna(), df[columns[1]].dropna(), args.mu0,
                    sigma_x=args.sigma, sigma_y=args.sigma, **common,
                )
            _print_json(result.to_dict())

        elif args.command == "chisq":
            import pandas as pd
            from bootstats.parametric.chisq import chisq_independence
            setup_logging()
            df = read_table(args.data, [args.row, args.col])
            table = pd.crosstab(df[args.row], df[args.col])
            result = chisq_independence(table.to_numpy(), correct=not args.no_correct)
            _print_json({
                "rows": [str(v) for v in table.index],
                "columns": [str(v) for v in table.columns],
                **result.to_dict(),
            })

        elif args.command == "regress":
            from bootstats.parametric.regression import fit_ols, make_model_spec
            setup_logging()
            spec = make_model_spec(
                outcome_variable=args.outcome,
                predictor_variables=[p.strip() for p in args.predictors.split(",")],
                intercept=not args.no_intercept,
            )
            df = read_table(args.data)
            _print_json(fit_ols(df, spec, confidence_level=args.level).to_dict())

    except (BootstatsError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
