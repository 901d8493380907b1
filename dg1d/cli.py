"""
Command-line driver: run a single case or a convergence study.

    dg1d run --test-case sod --degree 1 --cells 200 --limiter minmod --plot sod.png
    dg1d run --test-case blast_wave --degree 1 --cells 200 --limiter minmod --positivity
    dg1d convergence --test-case sine --degree 2 --cells 10 20 40 80
"""

import argparse
import json
import logging
import sys

from dg1d.src.config import SolverConfig, AdvancedJSONEncoder
from dg1d.src.diagnostics import convergence_rates
from dg1d.src.errors import Dg1dError
from dg1d.src.solver import Solver1D, run_convergence_study

logger = logging.getLogger('dg1d')

# SolverConfig fields settable from the command line
_OVERRIDES = ('test_case', 'degree', 'n_cells', 'cfl', 'final_time', 'basis', 'flux', 'limiter',
              'tvb_m', 'positivity', 'time_scheme', 'boundary', 'max_iter')


def configure_logging(args):
    """Attach a stream handler to the package logger, replacing any earlier one."""
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    if args.verbose:
        logger.setLevel(logging.INFO)
        ch = logging.StreamHandler(stream=sys.stdout)
        ch.setLevel(logging.INFO)
    elif args.very_verbose:
        logger.setLevel(logging.DEBUG)
        ch = logging.StreamHandler(stream=sys.stdout)
        ch.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.WARNING)
        ch = logging.StreamHandler(stream=sys.stderr)
        ch.setLevel(logging.WARNING)

    # Create formatter for message output
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    ch.setFormatter(formatter)
    logger.addHandler(ch)


def build_config(args) -> SolverConfig:
    """Configuration file (if any) with command-line overrides applied."""
    config = SolverConfig.from_json(args.config) if args.config else SolverConfig()
    changes = {field: getattr(args, field) for field in _OVERRIDES
               if getattr(args, field, None) is not None}
    return config.replace(**changes)


def run(args) -> int:
    config = build_config(args)
    solver = Solver1D(config)
    solver.set_initial_condition()
    info = solver.solve()

    errors = None
    if solver.exact is not None:
        errors = [solver.compute_errors(v)._asdict() for v in range(solver.physics.n_vars)]

    print(f"{config.test_case}: t = {info['time']:.6e} after {info['iterations']} iterations"
          f"{'' if info['completed'] else ' (iteration limit reached)'}")
    if errors is not None:
        for name, err in zip(solver.physics.var_names, errors):
            print(f"  {name:>5s}: L2 = {err['l2']:.6e}, Linf = {err['linf']:.6e}")

    if args.plot:
        solver.plot_solution(args.plot)
    if args.output:
        with open(args.output, 'w') as f:
            json.dump({'config': config, **info, 'errors': errors}, f,
                      cls=AdvancedJSONEncoder, indent=4)
        print(f"saved {args.output}")
    return 0


def convergence(args) -> int:
    config = build_config(args)
    config.validate()
    records = run_convergence_study(config, args.cells)
    l2_rates = [None] + convergence_rates(records, 'l2_error')
    linf_rates = [None] + convergence_rates(records, 'linf_error')

    def fmt(rate):
        return f"{rate:8.2f}" if rate is not None else f"{'-':>8s}"

    print(f"{'cells':>8s} {'dofs':>8s} {'L2':>12s} {'rate':>8s} {'Linf':>12s} {'rate':>8s}")
    for record, l2_rate, linf_rate in zip(records, l2_rates, linf_rates):
        print(f"{record.num_cells:8d} {record.num_dofs:8d} {record.l2_error:12.4e} {fmt(l2_rate)} "
              f"{record.linf_error:12.4e} {fmt(linf_rate)}")
    return 0


def _add_case_arguments(parser):
    parser.add_argument("--config", help="path to a JSON solver configuration")
    parser.add_argument("--test-case", dest="test_case", help="named test case")
    parser.add_argument("-k", "--degree", type=int, help="polynomial degree")
    parser.add_argument("--cfl", type=float, help="CFL number")
    parser.add_argument("--final-time", dest="final_time", type=float, help="final time")
    parser.add_argument("--basis", help="'legendre', 'gl' or 'gll'")
    parser.add_argument("--flux", help="numerical flux")
    parser.add_argument("--limiter", help="'none' or 'minmod'")
    parser.add_argument("--tvb-m", dest="tvb_m", type=float, help="TVB constant M")
    parser.add_argument("--positivity", action="store_true", default=None,
                        help="positivity-preserving limiter after the slope limiter (Euler)")
    parser.add_argument("--time-scheme", dest="time_scheme", help="'euler', 'rk2' or 'rk3'")
    parser.add_argument("--boundary", help="override the test case's boundary kind")
    parser.add_argument("--max-iter", dest="max_iter", type=int, help="iteration limit")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable verbose output")
    parser.add_argument("-vv", "--very-verbose", action="store_true", help="enable very verbose output")


def make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser("dg1d", description="1D discontinuous Galerkin solver.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="solve one test case")
    _add_case_arguments(run_parser)
    run_parser.add_argument("-n", "--cells", dest="n_cells", type=int, help="number of elements")
    run_parser.add_argument("--plot", help="save a plot of the final solution to this file")
    run_parser.add_argument("--output", help="write run information and errors to this JSON file")
    run_parser.set_defaults(func=run)

    conv_parser = subparsers.add_parser("convergence", help="run a mesh convergence study")
    _add_case_arguments(conv_parser)
    conv_parser.add_argument("--cells", type=int, nargs="+", required=True,
                             help="element counts, coarse to fine")
    conv_parser.set_defaults(func=convergence)

    return parser


def main(argv=None) -> int:
    args = make_parser().parse_args(argv)
    configure_logging(args)
    try:
        return args.func(args)
    except Dg1dError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
