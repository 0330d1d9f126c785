#!/usr/bin/env python3
"""
Smart Afforestation - Tree Planting Planner

Main entry point for the GA planting search.
Takes the site parameters on the command line (or a YAML run config)
and prints the selected trees with their score, area and cost.
"""

import sys
import argparse
import logging
import random
from pathlib import Path

# Add current directory to path for imports
sys.path.append(str(Path(__file__).parent))

from afforest.cli import ConfigValidationError, run_from_config, validate_site
from afforest.data_models import Budgets, SearchConfig
from afforest.errors import NoFeasibleSolutionError, PlannerError
from afforest.io_utils import load_catalog
from afforest.orchestration import plan_planting, resolve_seed, write_outputs
from afforest.results import format_result

DATA_DIR = Path(__file__).parent / "data"


def build_search_config(args, seed=None):
    """Create SearchConfig from parsed arguments"""
    return SearchConfig(
        num_chromosomes=args.chromosomes,
        max_stagnant_generations=args.max_stagnant,
        verbose=args.verbose,
        random_seed=seed,
    )


def run_basic_planning(args):
    """Run one planting search and show results"""
    catalog = load_catalog(args.tree_info, args.tree_idx)
    budgets = Budgets(
        area_limit=args.area_limit,
        cost_limit=args.cost_limit,
        target_population=args.population,
    )

    seed = resolve_seed(args.seed)
    if args.verbose:
        print(f"Using random seed: {seed}")

    config = build_search_config(args, seed)
    planter, result = plan_planting(catalog, args.aqi, budgets, args.runtime, config)

    print(format_result(result))

    if args.verbose:
        print(f"\nLevel: {result.metadata['level']} ({result.metadata['zone']})")
        print(f"Generations: {result.metadata['generations']} "
              f"(restarts: {result.metadata['restarts']})")

    if args.output_dir:
        write_outputs(planter, result, {
            'root': args.output_dir,
            'name': args.output_name,
            'overwrite': args.overwrite,
            'plot': args.plot,
        })

    return planter, result


def run_multiple_random_trials(args):
    """Run several searches with different random seeds for comparison"""
    print("=" * 60)
    print(f"RUNNING {args.trials} RANDOM TRIALS")
    print("=" * 60)

    catalog = load_catalog(args.tree_info, args.tree_idx)
    budgets = Budgets(
        area_limit=args.area_limit,
        cost_limit=args.cost_limit,
        target_population=args.population,
    )

    results = []
    for trial in range(args.trials):
        seed = random.randint(1, 1000000)
        print(f"\n--- Trial {trial + 1}/{args.trials} (seed {seed}) ---")

        config = build_search_config(args, seed)
        try:
            _, result = plan_planting(catalog, args.aqi, budgets, args.runtime, config)
        except NoFeasibleSolutionError as e:
            print(f"  No solution: {e}")
            continue

        print(f"  Score: {result.score:.3f}  Trees: {result.total_trees()}")
        results.append({
            'trial': trial + 1,
            'seed': seed,
            'score': result.score,
            'trees': result.total_trees(),
            'area': result.area,
            'cost': result.cost,
        })

    # Summary of trials
    print("\n" + "=" * 60)
    print("TRIAL SUMMARY")
    print("=" * 60)
    print("Trial | Seed      | Score        | Trees | Area    | Cost")
    print("------|-----------|--------------|-------|---------|--------")

    for r in results:
        print(f"{r['trial']:5} | {r['seed']:9} | {r['score']:12.3f} | {r['trees']:5} | "
              f"{r['area']:7} | {r['cost']:7}")

    if results:
        scores = [r['score'] for r in results]
        avg_score = sum(scores) / len(scores)
        print(f"\nScore Statistics:")
        print(f"  Average: {avg_score:.3f}")
        print(f"  Range: {min(scores):.3f} - {max(scores):.3f}")
        print(f"  Std Dev: {(sum((s - avg_score)**2 for s in scores) / len(scores))**0.5:.3f}")

    return results


def main():
    """Main entry point with command-line argument parsing"""
    parser = argparse.ArgumentParser(
        description="Smart Afforestation - GA Tree Planting Planner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python3 main.py 180 5000 20000 1000 10              # AQI area cost population runtime(s)
  python3 main.py 180 5000 20000 1000 10 --verbose    # With progress and run summary
  python3 main.py 180 5000 20000 1000 10 -o output    # Also write JSON/CSV/history
  python3 main.py 180 5000 20000 1000 5 --trials 5    # Multiple random trials
  python3 main.py --config configs/run_config.yaml    # YAML run configuration
        """
    )

    parser.add_argument('aqi', type=int, nargs='?', help='Air quality index of the site')
    parser.add_argument('area_limit', type=int, nargs='?', help='Available area')
    parser.add_argument('cost_limit', type=int, nargs='?', help='Available budget')
    parser.add_argument('population', type=int, nargs='?', help='Population served (per-capita divisor)')
    parser.add_argument('runtime', type=float, nargs='?', help='Search time in seconds')

    parser.add_argument(
        '--config', '-c',
        help='YAML run configuration (replaces the positional arguments)'
    )
    parser.add_argument(
        '--tree-info',
        default=str(DATA_DIR / "tree_info.json"),
        help='Tree catalog JSON (default: data/tree_info.json)'
    )
    parser.add_argument(
        '--tree-idx',
        default=str(DATA_DIR / "tree_idx.json"),
        help='Tree name index JSON (default: data/tree_idx.json)'
    )
    parser.add_argument('--chromosomes', type=int, default=20, help='GA population size (default: 20)')
    parser.add_argument(
        '--max-stagnant', type=int, default=30,
        help='Stagnant generations before restart (default: 30)'
    )
    parser.add_argument('--seed', type=int, help='Random seed (default: from clock)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Report search progress')
    parser.add_argument('--trials', '-t', type=int, metavar='N', help='Run N random trials for comparison')
    parser.add_argument('--output-dir', '-o', metavar='DIR', help='Directory for JSON/CSV/history output')
    parser.add_argument('--output-name', '-n', metavar='NAME', help='Base name for output files')
    parser.add_argument('--overwrite', action='store_true', help='Overwrite existing output files')
    parser.add_argument('--plot', action='store_true', help='Save a convergence plot with the output')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(message)s"
    )

    positional = [args.aqi, args.area_limit, args.cost_limit, args.population, args.runtime]
    if args.config is None and any(value is None for value in positional):
        parser.error("either --config or all of: aqi area_limit cost_limit population runtime")

    if args.config is None:
        try:
            validate_site({
                'aqi': args.aqi,
                'area_limit': args.area_limit,
                'cost_limit': args.cost_limit,
                'population': args.population,
            })
        except ConfigValidationError as e:
            parser.error(str(e))
        if args.runtime <= 0:
            parser.error(f"runtime must be a positive number, got: {args.runtime}")

    try:
        if args.config:
            run_from_config(args.config)
        elif args.trials:
            run_multiple_random_trials(args)
        else:
            run_basic_planning(args)

    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        sys.exit(1)
    except NoFeasibleSolutionError as e:
        print(f"No solution found: {e}")
        sys.exit(2)
    except (PlannerError, ConfigValidationError, FileNotFoundError, FileExistsError) as e:
        print(f"Error: {e}")
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
