"""
Tests for the evolution loop, stagnation/restart handling and result
extraction.
"""

import math
import unittest
from unittest import mock

import numpy as np

from afforest.data_models import Budgets, Catalog, PriorityZone, SearchConfig, TreeRecord
from afforest.engine import TreePlanter, relative_change
from afforest.errors import NoFeasibleSolutionError, SearchConfigurationError
from afforest.results import extract_result, format_result, result_to_dict


def make_record(name, cost, area, zone_score=5.0, utility=5.0):
    return TreeRecord(
        plant_species=f"{name} species",
        common_name=name,
        life_form="Tree",
        zone_scores=(zone_score,) * 4,
        canopy_diameter=5,
        utility=utility,
        cost=cost,
        area=area,
    )


def two_tree_catalog():
    return Catalog(records=(
        make_record("A", cost=10, area=5, zone_score=8, utility=2),
        make_record("B", cost=5, area=10, zone_score=3, utility=9),
    ))


class FixedClock:
    """Clock that only moves when told to."""

    def __init__(self, start=1000.0, tick=0.0):
        self.now = start
        self.tick = tick

    def __call__(self):
        current = self.now
        self.now += self.tick
        return current


class TestRelativeChange(unittest.TestCase):
    """Test the stagnation ratio."""

    def test_finite_values(self):
        self.assertAlmostEqual(relative_change(100.0, 60.0), 0.4)
        self.assertAlmostEqual(relative_change(100.0, 300.0), 2.0)

    def test_all_infeasible_is_nan(self):
        self.assertTrue(math.isnan(relative_change(-math.inf, -math.inf)))
        self.assertTrue(math.isnan(relative_change(-math.inf, 50.0)))

    def test_first_feasible_after_infeasible_is_inf(self):
        self.assertEqual(relative_change(100.0, -math.inf), math.inf)

    def test_zero_current(self):
        self.assertTrue(math.isnan(relative_change(0.0, 0.0)))
        self.assertEqual(relative_change(0.0, 10.0), math.inf)


class TestTreePlanterSetup(unittest.TestCase):
    """Test configuration checks done before the search starts."""

    def test_zero_cost_tree_rejected(self):
        catalog = Catalog(records=(make_record("free", cost=0, area=5),))

        with self.assertRaises(SearchConfigurationError):
            TreePlanter(catalog, Budgets(20, 20, 1), PriorityZone.ZONE_I)

    def test_too_few_chromosomes_rejected(self):
        with self.assertRaises(SearchConfigurationError):
            TreePlanter(
                two_tree_catalog(), Budgets(20, 20, 1), PriorityZone.ZONE_I,
                config=SearchConfig(num_chromosomes=1)
            )

    def test_non_positive_runtime_rejected(self):
        planter = TreePlanter(two_tree_catalog(), Budgets(20, 20, 1), PriorityZone.ZONE_I)

        for runtime in (0, -1.5):
            with self.assertRaises(SearchConfigurationError):
                planter.run_search(runtime)
        self.assertEqual(planter.state.generation, 0)

    def test_non_positive_budget_rejected(self):
        with self.assertRaises(SearchConfigurationError):
            Budgets(area_limit=0, cost_limit=20, target_population=1)
        with self.assertRaises(SearchConfigurationError):
            Budgets(area_limit=20, cost_limit=20, target_population=-3)

    def test_initial_state(self):
        planter = TreePlanter(
            two_tree_catalog(), Budgets(20, 20, 1), PriorityZone.ZONE_IV,
            rng=np.random.default_rng(42)
        )

        self.assertEqual(planter.population.shape, (20, 4))
        self.assertEqual(planter.state.best_fitness, -math.inf)
        self.assertEqual(planter.state.last_generation_best, -math.inf)
        self.assertEqual(planter.state.stagnation_counter, 0)
        self.assertIsNone(planter.state.best_chromosome)


class TestEvolutionLoop(unittest.TestCase):
    """Test per-generation bookkeeping."""

    def setUp(self):
        self.planter = TreePlanter(
            two_tree_catalog(),
            Budgets(area_limit=20, cost_limit=20, target_population=1),
            PriorityZone.ZONE_IV,
            config=SearchConfig(num_chromosomes=4),
            rng=np.random.default_rng(42),
        )

    def test_all_infeasible_restarts_at_generation_30(self):
        """30 all-infeasible generations trigger exactly one restart, then the count starts over."""
        infeasible = np.full(4, -math.inf)

        with mock.patch.object(self.planter, 'evaluate', return_value=infeasible):
            for _ in range(29):
                self.assertFalse(self.planter.step())
            self.assertEqual(self.planter.state.stagnation_counter, 29)
            self.assertEqual(self.planter.state.restarts, 0)

            self.assertTrue(self.planter.step())
            self.assertEqual(self.planter.state.generation, 30)
            self.assertEqual(self.planter.state.stagnation_counter, 0)
            self.assertEqual(self.planter.state.restarts, 1)

            for _ in range(29):
                self.assertFalse(self.planter.step())
            self.assertEqual(self.planter.state.restarts, 1)

            self.assertTrue(self.planter.step())
            self.assertEqual(self.planter.state.restarts, 2)

        self.assertIsNone(self.planter.state.best_chromosome)

    def test_non_stagnant_generation_keeps_counter(self):
        """Large improvements leave the counter unchanged instead of resetting it."""
        sequence = (
            [np.full(4, -math.inf)] * 5
            + [np.array([100.0, 1.0, 1.0, 1.0])]
            + [np.array([1.0, 1000.0, 1.0, 1.0])]
            + [np.array([1.0, 1.0, 1000.0, 1.0])]
        )

        with mock.patch.object(self.planter, 'evaluate', side_effect=sequence):
            for _ in range(5):
                self.planter.step()
            self.assertEqual(self.planter.state.stagnation_counter, 5)

            self.planter.step()  # -inf -> 100
            self.assertEqual(self.planter.state.stagnation_counter, 5)

            self.planter.step()  # 100 -> 1000: change of 0.9
            self.assertEqual(self.planter.state.stagnation_counter, 5)

            self.planter.step()  # 1000 -> 1000
            self.assertEqual(self.planter.state.stagnation_counter, 6)

        self.assertEqual(self.planter.state.best_fitness, 1000.0)
        self.assertEqual(self.planter.state.history[-1], 1000.0)

    def test_best_is_first_maximum(self):
        """Ties for the generation best go to the earliest chromosome."""
        population = self.planter.population.copy()
        fitness = np.array([1.0, 5.0, 5.0, 2.0])

        with mock.patch.object(self.planter, 'evaluate', return_value=fitness):
            self.planter.step()

        np.testing.assert_array_equal(self.planter.state.best_chromosome, population[1])
        self.assertEqual(self.planter.state.best_fitness, 5.0)

    def test_best_chromosome_is_a_copy(self):
        previous = self.planter.population
        self.planter.step()

        self.assertIsNotNone(self.planter.state.best_chromosome)
        self.assertFalse(np.shares_memory(self.planter.state.best_chromosome, previous))
        self.assertFalse(np.shares_memory(self.planter.state.best_chromosome, self.planter.population))

    def test_global_best_only_on_strict_improvement(self):
        sequence = [
            np.array([10.0, 1.0, 1.0, 1.0]),
            np.array([1.0, 10.0, 1.0, 1.0]),
        ]
        with mock.patch.object(self.planter, 'evaluate', side_effect=sequence):
            first_population = self.planter.population.copy()
            self.planter.step()
            self.planter.step()

        np.testing.assert_array_equal(self.planter.state.best_chromosome, first_population[0])

    def test_history_tracks_generations(self):
        for _ in range(12):
            self.planter.step()

        self.assertEqual(len(self.planter.state.history), 12)
        self.assertEqual(self.planter.state.generation, 12)


class TestRunSearch(unittest.TestCase):
    """Test the wall-clock driven loop."""

    def make_planter(self, clock, **config):
        return TreePlanter(
            two_tree_catalog(),
            Budgets(area_limit=20, cost_limit=20, target_population=1),
            PriorityZone.ZONE_IV,
            config=SearchConfig(**config),
            rng=np.random.default_rng(42),
            clock=clock,
        )

    def test_stops_after_deadline(self):
        clock = FixedClock(start=1000.0, tick=0.25)
        planter = self.make_planter(clock)

        state = planter.run_search(2)

        # Deadline 1002 at one-second resolution: clock reads 1000.0 .. 1002.75
        self.assertGreater(state.generation, 0)
        self.assertLessEqual(state.generation, 13)
        self.assertGreater(clock.now, 1003.0)

    def test_clock_resolution(self):
        """A finer resolution makes sub-second budgets meaningful."""
        coarse = self.make_planter(FixedClock(start=1000.0, tick=0.1))
        fine = self.make_planter(FixedClock(start=1000.0, tick=0.1), clock_resolution=0.1)

        coarse.run_search(0.5)
        fine.run_search(0.5)

        self.assertGreater(coarse.state.generation, fine.state.generation)

    def test_should_stop(self):
        planter = self.make_planter(FixedClock(tick=0.0))

        state = planter.run_search(10, should_stop=lambda s: s.generation >= 7)

        self.assertEqual(state.generation, 7)

    def test_two_tree_scenario(self):
        """Every initial chromosome is feasible, so the best is at least 2 x A."""
        planter = self.make_planter(FixedClock(tick=0.0))
        planter.run_search(10, should_stop=lambda s: s.generation >= 50)

        self.assertGreaterEqual(planter.state.best_fitness, 170000.0)
        self.assertLessEqual(planter.state.best_fitness, 210000.0)

        result = planter.get_results()
        self.assertLessEqual(result.area, 20)
        self.assertLessEqual(result.cost, 20)
        self.assertAlmostEqual(result.score * 100, planter.state.best_fitness)
        self.assertEqual(result.metadata['zone'], "Zone IV")
        self.assertEqual(result.metadata['generations'], 50)

    def test_verbose_progress_logged(self):
        planter = self.make_planter(FixedClock(tick=0.0), verbose=True, report_every=5)

        with self.assertLogs('afforest.engine', level='INFO') as logs:
            planter.run_search(10, should_stop=lambda s: s.generation >= 11)

        progress = [line for line in logs.output if "Current Best Score at" in line]
        self.assertEqual(len(progress), 3)  # generations 0, 5, 10


class TestResultExtraction(unittest.TestCase):
    """Test decoding of the best chromosome."""

    def setUp(self):
        self.planter = TreePlanter(
            two_tree_catalog(),
            Budgets(area_limit=20, cost_limit=20, target_population=1),
            PriorityZone.ZONE_IV,
            rng=np.random.default_rng(42),
        )

    def test_decode_two_a(self):
        chromosome = np.array([True, True, False, False])
        result = extract_result(
            chromosome, self.planter.sampling_set, self.planter.table,
            self.planter.catalog, self.planter.budgets
        )

        self.assertEqual(result.trees, {"A": 2})
        self.assertAlmostEqual(result.score, 1700.0)
        self.assertEqual(result.area, 10)
        self.assertEqual(result.cost, 20)
        self.assertEqual(result.total_trees(), 2)

    def test_decode_mixed_sorted_by_name(self):
        chromosome = np.array([False, True, True, False])
        result = extract_result(
            chromosome, self.planter.sampling_set, self.planter.table,
            self.planter.catalog, Budgets(20, 20, 10)
        )

        self.assertEqual(list(result.trees.items()), [("A", 1), ("B", 1)])
        self.assertAlmostEqual(result.score, (850.0 + 1050.0) / 10)
        self.assertEqual((result.area, result.cost), (15, 15))

    def test_no_feasible_solution(self):
        with self.assertRaises(NoFeasibleSolutionError):
            self.planter.get_results()

    def test_format_result(self):
        chromosome = np.array([True, True, False, False])
        result = extract_result(
            chromosome, self.planter.sampling_set, self.planter.table,
            self.planter.catalog, self.planter.budgets
        )

        text = format_result(result)

        self.assertIn('Trees : {\n\t"A": 2\n}', text)
        self.assertIn("Score : 1700.000000", text)
        self.assertIn("Area : 10", text)
        self.assertTrue(text.endswith("Cost : 20"))

    def test_result_to_dict(self):
        chromosome = np.array([False, False, True, True])
        result = extract_result(
            chromosome, self.planter.sampling_set, self.planter.table,
            self.planter.catalog, self.planter.budgets
        )

        data = result_to_dict(result)
        self.assertEqual(data['trees'], {"B": 2})
        self.assertEqual(data['area'], 20)
        self.assertEqual(data['cost'], 10)


if __name__ == '__main__':
    unittest.main()
