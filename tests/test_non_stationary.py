"""Tests for the experiment driver and its CSV output."""
import contextlib
import io
import os
import tempfile
import unittest
from unittest import mock

import numpy as np

from ch01.bandit import Agent, NonStatBandit
from ch01.non_stationary import HEADER, main, run_exp, write_csv, write_results


def read_lines(path):
    with open(path) as f:
        return f.read().splitlines()


class TestRunExp(unittest.TestCase):
    def test_shapes(self):
        rewards, optimal = run_exp(3, 25, rng=np.random.default_rng(0))
        self.assertEqual(rewards.shape, (25, 2))
        self.assertEqual(optimal.shape, (25, 2))

    def test_percent_optimal_in_range(self):
        _, optimal = run_exp(20, 200, rng=np.random.default_rng(1))
        self.assertTrue(np.all(optimal >= 0.0))
        self.assertTrue(np.all(optimal <= 100.0))

    def test_seeded_runs_are_reproducible(self):
        a = run_exp(4, 50, rng=np.random.default_rng(7))
        b = run_exp(4, 50, rng=np.random.default_rng(7))
        np.testing.assert_array_equal(a[0], b[0])
        np.testing.assert_array_equal(a[1], b[1])

    def test_walk_advances_once_per_step(self):
        walk = NonStatBandit.random_walk
        with mock.patch.object(
            NonStatBandit, "random_walk", autospec=True, side_effect=walk
        ) as patched:
            run_exp(3, 7, rng=np.random.default_rng(0))
        self.assertEqual(patched.call_count, 21)

    def test_each_agent_draws_its_own_reward(self):
        get_reward = NonStatBandit.get_reward
        with mock.patch.object(
            NonStatBandit, "get_reward", autospec=True, side_effect=get_reward
        ) as patched:
            run_exp(2, 5, rng=np.random.default_rng(0))
        self.assertEqual(patched.call_count, 2 * 5 * 2)

    def test_greedy_agents_start_on_first_arm(self):
        # epsilon=0 なら 1 ステップ目は両者とも action=0 を選ぶ
        choose = Agent.choose_action
        actions = []

        def record_choose(agent):
            action = choose(agent)
            actions.append(action)
            return action

        with mock.patch.object(
            Agent, "choose_action", autospec=True, side_effect=record_choose
        ):
            _, optimal = run_exp(1, 1, epsilon=0.0, rng=np.random.default_rng(5))
        self.assertEqual(actions, [0, 0])
        self.assertEqual(optimal[0, 0], optimal[0, 1])
        self.assertIn(optimal[0, 0], (0.0, 100.0))

    def test_reset_called_at_start_of_every_run(self):
        bandit_reset = NonStatBandit.reset
        agent_reset = Agent.reset
        with mock.patch.object(
            NonStatBandit, "reset", autospec=True, side_effect=bandit_reset
        ) as patched_bandit:
            with mock.patch.object(
                Agent, "reset", autospec=True, side_effect=agent_reset
            ) as patched_agent:
                run_exp(4, 3, rng=np.random.default_rng(0))
        self.assertEqual(patched_bandit.call_count, 4)
        self.assertEqual(patched_agent.call_count, 2 * 4)

    def test_every_run_starts_from_zero_state(self):
        num_runs, num_steps = 3, 5
        walk = NonStatBandit.random_walk
        choose = Agent.choose_action
        q_before_walk = []
        agent_states = []

        def record_walk(bandit):
            q_before_walk.append(bandit.q_true.copy())
            walk(bandit)

        def record_choose(agent):
            ns = None if agent.ns is None else agent.ns.copy()
            agent_states.append((agent.Qs.copy(), ns))
            return choose(agent)

        with mock.patch.object(
            NonStatBandit, "random_walk", autospec=True, side_effect=record_walk
        ):
            with mock.patch.object(
                Agent, "choose_action", autospec=True, side_effect=record_choose
            ):
                run_exp(num_runs, num_steps, rng=np.random.default_rng(11))

        self.assertEqual(len(q_before_walk), num_runs * num_steps)
        for run in range(num_runs):
            first = run * num_steps
            np.testing.assert_array_equal(q_before_walk[first], np.zeros(10))
            # 2 体ぶん（サンプル平均, 固定ステップ）
            for Qs, ns in agent_states[2 * first:2 * first + 2]:
                np.testing.assert_array_equal(Qs, np.zeros(10))
                if ns is not None:
                    np.testing.assert_array_equal(ns, np.zeros(10))
            if run > 0:
                # 直前の run の途中では状態が 0 から動いている
                self.assertTrue(np.any(q_before_walk[first - 1] != 0.0))
                self.assertTrue(np.any(agent_states[2 * first - 2][0] != 0.0))

    def test_invalid_sizes(self):
        with self.assertRaises(ValueError):
            run_exp(0, 10)
        with self.assertRaises(ValueError):
            run_exp(1, 0)

    def test_verbose_progress_goes_to_stderr(self):
        out, err = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            run_exp(4, 3, rng=np.random.default_rng(0), verbose=True, log_interval=2)
        self.assertEqual(out.getvalue(), "")
        self.assertEqual(len(err.getvalue().splitlines()), 2)


class TestOutput(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def test_write_csv_format(self):
        path = os.path.join(self.tmp.name, "t.csv")
        write_csv(path, np.array([[0.5, 1.25], [2.0, -0.125]]))
        self.assertEqual(
            read_lines(path),
            ["Step, SampleAverage, ConstantStepSize", "0,0.5,1.25", "1,2.0,-0.125"],
        )

    def test_files_are_overwritten(self):
        write_results(np.zeros((5, 2)), np.zeros((5, 2)), self.tmp.name)
        reward_path, optimal_path = write_results(
            np.ones((2, 2)), np.ones((2, 2)), self.tmp.name
        )
        self.assertEqual(len(read_lines(reward_path)), 3)
        self.assertEqual(len(read_lines(optimal_path)), 3)

    def test_single_run_single_step(self):
        rewards, optimal = run_exp(
            1, 1, epsilon=0.0, alpha=0.1, rng=np.random.default_rng(0)
        )
        paths = write_results(rewards, optimal, self.tmp.name)
        for path in paths:
            lines = read_lines(path)
            self.assertEqual(len(lines), 2)
            self.assertEqual(lines[0], HEADER)
            fields = lines[1].split(",")
            self.assertEqual(fields[0], "0")
            for v in fields[1:]:
                self.assertTrue(np.isfinite(float(v)))

    def test_main_prints_one(self):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            main(num_runs=2, num_steps=10, seed=0, out_dir=self.tmp.name)
        self.assertEqual(out.getvalue(), "1")
        for name in ("rewards.csv", "optimal.csv"):
            lines = read_lines(os.path.join(self.tmp.name, name))
            self.assertEqual(len(lines), 11)
            self.assertEqual(lines[-1].split(",")[0], "9")

    def test_missing_directory_raises(self):
        missing = os.path.join(self.tmp.name, "no", "such", "dir")
        with self.assertRaises(OSError):
            write_results(np.zeros((1, 2)), np.zeros((1, 2)), missing)


if __name__ == "__main__":
    unittest.main()
