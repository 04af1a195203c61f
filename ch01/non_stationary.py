# 非定常バンディットで「サンプル平均」と「固定ステップサイズ」の 2 つの更新規則を比べる実験。
#
# サンプル平均（学習率 1/n）は n が増えると新しい観測をほとんど反映できなくなるので、
# 真の価値がランダムウォークで動き続ける環境では追従が遅れる。
# 固定ステップサイズ alpha は古いデータを指数的に忘れるので追従できる。
#
# runs 回独立に実験し、ステップごとに
# - 平均報酬
# - 最適行動を選んだ割合（%）
# を平均して CSV に書き出す。

# ------------------------------------------------------------
# import パス調整（ファイル実行時のみ）
# ------------------------------------------------------------
import os, sys

if "__file__" in globals():
    sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

import csv
import numpy as np
from ch01.bandit import NonStatBandit, sample_average_agent, constant_step_size_agent


# --- 実験設定 ---
NUM_RUNS = 2000  # 独立試行回数
NUM_STEPS = 10000  # 1試行あたりのステップ数
EPSILON = 0.1  # ε-greedy の探索率
ALPHA = 0.1  # 固定ステップサイズ
SEED = None  # None なら実行ごとに異なる乱数列（整数を入れると再現できる）

REWARD_FILE = "rewards.csv"
OPTIMAL_FILE = "optimal.csv"

# CSV の列順（= run_exp が返す配列の列順）
AGENT_NAMES = ("SampleAverage", "ConstantStepSize")
HEADER = "Step, " + ", ".join(AGENT_NAMES)


def run_exp(num_runs=NUM_RUNS, num_steps=NUM_STEPS, epsilon=EPSILON, alpha=ALPHA,
            rng=None, verbose=False, log_interval=100):
    """
    num_runs 回の独立試行を行い、ステップごとの平均性能を返す。

    出力：
    - rewards: shape (num_steps, 2)。rewards[t, i] は t ステップ目にエージェント i が得た報酬の平均
    - optimal: shape (num_steps, 2)。optimal[t, i] は t ステップ目に最適行動を選んだ割合（%）
    列 i は AGENT_NAMES の順（サンプル平均, 固定ステップサイズ）。

    1 ステップの流れ：
    1. 環境のランダムウォークを 1 回だけ進める（エージェントが何体いても 1 回）
    2. その時点の最適行動を調べる
    3. 各エージェントが順に 行動選択 -> 報酬 -> 更新 を行う
       2 体は同じ環境（同じ q_true）を見るが、報酬ノイズは独立に引かれる。
       報酬を引いても q_true は変わらないので、互いの結果には影響しない。

    環境を 2 つに分けないのは、2 体が同じ q_true の軌跡を共有することで
    比較の相関構造（同じ問題を解いている）を保つため。
    """
    if num_runs <= 0 or num_steps <= 0:
        raise ValueError("num_runs and num_steps must be positive")

    # rng は環境とエージェントで共有する（乱数を引く順番も固定される）
    if rng is None:
        rng = np.random.default_rng()

    bandit = NonStatBandit(rng=rng)
    agents = [
        sample_average_agent(epsilon, rng=rng),
        constant_step_size_agent(epsilon, alpha, rng=rng),
    ]

    # 全 run の合計を step ごとにためる
    rewards = np.zeros((num_steps, len(agents)))
    optimal = np.zeros((num_steps, len(agents)))

    for run in range(num_runs):
        # 各 run は同じ初期条件から始める
        bandit.reset()
        for agent in agents:
            agent.reset()

        for step in range(num_steps):
            bandit.random_walk()
            optimal_action = bandit.optimal_action()

            for i, agent in enumerate(agents):
                action = agent.choose_action()
                reward = bandit.get_reward(action)
                agent.update(action, reward)

                rewards[step, i] += reward
                optimal[step, i] += action == optimal_action

        if verbose and (run + 1) % log_interval == 0:
            # stdout は完了通知だけにしたいので進捗は stderr へ
            last = rewards[-1] / (run + 1)
            print(
                f"run {run + 1}/{num_runs}  final-step avg reward: {last[0]:.3f}, {last[1]:.3f}",
                file=sys.stderr,
            )

    # 合計を run 数で割って平均にする
    rewards /= num_runs
    optimal = optimal / num_runs * 100
    return rewards, optimal


def write_csv(path, table):
    """
    1 指標ぶんの表を CSV に書く（既存ファイルは上書き）。

    1 行目はヘッダ "Step, SampleAverage, ConstantStepSize"、
    以降は "<step>,<サンプル平均の値>,<固定ステップの値>" を 1 ステップ 1 行。
    """
    with open(path, "w", newline="") as f:
        f.write(HEADER + "\n")
        w = csv.writer(f, lineterminator="\n")
        for step, row in enumerate(table):
            w.writerow([step] + [float(v) for v in row])


def write_results(rewards, optimal, out_dir="."):
    reward_path = os.path.join(out_dir, REWARD_FILE)
    optimal_path = os.path.join(out_dir, OPTIMAL_FILE)
    write_csv(reward_path, rewards)
    write_csv(optimal_path, optimal)
    return reward_path, optimal_path


def main(num_runs=NUM_RUNS, num_steps=NUM_STEPS, seed=SEED, out_dir=".", verbose=False):
    rng = np.random.default_rng(seed)
    rewards, optimal = run_exp(num_runs, num_steps, EPSILON, ALPHA, rng=rng, verbose=verbose)
    write_results(rewards, optimal, out_dir)
    # 完了の合図（改行なし）
    print("1", end="")


if __name__ == "__main__":
    main()
