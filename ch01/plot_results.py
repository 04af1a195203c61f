# non_stationary.py が書き出した rewards.csv / optimal.csv を読み込んで学習曲線を描く。
#
# 教科書でおなじみの 2 枚の図：
# - 平均報酬の推移
# - 最適行動を選んだ割合（%）の推移
# 非定常環境では、後半になるほど固定ステップサイズの曲線がサンプル平均を上回るはず。

import os, sys

if "__file__" in globals():
    sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

import numpy as np
from common.utils import plot_curves
from ch01.non_stationary import AGENT_NAMES, REWARD_FILE, OPTIMAL_FILE


def load_results(path):
    """
    CSV を読み込んで {エージェント名: 1次元配列} を返す。
    1 列目（Step）は行番号と同じなので捨てる。
    """
    table = np.loadtxt(path, delimiter=",", skiprows=1, ndmin=2)
    return {name: table[:, i + 1] for i, name in enumerate(AGENT_NAMES)}


def plot_results(reward_path=REWARD_FILE, optimal_path=OPTIMAL_FILE, save_dir=None):
    rewards = load_results(reward_path)
    optimal = load_results(optimal_path)

    if save_dir is None:
        plot_curves(rewards, "Average reward")
        plot_curves(optimal, "% Optimal action")
        return None

    reward_png = os.path.join(save_dir, "rewards.png")
    optimal_png = os.path.join(save_dir, "optimal.png")
    plot_curves(rewards, "Average reward", path=reward_png)
    plot_curves(optimal, "% Optimal action", path=optimal_png)
    return reward_png, optimal_png


def main():
    plot_results()


if __name__ == "__main__":
    main()
