import numpy as np
import matplotlib.pyplot as plt


def argmax(xs):
    """
    xs（数値列）の最大値を取るインデックスを返す。

    同率の最大値が複数あるときは「最初のインデックス」を返す。
    これは np.argmax と同じ決め打ちタイブレークで、
    推定値が全部 0 の初期状態では常に action=0 が選ばれることになる。

    ランダムタイブレークにしないのは、環境の最適行動 optimal_action() と
    エージェントの greedy 行動で同じ規則を使い、
    「最適行動を選んだ割合」の集計を一貫させるため。

    入力：
    - xs: list/ndarray 等の数値列（空でないこと）

    出力：
    - 最大値を取るインデックス（int）
    """
    return int(np.argmax(xs))


def epsilon_greedy(Qs, epsilon, rng):
    """
    推定値ベクトル Qs に対する ε-greedy 行動選択。

    乱数を 1 回だけ引いて（ベルヌーイ試行）探索か活用かを決める：
    - 確率 1-ε で活用：argmax Q（同率なら最小インデックス）
    - 確率 ε   で探索：[0, len(Qs)) から一様ランダム

    rng は numpy.random.Generator。グローバル乱数に頼らず明示的に渡すので、
    seed を固定した Generator を渡せば結果が再現できる。
    """
    if rng.random() < epsilon:
        # 探索：一様にランダムな腕を選ぶ
        return int(rng.integers(0, len(Qs)))
    # 活用：現在の推定で最良の腕を選ぶ
    return argmax(Qs)


def plot_curves(curves, ylabel, xlabel="Steps", path=None):
    """
    ステップごとの学習曲線を 1 枚の図に重ねて描く。

    入力：
    - curves: dict {label: 1次元配列}（label が凡例になる）
    - ylabel / xlabel: 軸ラベル
    - path: 指定すれば PNG として保存し、None なら plt.show() で表示する

    複数 run の平均曲線どうしを比べる用途を想定している
    （例：サンプル平均 vs 固定ステップサイズ）。
    """
    fig = plt.figure()
    plt.ylabel(ylabel)
    plt.xlabel(xlabel)
    for label, ys in curves.items():
        plt.plot(range(len(ys)), ys, label=label)
    plt.legend()

    if path is None:
        plt.show()
    else:
        fig.savefig(path)
    plt.close(fig)
