import numpy as np
from common.utils import argmax, epsilon_greedy


# 腕の本数と、非定常性・報酬ノイズの大きさ（この演習では固定）
ARMS = 10
WALK_STD = 0.01
REWARD_STD = 1.0

# エージェントの種類（閉じた集合）。update / reset はこのタグで分岐する。
SAMPLE_AVERAGE = "sample_average"
CONSTANT_STEP_SIZE = "constant_step_size"
AGENT_KINDS = (SAMPLE_AVERAGE, CONSTANT_STEP_SIZE)


class NonStatBandit:
    """
    非定常（Non-Stationary）な 10 本腕バンディット環境。

    各腕 a の真の価値 q_true[a] は全部 0 から始まり、
    random_walk() が呼ばれるたびに全腕へ独立なガウスノイズ N(0, 0.01^2) が足される
    （ランダムウォーク）。これにより最適な腕が時間とともに入れ替わりうる。

    腕 a を引いたときの報酬は
        reward = q_true[a] + N(0, 1)
    で、報酬を引いても q_true は変化しない。

    ランダムウォークは「1 ステップに 1 回」だけ進める想定。
    同じステップで複数のエージェントが腕を引く場合、全員が同じ（ウォーク後の）q_true を見て、
    報酬ノイズだけがそれぞれ独立に引かれる。
    """

    def __init__(self, arms=ARMS, walk_std=WALK_STD, reward_std=REWARD_STD, rng=None):
        self.arms = arms
        self.walk_std = walk_std
        self.reward_std = reward_std
        # rng を渡さなければ OS 由来の seed で初期化（実行ごとに結果が変わる）
        self.rng = rng if rng is not None else np.random.default_rng()
        self.q_true = np.zeros(arms)

    def random_walk(self):
        # 全腕の真の価値を独立に少しずつ動かす（in-place）
        self.q_true += self.rng.normal(0.0, self.walk_std, size=self.arms)

    def get_reward(self, action):
        """
        腕 action を 1 回引いて報酬を返す。

        action は [0, arms) であること。範囲チェックは呼び出し側の責任
        （エージェントの行動選択が構造的にこの範囲に収まる）。
        """
        return float(self.q_true[action] + self.rng.normal(0.0, self.reward_std))

    def optimal_action(self):
        # 現時点で真の価値が最大の腕（同率なら最小インデックス）
        return argmax(self.q_true)

    def reset(self):
        # 配列は作り直さずに 0 で埋め直す
        self.q_true.fill(0.0)


class Agent:
    """
    ε-greedy で行動選択するバンディット用エージェント。

    価値推定 Qs[a] の更新規則は kind で切り替える：

    - "sample_average"（サンプル平均）：
        ns[a] <- ns[a] + 1
        Q(a)  <- Q(a) + (reward - Q(a)) / ns[a]
      学習率 1/n は試行回数とともに 0 へ減衰する。定常環境向き。
      ns を先に増やすので割り算の分母は必ず 1 以上。

    - "constant_step_size"（固定ステップサイズ）：
        Q(a) <- Q(a) + alpha * (reward - Q(a))
      指数移動平均（Exponential Recency-Weighted Average）。
      古い報酬の重みが (1 - alpha)^n で減っていくので、
      非定常環境で真の価値の変化に追従できる。

    どちらも
        estimate <- estimate + step_size * (target - estimate)
    の特殊ケースで、違うのは step_size の決め方だけ。
    行動選択（choose_action）は共通の epsilon_greedy() を使う。
    """

    def __init__(self, kind, epsilon, alpha=None, action_size=ARMS, rng=None):
        if kind not in AGENT_KINDS:
            raise ValueError(f"unknown agent kind: {kind!r}")
        if not 0.0 <= epsilon <= 1.0:
            raise ValueError(f"epsilon must be in [0, 1], got {epsilon}")

        self.kind = kind
        self.epsilon = epsilon
        self.rng = rng if rng is not None else np.random.default_rng()

        # Qs[a]：腕 a の価値推定 Q(a)（初期値 0）
        self.Qs = np.zeros(action_size)

        if kind == SAMPLE_AVERAGE:
            # ns[a]：腕 a を引いた回数
            self.ns = np.zeros(action_size, dtype=np.int64)
            self.alpha = None
        else:
            if alpha is None or not 0.0 < alpha <= 1.0:
                raise ValueError(f"alpha must be in (0, 1], got {alpha}")
            self.ns = None
            self.alpha = alpha

    def choose_action(self):
        return epsilon_greedy(self.Qs, self.epsilon, self.rng)

    def update(self, action, reward):
        """
        行動 action を選んで報酬 reward を観測した後に Q(action) を更新する。
        """
        if self.kind == SAMPLE_AVERAGE:
            self.ns[action] += 1
            self.Qs[action] += (reward - self.Qs[action]) / self.ns[action]
        else:
            self.Qs[action] += self.alpha * (reward - self.Qs[action])

    def reset(self):
        # 生成直後と同じ状態に戻す（配列は再利用）
        self.Qs.fill(0.0)
        if self.kind == SAMPLE_AVERAGE:
            self.ns.fill(0)


def sample_average_agent(epsilon, action_size=ARMS, rng=None):
    return Agent(SAMPLE_AVERAGE, epsilon, action_size=action_size, rng=rng)


def constant_step_size_agent(epsilon, alpha, action_size=ARMS, rng=None):
    return Agent(CONSTANT_STEP_SIZE, epsilon, alpha=alpha, action_size=action_size, rng=rng)
