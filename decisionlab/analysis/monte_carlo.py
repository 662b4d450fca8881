# monte_carlo.py
# =============================================================================
# 三角分布 Monte Carlo 结果模拟 / Triangular-distribution Monte Carlo outcome simulator
#
# 输入最差 / 最可能 / 最好三种情景值，逆 CDF 抽样 trials 次，
# 归约为 mean / median / p10 / p90 / prob_loss。
# / Takes worst / most-likely / best values, draws `trials` inverse-CDF
#   samples and reduces them to mean / median / p10 / p90 / prob_loss.
#
# 随机源可注入：传入 random.Random 实例（或 seed）即可复现；
# 不传时每次调用新建独立生成器，不触碰全局 random 状态。
# / The random source is injectable: pass a random.Random (or a seed) for
#   reproducible runs; otherwise each call builds its own generator and the
#   global random state is never touched.
# =============================================================================

from __future__ import annotations

import logging
import math
import random
import statistics
from typing import List, Optional

from decisionlab.primitives.models import SimulationResult

logger = logging.getLogger(__name__)

DEFAULT_TRIALS = 10000


def sample_triangular(u: float, minimum: float, mode: float, maximum: float) -> float:
    """将 [0, 1) 均匀抽样映射为三角分布样本（逆 CDF）。
    / Map a uniform draw u in [0, 1) to a triangular sample via the inverse CDF.

    调用方保证 minimum < maximum 且 mode ∈ [minimum, maximum]。
    / Caller guarantees minimum < maximum and mode within [minimum, maximum].
    """
    span = maximum - minimum
    split = (mode - minimum) / span
    if u < split:
        return minimum + math.sqrt(max(0.0, u * span * (mode - minimum)))
    return maximum - math.sqrt(max(0.0, (1 - u) * span * (maximum - mode)))


def _reduce(samples: List[float]) -> SimulationResult:
    samples.sort()
    n = len(samples)
    return SimulationResult(
        mean=statistics.fmean(samples),
        median=samples[n // 2],
        p10=samples[math.floor(n * 0.1)],
        p90=samples[math.floor(n * 0.9)],
        prob_loss=sum(1 for v in samples if v < 0) / n,
    )


def simulate(
    minimum: float,
    mode: float,
    maximum: float,
    trials: int = DEFAULT_TRIALS,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
) -> SimulationResult:
    """运行三角分布 Monte Carlo 模拟。 / Run a triangular Monte Carlo simulation.

    Args:
        minimum: 最差情景 / worst case.
        mode: 最可能情景，超出范围时截断到 [minimum, maximum]
            / most likely case, clamped into [minimum, maximum].
        maximum: 最好情景 / best case.
        trials: 抽样次数 / number of samples (at least 1).
        rng: 注入的随机源（优先于 seed） / injected random source (wins over seed).
        seed: 未注入 rng 时用于新建生成器 / seed for a fresh generator when rng is absent.

    Returns:
        SimulationResult。minimum >= maximum 时返回退化结果
        （mean = median = mode, p10 = minimum, p90 = maximum,
        prob_loss = 1 if minimum < 0 else 0）；输入非有限数或内部异常时返回全零结果。
        / SimulationResult. A degenerate range yields the fixed fallback above;
        non-finite inputs or internal errors yield the all-zero result.
    """
    try:
        if not all(math.isfinite(v) for v in (minimum, mode, maximum)):
            logger.error(
                "Monte Carlo 输入非有限数: min=%s mode=%s max=%s",
                minimum, mode, maximum,
            )
            return SimulationResult.zero()

        if minimum >= maximum:
            return SimulationResult(
                mean=mode,
                median=mode,
                p10=minimum,
                p90=maximum,
                prob_loss=1.0 if minimum < 0 else 0.0,
            )

        mode = min(max(mode, minimum), maximum)
        trials = max(1, int(trials))
        if rng is None:
            rng = random.Random(seed)

        samples = [
            sample_triangular(rng.random(), minimum, mode, maximum)
            for _ in range(trials)
        ]
        result = _reduce(samples)
        logger.debug(
            "Monte Carlo 完成: trials=%d mean=%.2f p10=%.2f p90=%.2f prob_loss=%.3f",
            trials, result.mean, result.p10, result.p90, result.prob_loss,
        )
        return result
    except Exception:
        logger.exception("Monte Carlo 模拟失败 / Monte Carlo simulation failed")
        return SimulationResult.zero()
