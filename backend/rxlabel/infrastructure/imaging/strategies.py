"""
Preprocessing Strategies

Generates one binarized candidate per PreprocessingStrategy and keeps the
candidate with the most crisp edges.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Tuple

import numpy as np

from ...domain.value_objects.pixel_buffer import PixelBuffer
from ...domain.value_objects.preprocessing_strategy import PreprocessingStrategy
from ...domain.entities.scan_result import StrategyTrial
from .pixels import scale_contrast, neighbor_average, binarize


logger = logging.getLogger(__name__)

# Adjacent pixels differing by more than this count as an edge
EDGE_DELTA = 200

# Sample every 4th pixel pair, starting at pixel 1
EDGE_SAMPLE_OFFSET = 1
EDGE_SAMPLE_STRIDE = 4


def apply_strategy(gray: PixelBuffer, strategy: PreprocessingStrategy) -> PixelBuffer:
    """
    Run one strategy on its own copy of the grayscale buffer.

    Args:
        gray: Oriented, scaled grayscale buffer
        strategy: Strategy to apply

    Returns:
        Binarized buffer
    """
    working = gray.copy()
    if strategy.contrast is not None:
        working = scale_contrast(working, strategy.contrast)
    else:
        working = neighbor_average(working)
    return binarize(working, strategy.threshold)


def edge_score(buffer: PixelBuffer) -> int:
    """Count sampled adjacent pixel pairs whose luma differs by more than EDGE_DELTA."""
    flat = buffer.pixels[:, :, 0].ravel().astype(np.int16)
    n = flat.size
    if n < EDGE_SAMPLE_OFFSET + 2:
        return 0
    p = np.arange(EDGE_SAMPLE_OFFSET, n - 1, EDGE_SAMPLE_STRIDE)
    deltas = np.abs(flat[p] - flat[p + 1])
    return int(np.count_nonzero(deltas > EDGE_DELTA))


def run_trial(gray: PixelBuffer, strategy: PreprocessingStrategy) -> StrategyTrial:
    result = apply_strategy(gray, strategy)
    return StrategyTrial(strategy=strategy, result_buffer=result, edge_score=edge_score(result))


def select_strategy(
    gray: PixelBuffer,
    parallel: bool = False,
    max_workers: int = 4
) -> Tuple[StrategyTrial, List[StrategyTrial]]:
    """
    Try every strategy and pick the one with the highest edge score.

    Trials come back in declaration order whether or not they ran in
    parallel, and ties go to the earlier strategy, so the winner is the
    same on every run.

    Args:
        gray: Oriented, scaled grayscale buffer
        parallel: Run trials on a thread pool
        max_workers: Pool size when parallel

    Returns:
        Tuple of (winning trial, all trials)
    """
    strategies = list(PreprocessingStrategy)

    if parallel:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            trials = list(executor.map(lambda s: run_trial(gray, s), strategies))
    else:
        trials = [run_trial(gray, s) for s in strategies]

    winner = trials[0]
    for trial in trials[1:]:
        if trial.edge_score > winner.edge_score:
            winner = trial

    logger.debug(
        "Strategy scores: "
        + ", ".join(f"{t.strategy.label}={t.edge_score}" for t in trials)
        + f" -> {winner.strategy.label}"
    )
    return winner, trials
