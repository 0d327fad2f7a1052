"""
Average-link agglomerative clustering of mentions, threshold-stopped.

Pipeline: similarity matrix -> singleton clusters -> greedy best-pair merges

  1. Every clusterable mention starts as its own cluster.
  2. The pair of clusters with the highest AVERAGE-LINK similarity (mean
     cosine over all cross-cluster member pairs) is merged, as long as that
     value is >= the threshold (inclusive).
  3. Stop when no pair reaches the threshold or one cluster is left.

Not fixed-k: the number of patterns falls out of the threshold.

Average-link sums are kept in a cluster × cluster matrix and updated by row
addition on every merge (S(a∪b, m) = S(a, m) + S(b, m)), so each step is one
O(k²) scan instead of re-averaging every member pair.

DETERMINISM: ties on similarity are broken by
  1. earliest combined member dates (sorted, compared element-wise)
  2. lexically smaller concatenated member texts
  3. smaller member indices
Mentions are clustered in canonical (date, text) order, so the same mention
set always yields the same clusters regardless of input order.

Complexity is cubic in the worst case (one O(k²) scan per merge). Runs are
scoped to a bounded date window (weeks, low hundreds of mentions).
"""

import logging
import time
from typing import Any, Dict, List, Sequence, Tuple

import numpy as np

from energytune.schemas.base import MetricType
from energytune.schemas.entries import RawMention

logger = logging.getLogger(__name__)

# Similarities closer than this are treated as tied
_TIE_EPS = 1e-12


def average_link_similarity(
    sim_matrix: np.ndarray,
    members_a: Sequence[int],
    members_b: Sequence[int],
) -> float:
    """Mean pairwise similarity between two groups of mention indices."""
    if not members_a or not members_b:
        return 0.0
    block = sim_matrix[np.ix_(list(members_a), list(members_b))]
    return float(block.sum() / block.size)


def _tie_key(
    members: Sequence[int],
    mentions: Sequence[RawMention],
) -> Tuple[List[Any], str, List[int]]:
    ordered = sorted(members)
    dates = sorted(mentions[m].date for m in ordered)
    texts = "\n".join(sorted(mentions[m].text for m in ordered))
    return dates, texts, ordered


def agglomerate(
    indices: Sequence[int],
    sim_matrix: np.ndarray,
    mentions: Sequence[RawMention],
    threshold: float,
) -> Tuple[List[Tuple[int, ...]], int]:
    """
    Merge the given mentions (all clusterable, same metric type) bottom-up.

    Returns (groups, merges_done); each group is a sorted tuple of mention
    indices.
    """
    members: List[List[int]] = [[i] for i in indices]
    k = len(members)
    if k < 2:
        return [tuple(m) for m in members], 0

    idx = list(indices)
    link_sum = sim_matrix[np.ix_(idx, idx)].astype(np.float64, copy=True)
    sizes = np.ones(k, dtype=np.float64)
    active = np.ones(k, dtype=bool)
    off_diagonal = ~np.eye(k, dtype=bool)
    merges_done = 0

    while active.sum() > 1:
        avg = link_sum / np.outer(sizes, sizes)
        valid = np.outer(active, active) & off_diagonal
        scores = np.where(valid, avg, -np.inf)

        best = float(scores.max())
        if best < threshold:
            logger.debug(
                f"  Stop: best average-link {best:.4f} < threshold {threshold:.4f} "
                f"({int(active.sum())} clusters)"
            )
            break

        tied = np.argwhere(
            np.triu(valid, k=1)
            & (scores >= best - _TIE_EPS)
            & (scores >= threshold)
        )
        if len(tied) == 1:
            a, b = (int(x) for x in tied[0])
        else:
            a, b = min(
                ((int(i), int(j)) for i, j in tied),
                key=lambda pair: _tie_key(members[pair[0]] + members[pair[1]], mentions),
            )

        logger.debug(
            f"  Merge {members[a]} + {members[b]} "
            f"(average-link {float(avg[a, b]):.4f})"
        )

        members[a] = sorted(members[a] + members[b])
        members[b] = []
        link_sum[a, :] = link_sum[a, :] + link_sum[b, :]
        link_sum[:, a] = link_sum[a, :]
        sizes[a] += sizes[b]
        active[b] = False
        merges_done += 1

    groups = [tuple(m) for m, alive in zip(members, active) if alive]
    return groups, merges_done


def build_clusters(
    mentions: Sequence[RawMention],
    sim_matrix: np.ndarray,
    clusterable: np.ndarray,
    threshold: float = 0.6,
) -> Tuple[List[Tuple[int, ...]], Dict[str, Any]]:
    """
    Partition mentions into clusters, never mixing metric types.

    Unclusterable mentions (zero TF-IDF vector) become singleton clusters.

    Returns (groups, metrics) where groups is a list of sorted index tuples
    covering every mention exactly once, ordered by first member.
    """
    t_start = time.time()
    groups: List[Tuple[int, ...]] = []
    merges_total = 0

    for metric_type in MetricType:
        of_type = [i for i, m in enumerate(mentions) if m.metric_type == metric_type]
        if not of_type:
            continue
        usable = [i for i in of_type if clusterable[i]]
        degenerate = [i for i in of_type if not clusterable[i]]

        merged, merges_done = agglomerate(usable, sim_matrix, mentions, threshold)
        groups.extend(merged)
        groups.extend((i,) for i in degenerate)
        merges_total += merges_done

    groups.sort(key=lambda g: g[0])

    n_clusterable = int(np.count_nonzero(clusterable)) if len(mentions) else 0
    cluster_sizes = sorted((len(g) for g in groups), reverse=True)
    metrics = {
        "n_mentions": len(mentions),
        "n_clusterable": n_clusterable,
        "n_unclusterable": len(mentions) - n_clusterable,
        "n_clusters": len(groups),
        "n_merges": merges_total,
        "threshold": threshold,
        "cluster_sizes": cluster_sizes,
        "time_s": round(time.time() - t_start, 4),
    }

    logger.info(
        f"Clustering: {len(mentions)} mentions → {len(groups)} clusters "
        f"({merges_total} merges, {metrics['n_unclusterable']} unclusterable), "
        f"threshold={threshold:.2f}, "
        f"sizes={cluster_sizes[:5]}{'...' if len(cluster_sizes) > 5 else ''}"
    )
    return groups, metrics
