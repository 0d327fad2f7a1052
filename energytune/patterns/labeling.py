"""
Pattern labeler & aggregator: turns clustered mention groups into the ranked
Pattern records the UI shows.

Per cluster:
  - LABEL: the medoid's text (whitespace collapsed), i.e. the member with the highest mean
    cosine similarity to the other members. Ties go to the earliest date,
    then the shorter text, then the lexically smaller text.
  - EMOJI: first hit in a prioritized keyword table (whole-word,
    case-insensitive), else a per-metric fallback.
  - count / dates / sources: aggregated from the members; sources are listed
    most recent first.
  - percentage / avg_level / recommendation: summary figures for the detail
    view, rounded half up (whole percent, one-decimal level).
  - sub_patterns: members regrouped by their leading tokenized phrase, most
    frequent first.

Ranking: count desc → most recent date desc → label asc, after dropping
clusters smaller than min_cluster_size, truncated to top_n.
"""

import logging
import math
import re
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from energytune.schemas.base import MetricType
from energytune.schemas.entries import RawMention
from energytune.schemas.patterns import Cluster, Pattern, PatternOptions, PatternSource, SubPattern
from energytune.patterns.tokenizer import tokenize
from energytune.shared.helpers import format_label, normalize_whitespace

logger = logging.getLogger(__name__)

_TIE_EPS = 1e-12
_MAX_EXAMPLES = 3
_MAX_SUB_DATES = 5


# ══════════════════════════════════════════════════════════════════════════════
# EMOJI + RECOMMENDATION TABLES
# ══════════════════════════════════════════════════════════════════════════════

# Checked in order; the first rule with a whole-word hit wins.
EMOJI_RULES: List[Tuple[re.Pattern, str]] = [
    (re.compile(r"\b(work|project|deadline|meeting|client|task|job)\b", re.IGNORECASE), "💼"),
    (re.compile(r"\b(sleep|rest|tired|exhausted|bed|night)\b", re.IGNORECASE), "😴"),
    (re.compile(r"\b(bike|cycling|ride|exercise|workout|gym|run|walk)\b", re.IGNORECASE), "🏃"),
    (re.compile(r"\b(sick|ill|pain|headache|doctor|health)\b", re.IGNORECASE), "🏥"),
    (re.compile(r"\b(friend|friends|family|social|people|conversation|party)\b", re.IGNORECASE), "👥"),
    (re.compile(r"\b(series|documentary|movie|watching|tv|show)\b", re.IGNORECASE), "🎬"),
    (re.compile(r"\b(cook|cooking|meal|food|eating|dining)\b", re.IGNORECASE), "🍳"),
    (re.compile(r"\b(music|song|playlist|listening)\b", re.IGNORECASE), "🎵"),
    (re.compile(r"\b(computer|laptop|software|technical|bug|error)\b", re.IGNORECASE), "💻"),
    (re.compile(r"\b(money|financial|budget|bill|cost|expense)\b", re.IGNORECASE), "💰"),
    (re.compile(r"\b(traffic|commute|drive|travel)\b", re.IGNORECASE), "🚗"),
    (re.compile(r"\b(bureaucracy|government|paperwork|administration)\b", re.IGNORECASE), "📋"),
    (re.compile(r"\b(alone|solitude|quiet|peace|privacy)\b", re.IGNORECASE), "🧘"),
]

FALLBACK_EMOJI = {
    MetricType.ENERGY: "⚡",
    MetricType.STRESS: "😣",
}

# (keywords, advice); substring match on the lower-cased label
RECOMMENDATION_RULES: List[Tuple[Tuple[str, ...], str]] = [
    (("deadline", "pressure"), "Schedule buffer time before deadlines"),
    (("bike", "cycling", "ride"), "Regular cycling boosts energy - maintain consistent schedule"),
    (("series", "watching"), "Balance screen time with other activities"),
    (("sleep", "tired"), "Prioritize consistent sleep schedule"),
    (("bureaucracy", "government"), "Plan for delays with external processes"),
    (("alone", "solitude"), "Schedule regular alone time to recharge"),
]

# Ratings are on a 1-10 scale
_HIGH_LEVEL = 7.0


def select_emoji(text: str, metric_type: MetricType) -> str:
    for pattern, emoji in EMOJI_RULES:
        if pattern.search(text):
            return emoji
    return FALLBACK_EMOJI[metric_type]


def generate_recommendation(
    label: str,
    avg_level: Optional[float],
    metric_type: MetricType,
) -> Optional[str]:
    """Rule-based advice for a pattern, or None when nothing applies."""
    lowered = label.lower()
    for keywords, advice in RECOMMENDATION_RULES:
        if any(k in lowered for k in keywords):
            return advice
    if avg_level is None:
        return None
    if metric_type == MetricType.ENERGY and avg_level > _HIGH_LEVEL:
        return "This consistently boosts your energy - do more of this"
    if metric_type == MetricType.STRESS and avg_level >= _HIGH_LEVEL:
        return "Consider strategies to reduce this stressor"
    return None


# ══════════════════════════════════════════════════════════════════════════════
# MEDOID + CLUSTER LABELING
# ══════════════════════════════════════════════════════════════════════════════

def select_medoid(
    members: Sequence[int],
    sim_matrix: np.ndarray,
    mentions: Sequence[RawMention],
) -> int:
    """Index of the member most similar on average to the rest of the cluster."""
    members = list(members)
    if len(members) == 1:
        return members[0]

    block = sim_matrix[np.ix_(members, members)]
    # Exclude self-similarity from each member's mean
    mean_sims = (block.sum(axis=1) - np.diag(block)) / (len(members) - 1)
    best = float(mean_sims.max())

    candidates = [m for m, s in zip(members, mean_sims) if s >= best - _TIE_EPS]
    return min(
        candidates,
        key=lambda m: (mentions[m].date, len(mentions[m].text), mentions[m].text),
    )


def label_clusters(
    groups: Sequence[Sequence[int]],
    mentions: Sequence[RawMention],
    sim_matrix: np.ndarray,
) -> List[Cluster]:
    """Attach label, emoji and dates to each member group."""
    clusters = []
    for group in groups:
        members = tuple(sorted(group))
        medoid = select_medoid(members, sim_matrix, mentions)
        label = normalize_whitespace(mentions[medoid].text)
        metric_type = mentions[medoid].metric_type
        clusters.append(Cluster(
            members=members,
            label=label,
            emoji=select_emoji(label, metric_type),
            dates=frozenset(mentions[m].date for m in members),
            metric_type=metric_type,
            medoid=medoid,
        ))
    return clusters


# ══════════════════════════════════════════════════════════════════════════════
# AGGREGATION + RANKING
# ══════════════════════════════════════════════════════════════════════════════

def _round_half_up(value: float, digits: int = 0) -> float:
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def _mean_level(members: Sequence[RawMention]) -> Optional[float]:
    levels = [m.level for m in members if m.level is not None]
    return _round_half_up(sum(levels) / len(levels), 1) if levels else None


def _sub_pattern_key(text: str, options: PatternOptions) -> str:
    """First multi-word phrase of the text, else its first token, else the text."""
    tokens = tokenize(text, options)
    phrases = [t for t in tokens if " " in t]
    if phrases:
        return phrases[0]
    return tokens[0] if tokens else normalize_whitespace(text).lower()


def build_sub_patterns(
    members: Sequence[RawMention],
    metric_type: MetricType,
    options: Optional[PatternOptions] = None,
) -> List[SubPattern]:
    """
    Split a cluster's members by the leading phrase they share.

    Groups keep first-seen order among equal frequencies, so canonically
    ordered members give a deterministic result.
    """
    options = options or PatternOptions()
    groups: Dict[str, List[RawMention]] = {}
    for m in members:
        groups.setdefault(_sub_pattern_key(m.text, options), []).append(m)

    subs = []
    for phrase, items in groups.items():
        avg_level = _mean_level(items)
        recent = sorted({m.date for m in items}, reverse=True)
        subs.append(SubPattern(
            phrase=phrase,
            label=format_label(phrase),
            frequency=len(items),
            avg_level=avg_level,
            examples=list(dict.fromkeys(m.text for m in items))[:_MAX_EXAMPLES],
            dates=recent[:_MAX_SUB_DATES],
            recommendation=generate_recommendation(phrase, avg_level, metric_type),
        ))
    return sorted(subs, key=lambda s: -s.frequency)


def build_pattern(
    cluster: Cluster,
    mentions: Sequence[RawMention],
    total_mentions: int,
    options: Optional[PatternOptions] = None,
) -> Pattern:
    """Aggregate one labeled cluster into its public Pattern record."""
    members = [mentions[m] for m in cluster.members]
    sources = sorted(
        (PatternSource(date=m.date, text=m.text) for m in members),
        key=lambda s: (-s.date.toordinal(), s.text),
    )

    avg_level = _mean_level(members)
    percentage = int(_round_half_up(len(members) * 100 / total_mentions)) if total_mentions else 0

    return Pattern(
        label=cluster.label,
        emoji=cluster.emoji,
        count=cluster.size,
        dates=sorted(cluster.dates),
        sources=sources,
        metric_type=cluster.metric_type,
        percentage=min(100, percentage),
        avg_level=avg_level,
        recommendation=generate_recommendation(cluster.label, avg_level, cluster.metric_type),
        sub_patterns=build_sub_patterns(members, cluster.metric_type, options),
    )


def _rank_key(pattern: Pattern):
    last = pattern.last_seen
    return (-pattern.count, -(last.toordinal() if last else 0), pattern.label)


def rank_patterns(
    patterns: Sequence[Pattern],
    min_cluster_size: int = 1,
    top_n: Optional[int] = None,
) -> List[Pattern]:
    """Filter by size, order by count → recency → label, and cut to top_n."""
    kept = [p for p in patterns if p.count >= min_cluster_size]
    dropped = len(patterns) - len(kept)
    if dropped:
        logger.debug(f"Ranking: dropped {dropped} patterns below size {min_cluster_size}")

    ranked = sorted(kept, key=_rank_key)
    if top_n is not None:
        ranked = ranked[:top_n]
    return ranked
