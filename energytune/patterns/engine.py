"""
Pattern pipeline: journal mentions → ranked recurring themes.

  Step 1 (Extract):    DailyEntry[] → RawMention[] (one per non-blank description)
  Step 2 (Tokenize):   uni/bi/trigrams, stopwords and short tokens removed
  Step 3 (Encode):     per-run vocabulary → sublinear TF × smoothed IDF, L2-normalized
  Step 4 (Compare):    cosine similarity matrix, computed once
  Step 5 (Cluster):    average-link agglomerative, threshold-stopped, per metric type
  Step 6 (Label/Rank): medoid label + emoji → Pattern[] ranked by count/recency/label

Every run is a pure function of the mention set and PatternOptions: mentions
are put in canonical (date, text) order first, so the caller's ordering never
changes the result.
"""

import logging
import re
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError

from energytune.config import get_settings
from energytune.schemas.base import MetricType
from energytune.schemas.entries import RawMention, coerce_entries
from energytune.schemas.patterns import Cluster, Pattern, PatternOptions, PatternSource
from energytune.patterns.tokenizer import tokenize
from energytune.patterns.vectorizer import vectorize
from energytune.patterns.similarity import similarity_matrix
from energytune.patterns.clustering import build_clusters
from energytune.patterns.labeling import build_pattern, label_clusters, rank_patterns
from energytune.shared.helpers import truncate_text

# ── Logging: console + optional file ─────────────────────────────────────
_PARENT_LOGGER = "energytune.patterns"
_HANDLER_TAG = "_energytune_handler"


class FlushingFileHandler(logging.FileHandler):
    """FileHandler that flushes after every record for crash-safe debugging."""
    def emit(self, record):
        super().emit(record)
        self.flush()


def configure_logging(
    level: Optional[Union[int, str]] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Attach console (and optionally file) handlers to the parent
    'energytune.patterns' logger so every pipeline module logs through them.

    Safe to call repeatedly: handlers from a previous call are replaced.
    Defaults come from PATTERN_LOG_LEVEL / PATTERN_LOG_FILE.
    """
    settings = get_settings()
    if level is None:
        level = settings.pattern_log_level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    if log_file is None:
        log_file = settings.pattern_log_file or None

    parent = logging.getLogger(_PARENT_LOGGER)
    for handler in list(parent.handlers):
        if getattr(handler, _HANDLER_TAG, False):
            parent.removeHandler(handler)
            handler.close()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    setattr(console, _HANDLER_TAG, True)
    parent.addHandler(console)

    if log_file:
        file_handler = FlushingFileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s | %(levelname)-7s | %(message)s', datefmt='%H:%M:%S'
        ))
        setattr(file_handler, _HANDLER_TAG, True)
        parent.addHandler(file_handler)

    parent.setLevel(logging.DEBUG if log_file else level)
    parent.propagate = False
    return parent


logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════════
# MENTION EXTRACTION + VALIDATION
# ══════════════════════════════════════════════════════════════════════════════

_SOURCE_SPLIT = re.compile(r"[,;]")
_MIN_SPLIT_LENGTH = 3


def split_sources(text: str) -> List[str]:
    """Split one description on ',' / ';' into trimmed parts of 3+ characters."""
    parts = (p.strip() for p in _SOURCE_SPLIT.split(text))
    return [p for p in parts if len(p) >= _MIN_SPLIT_LENGTH]


def extract_mentions(
    entries: Iterable[Any],
    metric_type: Union[MetricType, str],
    split_sources: bool = False,
) -> List[RawMention]:
    """
    One RawMention per non-blank description of `metric_type`.

    A per-period mapping yields one mention per period; with split_sources
    each description is further split on ',' / ';'. A mention's level is its
    period's rating when present, else the entry's mean rating.
    """
    metric_type = MetricType(metric_type)
    mentions: List[RawMention] = []

    for entry in coerce_entries(entries):
        levels = getattr(entry, metric_type.levels_field)
        mean_level = entry.average_level(metric_type)
        for period, text in entry.source_texts(metric_type):
            texts = _split_or_keep(text, split_sources)
            level = levels.get(period, mean_level) if period else mean_level
            for part in texts:
                mentions.append(RawMention(
                    date=entry.date,
                    metric_type=metric_type,
                    text=part,
                    level=level,
                    period=period,
                ))

    logger.debug(f"Extracted {len(mentions)} {metric_type.value} mentions")
    return mentions


def _split_or_keep(text: str, split: bool) -> List[str]:
    if not split:
        return [text]
    return split_sources(text) or [text]


def coerce_mentions(
    items: Iterable[Any],
    metric_type: Optional[MetricType] = None,
) -> List[RawMention]:
    """
    Validate mentions at the pipeline boundary.

    Accepts RawMention instances or dicts (a dict without metric_type takes
    `metric_type`). Malformed items are skipped with a warning. When
    metric_type is given, mentions of the other metric are left out.
    """
    mentions: List[RawMention] = []
    skipped = 0
    for item in items or []:
        if isinstance(item, RawMention):
            mention = item
        else:
            try:
                data = dict(item) if isinstance(item, Mapping) else item
                if isinstance(data, dict) and metric_type is not None:
                    data.setdefault("metric_type", metric_type)
                mention = RawMention.model_validate(data)
            except ValidationError as e:
                skipped += 1
                logger.warning(
                    f"Skipping malformed mention: "
                    f"{'; '.join(err['msg'] for err in e.errors())}"
                )
                continue
        if metric_type is not None and mention.metric_type != metric_type:
            logger.debug(f"Ignoring {mention.metric_type.value} mention in {metric_type.value} run")
            continue
        mentions.append(mention)

    if skipped:
        logger.warning(f"Skipped {skipped} malformed mentions, kept {len(mentions)}")
    return mentions


def _canonical_key(m: RawMention):
    return (
        m.date,
        m.text,
        m.metric_type.value,
        m.period or "",
        m.level is None,
        m.level if m.level is not None else 0.0,
    )


def canonical_order(mentions: Iterable[RawMention]) -> List[RawMention]:
    """Mentions sorted by (date, text), the order every run clusters in."""
    return sorted(mentions, key=_canonical_key)


# ══════════════════════════════════════════════════════════════════════════════
# PIPELINE
# ══════════════════════════════════════════════════════════════════════════════

@dataclass
class PipelineResult:
    """Everything one run produced: the full ranking plus intermediate state."""
    metric_type: MetricType
    options: PatternOptions
    mentions: List[RawMention] = field(default_factory=list)
    clusters: List[Cluster] = field(default_factory=list)
    patterns: List[Pattern] = field(default_factory=list)
    metrics: Dict[str, Any] = field(default_factory=dict)

    def top(self, n: Optional[int] = None) -> List[Pattern]:
        return self.patterns[: n if n is not None else self.options.top_n]


def resolve_options(
    options: Union[PatternOptions, Mapping[str, Any], None] = None,
    **overrides,
) -> PatternOptions:
    """PatternOptions from None (settings defaults), a dict of overrides, or as-is.

    Raises pydantic.ValidationError for invalid values.
    """
    if options is None:
        return PatternOptions.from_settings(**overrides)
    if isinstance(options, PatternOptions):
        if not overrides:
            return options
        return PatternOptions(**{**options.model_dump(), **overrides})
    if isinstance(options, Mapping):
        return PatternOptions.from_settings(**{**dict(options), **overrides})
    raise TypeError(f"options must be PatternOptions, a mapping or None, got {type(options).__name__}")


def run_pipeline(
    mentions: Iterable[Any],
    metric_type: Union[MetricType, str],
    options: Union[PatternOptions, Mapping[str, Any], None] = None,
) -> PipelineResult:
    """Cluster and rank every mention of one metric type (no top-N cut)."""
    options = resolve_options(options)
    metric_type = MetricType(metric_type)
    total_start = time.time()

    ordered = canonical_order(coerce_mentions(mentions, metric_type))
    result = PipelineResult(metric_type=metric_type, options=options, mentions=ordered)
    if not ordered:
        logger.info(f"Pattern run ({metric_type.value}): no mentions")
        result.metrics = {"n_mentions": 0, "n_clusters": 0, "n_patterns": 0}
        return result

    phase_times = {}

    t = time.time()
    documents = [tokenize(m.text, options) for m in ordered]
    tfidf = vectorize(documents)
    phase_times["encode"] = round(time.time() - t, 4)

    t = time.time()
    sims = similarity_matrix(tfidf.matrix)
    phase_times["similarity"] = round(time.time() - t, 4)

    t = time.time()
    groups, cluster_metrics = build_clusters(
        ordered, sims, tfidf.clusterable, options.merge_threshold,
    )
    phase_times["cluster"] = round(time.time() - t, 4)

    t = time.time()
    result.clusters = label_clusters(groups, ordered, sims)
    patterns = [build_pattern(c, ordered, len(ordered), options) for c in result.clusters]
    result.patterns = rank_patterns(patterns, options.min_cluster_size)
    phase_times["label"] = round(time.time() - t, 4)

    result.metrics = {
        **cluster_metrics,
        "n_terms": len(tfidf.vocabulary),
        "n_patterns": len(result.patterns),
        "phase_times": phase_times,
        "total_seconds": round(time.time() - total_start, 4),
    }

    logger.info(
        f"Pattern run ({metric_type.value}): {len(ordered)} mentions, "
        f"{len(tfidf.vocabulary)} terms → {len(result.clusters)} clusters → "
        f"{len(result.patterns)} patterns in {result.metrics['total_seconds']:.3f}s"
    )
    for p in result.patterns[:options.top_n]:
        logger.debug(f"  {p.emoji} {truncate_text(p.label)!r} ×{p.count} (last {p.last_seen})")
    return result


def compute_top_patterns(
    mentions: Iterable[Any],
    metric_type: Union[MetricType, str],
    top_n: Optional[int] = None,
    options: Union[PatternOptions, Mapping[str, Any], None] = None,
) -> List[Pattern]:
    """
    The top_n recurring themes among `mentions`, best first.

    Empty input or no surviving patterns → []. Invalid options (including
    top_n < 1) raise pydantic.ValidationError before any text is processed.
    """
    overrides = {"top_n": top_n} if top_n is not None else {}
    options = resolve_options(options, **overrides)
    return run_pipeline(mentions, metric_type, options).top()


def pattern_sources(pattern: Pattern) -> List[PatternSource]:
    """The verbatim mentions behind a pattern, most recent first."""
    return list(pattern.sources)
