from __future__ import annotations
import math
from typing import Dict, List, Optional, Sequence

from .models import ActivityLog, CamelModel, Resource, TopicScore
from .settings import settings

MAX_TOPICS = 5


def _label(topic: str, max_chars: int) -> str:
	return topic[:max_chars] + "..." if len(topic) > max_chars else topic


def topic_popularity(
	activity_log: Sequence[ActivityLog],
	resources: Sequence[Resource],
	*,
	download_weight: Optional[float] = None,
	limit: Optional[int] = None,
	label_max_chars: Optional[int] = None,
) -> List[TopicScore]:
	"""Rank topics by logged queries plus a weighted share of downloads.

	Ties keep first-encounter order: log entries (newest first), then
	resources in store order.
	"""
	weight = settings.analytics_download_weight if download_weight is None else download_weight
	limit = min(settings.analytics_top_topics if limit is None else limit, MAX_TOPICS)
	max_chars = settings.topic_label_max_chars if label_max_chars is None else label_max_chars

	scores: Dict[str, float] = {}
	for entry in activity_log:
		scores[entry.topic] = scores.get(entry.topic, 0) + 1
	for resource in resources:
		scores[resource.topic] = scores.get(resource.topic, 0) + resource.downloads * weight

	ranked = [
		TopicScore(name=_label(topic, max_chars), full_name=topic, queries=math.floor(value))
		for topic, value in scores.items()
	]
	ranked.sort(key=lambda t: t.queries, reverse=True)
	return ranked[:limit]


class DashboardSummary(CamelModel):
	total_queries: int
	top_learning_gap: str
	topics: List[TopicScore]
	recent_activity: List[ActivityLog]


def dashboard_summary(activity_log: Sequence[ActivityLog], resources: Sequence[Resource]) -> DashboardSummary:
	topics = topic_popularity(activity_log, resources)
	return DashboardSummary(
		total_queries=len(activity_log),
		top_learning_gap=topics[0].full_name if topics else "N/A",
		topics=topics,
		recent_activity=list(activity_log[: settings.activity_feed_limit]),
	)
