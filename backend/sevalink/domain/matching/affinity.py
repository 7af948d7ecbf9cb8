"""Skill/tag affinity scoring.

This is a deliberately simple bag-of-words heuristic: a required tag counts
as matched when it is a case-insensitive substring of a candidate tag or a
candidate tag is a substring of it ("teach" ~ "teaching"). It is not semantic
similarity and must stay reproducible, so do not swap in embeddings here.
"""

from __future__ import annotations

from typing import Iterable, List, Tuple


def _fold(tags: Iterable[str]) -> List[str]:
	folded: List[str] = []
	seen = set()
	for tag in tags:
		value = tag.strip().casefold()
		if value and value not in seen:
			seen.add(value)
			folded.append(value)
	return folded


def _tag_matches(required: str, candidate_tags: List[str]) -> bool:
	return any(required in tag or tag in required for tag in candidate_tags)


def matched_tags(required: Iterable[str], candidate_tags: Iterable[str]) -> Tuple[str, ...]:
	"""Return the (folded) required tags that the candidate covers, sorted."""

	wanted = _fold(required)
	offered = _fold(candidate_tags)
	if not wanted or not offered:
		return ()
	return tuple(sorted(tag for tag in wanted if _tag_matches(tag, offered)))


def affinity(required: Iterable[str], candidate_tags: Iterable[str]) -> float:
	"""Fraction of required tags covered by the candidate, in [0, 1].

	An empty requirement yields 0.0 so that "no preference" never biases ordering.
	"""

	wanted = _fold(required)
	if not wanted:
		return 0.0
	offered = _fold(candidate_tags)
	if not offered:
		return 0.0
	hits = sum(1 for tag in wanted if _tag_matches(tag, offered))
	return hits / len(wanted)


__all__ = ["affinity", "matched_tags"]
