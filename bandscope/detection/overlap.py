"""Cross-band disambiguation and composite group aggregation."""

from dataclasses import replace
from typing import Dict, Mapping, Optional, Sequence

from ..config import AmbiguousPair
from ..core import DetectionResult


class OverlapResolver:
    """Post-processes one tick's per-band results.

    Two steps, in order:

    1. Pairwise suppression: for each registered pair, when both bands are
       active and the dominant band's energy exceeds the suppressed band's
       by the pair's ratio, the suppressed band's confidence is damped.
       Only registered pairs are checked, and only in the registered
       direction.
    2. Group aggregation: each group whose members all have a result gets
       a composite result (max energy, OR of activity, max confidence)
       carrying the members' results as components.

    The input mapping is never modified.
    """

    def __init__(
        self,
        pairs: Sequence[AmbiguousPair] = (),
        groups: Optional[Mapping[str, Sequence[str]]] = None,
    ):
        self.pairs = tuple(pairs)
        self.groups = {name: tuple(members) for name, members in (groups or {}).items()}

    def resolve(self, results: Mapping[str, DetectionResult]) -> Dict[str, DetectionResult]:
        """
        Apply suppression and aggregation.

        Args:
            results: Raw band name -> DetectionResult for one tick

        Returns:
            New mapping with suppressed confidences and composite entries
        """
        resolved = dict(results)
        resolved = self.suppress(resolved)
        resolved.update(self.aggregate(resolved))
        return resolved

    def suppress(self, results: Mapping[str, DetectionResult]) -> Dict[str, DetectionResult]:
        resolved = dict(results)
        for pair in self.pairs:
            dominant = resolved.get(pair.dominant)
            suppressed = resolved.get(pair.suppressed)
            if dominant is None or suppressed is None:
                continue
            if not (dominant.active and suppressed.active):
                continue
            if dominant.energy > suppressed.energy * pair.ratio:
                resolved[pair.suppressed] = replace(
                    suppressed, confidence=suppressed.confidence * pair.damping
                )
        return resolved

    def aggregate(self, results: Mapping[str, DetectionResult]) -> Dict[str, DetectionResult]:
        composites = {}
        for group, members in self.groups.items():
            if not members or any(m not in results for m in members):
                continue
            components = {m: results[m] for m in members}
            composites[group] = DetectionResult(
                energy=max(r.energy for r in components.values()),
                active=any(r.active for r in components.values()),
                confidence=max(r.confidence for r in components.values()),
                components=components,
            )
        return composites
