"""Decision Processor: applies accept/reject batches to a version."""
import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, Optional

from config import settings
from core.domain import OverlapPolicy, RecommendationStatus
from core.exceptions import ConflictError, NotFoundError, ValidationError
from core.interfaces import IRecommendationRepository
from utils.common import validate_name

logger = logging.getLogger(settings.LOGGER_NAME)


def _as_naive_utc(value: datetime) -> datetime:
    # stored timestamps are naive UTC
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class DecisionProcessor:
    """
    Acts on exactly the ids it is given. Callers own any "nothing selected"
    fallback; this class never substitutes ids.
    """

    def __init__(self, recommendation_repo: IRecommendationRepository,
                 overlap_policy: Optional[str] = None):
        self.recommendation_repo = recommendation_repo
        self.overlap_policy = OverlapPolicy(overlap_policy or settings.DECISION_OVERLAP_POLICY)

    def _resolve_statuses(self, accept_ids: Iterable[str],
                          reject_ids: Iterable[str]) -> Dict[str, RecommendationStatus]:
        accept = list(dict.fromkeys(accept_ids))
        reject = list(dict.fromkeys(reject_ids))
        overlap = set(accept) & set(reject)
        if overlap and self.overlap_policy == OverlapPolicy.ERROR:
            raise ValidationError(
                f"Ids cannot be both accepted and rejected: {', '.join(sorted(overlap))}"
            )

        statuses = {item_id: RecommendationStatus.ACCEPTED for item_id in accept}
        # reject applied last, so it wins under REJECT_WINS
        statuses.update({item_id: RecommendationStatus.REJECTED for item_id in reject})
        return statuses

    async def decide(
        self,
        folder: str,
        document_name: str,
        version: int,
        accept_ids: Iterable[str],
        reject_ids: Iterable[str],
        expected_updated_at: Optional[datetime] = None,
    ) -> None:
        """
        Accept and reject the named ids of one version in a single commit.

        Ids that are not part of the version are ignored.

        Raises:
            ValidationError: bad names, or overlapping ids under the "error" policy.
            NotFoundError: folder, document or version does not exist.
            ConflictError: expected_updated_at given and the version changed since.
        """
        folder = validate_name(folder, "Folder")
        document_name = validate_name(document_name, "Document")
        statuses = self._resolve_statuses(accept_ids, reject_ids)

        target = await self.recommendation_repo.get_version(folder, document_name, version)
        if target is None:
            raise NotFoundError(
                f"Version {version} of '{document_name}' not found in folder '{folder}'"
            )

        if expected_updated_at is not None and target.updated_at != _as_naive_utc(expected_updated_at):
            raise ConflictError(
                f"Version {version} of '{document_name}' was modified at "
                f"{target.updated_at.isoformat()}; reload and retry"
            )

        applied = await self.recommendation_repo.update_statuses(target.id, statuses)
        ignored = set(statuses) - set(applied)
        if ignored:
            logger.debug(f"Ignored unknown ids for '{document_name}' v{version}: {sorted(ignored)}")

        accepted = sum(1 for i in applied if statuses[i] == RecommendationStatus.ACCEPTED)
        logger.info(
            f"Decision on '{folder}/{document_name}' v{version}: "
            f"{accepted} accepted, {len(applied) - accepted} rejected"
        )
