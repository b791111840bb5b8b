"""Bulk ingestion of candidate trends."""
from typing import Any, Dict, List, Sequence, Union

from pydantic import ValidationError as PydanticValidationError

from trendbot.core.errors import ValidationError
from trendbot.core.logging import get_logger
from trendbot.core.repositories import TrendStore
from trendbot.core.schemas import BulkCreateResult, CandidateTrend, normalize_category

logger = get_logger(__name__)

CandidateInput = Union[CandidateTrend, Dict[str, Any]]


class TrendIngestionService:
    """Validates, normalizes and bulk-inserts candidate trends."""

    def __init__(self, store: TrendStore):
        self.store = store

    def validate(self, candidates: Sequence[CandidateInput]) -> List[CandidateTrend]:
        """
        Validate every candidate, collecting errors for the whole batch.

        Raises:
            ValidationError: If the batch is empty or any item is invalid
        """
        if not candidates:
            raise ValidationError("Trends array is required and must not be empty")

        validated = []
        errors = []
        for index, candidate in enumerate(candidates):
            if isinstance(candidate, CandidateTrend):
                validated.append(candidate)
                continue
            if not isinstance(candidate, dict):
                errors.append({"index": index, "field": "", "message": "Trend must be an object"})
                continue
            try:
                validated.append(CandidateTrend.model_validate(candidate))
            except PydanticValidationError as e:
                for err in e.errors():
                    errors.append({
                        "index": index,
                        "field": ".".join(str(loc) for loc in err["loc"]),
                        "message": err["msg"],
                    })

        if errors:
            first = errors[0]
            raise ValidationError(
                f"Invalid trend data at index {first['index']}: {first['field']} {first['message']}".strip(),
                details=errors,
            )
        return validated

    @staticmethod
    def normalize(candidate: CandidateTrend) -> Dict[str, Any]:
        """Row ready for the store: canonical category, visible, no id."""
        row = candidate.model_dump(mode="json")
        row["category"] = normalize_category(candidate.category)
        row["is_hidden"] = False
        return row

    async def bulk_create(self, candidates: Sequence[CandidateInput]) -> BulkCreateResult:
        """
        Validate and insert a batch of trends in one store operation.

        Args:
            candidates: Candidate trends as models or raw dicts

        Returns:
            BulkCreateResult with the created records

        Raises:
            ValidationError: Empty batch or invalid items; nothing is inserted
            StoreError: The store could not write the batch
        """
        rows = [self.normalize(candidate) for candidate in self.validate(candidates)]

        created = await self.store.insert_many(rows)
        result = BulkCreateResult(count=len(created), requested=len(rows), created=created)

        if result.partial:
            logger.warning(f"Bulk insert created {result.count} of {result.requested} trends")
        else:
            logger.info(f"Bulk inserted {result.count} trends")
        return result
