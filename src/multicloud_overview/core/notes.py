"""
Converts provider failures into human-readable overview notes.
"""

import logging
from collections.abc import Mapping, Sequence

from ..providers.base import VALID_PROVIDERS, SectionError
from .models import OverviewNote
from .settle import Err, Outcome

logger = logging.getLogger(__name__)


class NotesCollector:
    """Builds the ``notes`` list of the unified overview."""

    def __init__(self, per_provider_limit: int = 3):
        self.per_provider_limit = per_provider_limit

    def collect(
        self,
        rejected: Mapping[str, Sequence[tuple[str, Outcome]]],
        section_errors: Mapping[str, Sequence[SectionError]],
    ) -> list[OverviewNote]:
        """
        Build notes for rejected calls and internal section errors.

        A provider with rejected top-level calls gets exactly one note naming
        the unavailable sections and the first failure reason. A provider
        that answered but reported section errors gets one note per error,
        up to ``per_provider_limit``; the excess is dropped. Identical notes
        from different providers are kept.

        Args:
            rejected: Per provider, (section label, outcome) pairs in call order
            section_errors: Per provider, errors reported inside a fulfilled call

        Returns:
            Notes in provider order, rejections before section errors
        """
        notes: list[OverviewNote] = []

        for provider in VALID_PROVIDERS:
            failures = [
                (section, outcome)
                for section, outcome in rejected.get(provider, ())
                if isinstance(outcome, Err)
            ]
            if failures:
                sections = ", ".join(section for section, _ in failures)
                reason = failures[0][1].reason
                notes.append(
                    OverviewNote(provider=provider, message=f"{sections} unavailable: {reason}")
                )

        for provider in VALID_PROVIDERS:
            errors = list(section_errors.get(provider, ()))
            if len(errors) > self.per_provider_limit:
                logger.debug(
                    f"Dropping {len(errors) - self.per_provider_limit} {provider} section errors"
                )
            for error in errors[: max(self.per_provider_limit, 0)]:
                notes.append(
                    OverviewNote(provider=provider, message=f"{error.section}: {error.message}")
                )

        return notes
