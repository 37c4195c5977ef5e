"""Container runtime cleanup: the pipeline's mutating step."""

from __future__ import annotations

from hostkeeper.collaborators.base import ContainerRuntime
from hostkeeper.models.report import RECLAIM_CLASSES, MutationOutcome
from hostkeeper.utils.errors import ApplyError
from hostkeeper.utils.logging import get_logger
from hostkeeper.utils.units import ZERO_SIZE

logger = get_logger(__name__)


class ContainerPrune:
    """Prunes unused containers, images, volumes, build cache and networks.

    A class that fails to prune reports ``0B`` and adds a warning; the other
    classes are still pruned.
    """

    def __init__(self, runtime: ContainerRuntime, enabled: bool = True) -> None:
        self._runtime = runtime
        self._enabled = enabled

    def __call__(self) -> MutationOutcome:
        if not self._enabled:
            logger.info("Prune disabled, skipped")
            return MutationOutcome.skipped_by_policy()

        if not self._runtime.is_available():
            logger.warning("Container runtime not available, nothing pruned")
            return MutationOutcome(
                status="Unavailable",
                warnings=["Docker daemon is not reachable, prune skipped"],
            )

        logger.info("Starting docker prune")
        reclaimed: dict[str, str] = {}
        warnings: list[str] = []
        for resource_class in (*RECLAIM_CLASSES, "networks"):
            try:
                size = self._runtime.prune(resource_class)
            except ApplyError as e:
                logger.warning(e.message)
                warnings.append(f"Prune of {resource_class} failed")
                size = ZERO_SIZE
            if resource_class in RECLAIM_CLASSES:
                reclaimed[resource_class] = size
        logger.info("Docker prune completed")

        return MutationOutcome(
            status="Done" if not warnings else "Partial",
            reclaimed=reclaimed,
            warnings=warnings,
        )
