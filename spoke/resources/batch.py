import asyncio
import logging
from enum import Enum
from logging import Logger
from typing import Optional, Sequence
from spoke.resources.loader import ResourceLoader
from spoke.resources.reconciler import Reconciler


class BatchState(Enum):
    PENDING = "Pending"
    LOADING = "Loading"
    RECONCILING = "Reconciling"
    DONE = "Done"
    FAILED = "Failed"


class BatchApply:
    """Apply an ordered list of bundled documents, one at a time.

    Order is significant: later documents may depend on earlier ones
    (a namespace before the service account that lives in it), so items
    are never reordered or run concurrently. The first failure stops the
    run and is re-raised unchanged; whatever was applied before it stays.
    Running again starts from the first name.
    """

    loader: ResourceLoader
    reconciler: Reconciler
    logger: Logger

    state: BatchState = BatchState.PENDING
    #: Index of the item in progress, or of the first failure
    index: Optional[int] = None

    def __init__(
        self, loader: ResourceLoader, reconciler: Reconciler, logger: Logger = None
    ):
        self.loader = loader
        self.reconciler = reconciler
        self.logger = logger or logging.getLogger(__name__)

    async def apply_all(self, names: Sequence[str]) -> None:
        self.state, self.index = BatchState.PENDING, None
        for index, name in enumerate(names):
            self.index = index
            try:
                self.state = BatchState.LOADING
                resource = self.loader.load(name)
                self.state = BatchState.RECONCILING
                await self.reconciler.reconcile(resource)
            except (Exception, asyncio.CancelledError) as ex:
                self.state = BatchState.FAILED
                self.logger.error(f"Failed to apply `{name}` ({index + 1}/{len(names)}): {ex}")
                raise
        self.state = BatchState.DONE
