"""
Deployment: bulk materialize, then prune.

    idle -> materializing -> pruning -> done
                  |              |
                failed     partially_done

Materialize and prune are separate store calls with no transaction across
them. Re-running a deployment is the recovery path for a crash in between.
Deployments for the same client and month are expected to be serialized by
the caller.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import asdict, dataclass, field
from typing import List, Optional

from shift_roster.core.config import settings
from shift_roster.core.errors import PartialDeploymentError, PruningError
from shift_roster.scheduling.recurrence import MonthDays
from shift_roster.services.pruning import is_prunable_template, prune_month
from shift_roster.services.stores import ClientTemplateStore, ShiftStore, TemplateStore
from shift_roster.services.validators import validate_client_id, validate_month, validate_policy

logger = logging.getLogger(__name__)


class DeployState(str, enum.Enum):
    IDLE = "idle"
    MATERIALIZING = "materializing"
    PRUNING = "pruning"
    DONE = "done"
    FAILED = "failed"
    PARTIALLY_DONE = "partially_done"


@dataclass
class DeployResult:
    inserted_count: int = 0
    pruned_count: int = 0
    status: str = DeployState.DONE.value

    def to_dict(self) -> dict:
        return asdict(self)


class Deployment:
    def __init__(
        self,
        template_store: TemplateStore,
        shift_store: ShiftStore,
        client_id: str,
        month: str,
        policy: str,
        batch_size: Optional[int] = None,
    ):
        # Validation happens before any store call.
        self.client_id = validate_client_id(client_id)
        self.days: MonthDays = validate_month(month)
        self.policy = validate_policy(policy)
        self.template_store = template_store
        self.shift_store = shift_store
        self.batch_size = batch_size or settings.prune_batch_size
        self.state = DeployState.IDLE
        self.inserted_count = 0
        self.pruned_count = 0

    def _enter(self, state: DeployState) -> None:
        logger.info(
            "deploy client=%s month=%s policy=%s: %s -> %s",
            self.client_id, self.days.month, self.policy, self.state.value, state.value,
        )
        self.state = state

    def run(self) -> DeployResult:
        self._enter(DeployState.MATERIALIZING)
        try:
            self.inserted_count = self.shift_store.materialize(self.client_id, self.days.month, self.policy)
        except Exception:
            self._enter(DeployState.FAILED)
            raise

        self._enter(DeployState.PRUNING)
        try:
            templates = [t for t in self.template_store.get_active_templates(self.client_id) if is_prunable_template(t)]
            self.pruned_count = prune_month(
                self.shift_store, self.client_id, self.days, templates, batch_size=self.batch_size
            )
        except PruningError as exc:
            self.pruned_count = exc.pruned_count
            self._enter(DeployState.PARTIALLY_DONE)
            raise PartialDeploymentError(str(exc), self.inserted_count, self.pruned_count) from exc
        except Exception as exc:
            self._enter(DeployState.PARTIALLY_DONE)
            raise PartialDeploymentError(
                f"materialized but pruning did not run: {exc}", self.inserted_count, self.pruned_count
            ) from exc

        self._enter(DeployState.DONE)
        return DeployResult(self.inserted_count, self.pruned_count, DeployState.DONE.value)


def deploy_month(
    template_store: TemplateStore,
    shift_store: ShiftStore,
    client_id: str,
    month: str,
    policy: str,
    batch_size: Optional[int] = None,
) -> DeployResult:
    return Deployment(template_store, shift_store, client_id, month, policy, batch_size).run()


@dataclass
class BulkDeployResult:
    inserted_count: int = 0
    pruned_count: int = 0
    status: str = DeployState.DONE.value
    clients: int = 0
    failures: List[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def bulk_deploy_month(
    template_store: ClientTemplateStore, shift_store: ShiftStore, month: str, policy: str
) -> BulkDeployResult:
    """
    Deploy every client that has active templates, one at a time.

    A failing client is recorded in `failures` with whatever counts it got to,
    and the remaining clients still run.
    """
    validate_month(month)
    validate_policy(policy)

    result = BulkDeployResult()
    for client_id in template_store.client_ids_with_active_templates():
        result.clients += 1
        try:
            one = deploy_month(template_store, shift_store, client_id, month, policy)
        except PartialDeploymentError as exc:
            result.inserted_count += exc.inserted_count
            result.pruned_count += exc.pruned_count
            result.failures.append({"client_id": client_id, **exc.to_payload()})
            continue
        except Exception as exc:
            logger.error("bulk deploy client=%s month=%s failed: %s", client_id, month, exc)
            result.failures.append(
                {"client_id": client_id, "error": str(exc), "inserted_count": 0, "pruned_count": 0, "status": "failed"}
            )
            continue
        result.inserted_count += one.inserted_count
        result.pruned_count += one.pruned_count

    if result.failures:
        result.status = DeployState.PARTIALLY_DONE.value
    logger.info(
        "bulk deploy month=%s policy=%s clients=%d inserted=%d pruned=%d failures=%d",
        month, policy, result.clients, result.inserted_count, result.pruned_count, len(result.failures),
    )
    return result
