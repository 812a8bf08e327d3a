"""Flow management and sequential flow execution."""

import asyncio
import logging
import uuid
from datetime import datetime
from typing import Awaitable
from uuid import UUID

from chainpost.db.repository import Repository
from chainpost.exceptions import EntityNotFoundError, RequestFailedError
from chainpost.models.collection import Collection
from chainpost.models.environment import Environment
from chainpost.models.flow import (
    Flow,
    FlowExecutionResult,
    FlowExecutionStatus,
    FlowStep,
    FlowStepResult,
    FlowStepStatus,
)
from chainpost.models.response import RequestResponse
from chainpost.services.collection_service import CollectionService
from chainpost.services.environment_service import EnvironmentService
from chainpost.services.request_service import RequestService

logger = logging.getLogger(__name__)


def is_success_status_code(status_code: int) -> bool:
    return 200 <= status_code <= 299


class _StepCancelled(Exception):
    """Cancellation observed while a step was waiting or in flight."""


class FlowService:
    """
    Runs flows: ordered request steps sharing a transient variable overlay.

    The overlay starts as the environment's variables updated with the
    collection's. Each step runs against deep copies of the environment and
    collection that carry the overlay; values the step changes are folded
    back into the overlay for later steps. When the flow has no collection,
    a step uses its request's collection, seeded the same way and with the
    flow's own values on top. Stored entities and the objects loaded for the
    run are never modified.
    """

    def __init__(
        self,
        repository: Repository[Flow],
        request_service: RequestService,
        environment_service: EnvironmentService,
        collection_service: CollectionService,
    ):
        self.repository = repository
        self.request_service = request_service
        self.environment_service = environment_service
        self.collection_service = collection_service

    async def create_flow(self, flow: Flow) -> Flow:
        flow.created_at = datetime.utcnow()
        for step in flow.steps:
            step.id = uuid.uuid4()
            step.flow_id = flow.id
        return await self.repository.add(flow)

    async def get_all_flows(self) -> list[Flow]:
        return await self.repository.get_all()

    async def get_flow(self, flow_id: UUID) -> Flow | None:
        return await self.repository.get_by_id(flow_id)

    async def get_flow_or_raise(self, flow_id: UUID) -> Flow:
        flow = await self.repository.get_by_id(flow_id)
        if flow is None:
            raise EntityNotFoundError("Flow", flow_id)
        return flow

    async def get_flows_by_collection(self, collection_id: UUID) -> list[Flow]:
        return [f for f in await self.repository.get_all() if f.collection_id == collection_id]

    async def update_flow(self, flow: Flow) -> Flow:
        for step in flow.steps:
            step.flow_id = flow.id
        return await self.repository.update(flow)

    async def delete_flow(self, flow_id: UUID) -> None:
        await self.repository.delete(flow_id)

    async def execute_flow(
        self,
        flow_id: UUID,
        environment_id: UUID,
        cancel_event: asyncio.Event | None = None,
    ) -> FlowExecutionResult:
        """
        Execute a flow's steps in ascending order.

        Args:
            flow_id: Flow to run
            environment_id: Environment chosen for this run
            cancel_event: Set to stop the run; checked before each step and
                observed during delays and in-flight requests

        Returns:
            FlowExecutionResult with per-step results. Step failures are
            recorded in the result, never raised.

        Raises:
            EntityNotFoundError: If the flow or environment does not exist
        """
        flow = await self.get_flow_or_raise(flow_id)
        environment = await self.environment_service.get_or_raise(environment_id)
        collection = None
        if flow.collection_id is not None:
            collection = await self.collection_service.get(flow.collection_id)
        if cancel_event is None:
            cancel_event = asyncio.Event()

        result = FlowExecutionResult(flow_id=flow.id, flow_name=flow.name, environment_id=environment.id)
        logger.info(
            "Executing flow %s (%s) with %d steps in environment %s",
            flow.name, flow.id, len(flow.steps), environment.name,
        )

        overlay = dict(environment.variables)
        if collection is not None:
            overlay.update(collection.variables)
        # Values written by steps; they outrank any collection a step brings in
        flow_values: dict[str, str] = {}

        for step in sorted(flow.steps, key=lambda s: s.order):
            if cancel_event.is_set():
                return self._finish(result, FlowExecutionStatus.CANCELLED)

            try:
                step_result = await self._execute_step(
                    step, environment, collection, overlay, flow_values, cancel_event
                )
            except _StepCancelled:
                return self._finish(result, FlowExecutionStatus.CANCELLED)

            result.step_results.append(step_result)
            if step_result.status == FlowStepStatus.FAILED:
                result.error_message = (
                    f"Step {step_result.step_order} ({step_result.request_name}) failed: "
                    f"{step_result.error_message}"
                )
                return self._finish(result, FlowExecutionStatus.FAILED)

        return self._finish(result, FlowExecutionStatus.COMPLETED)

    async def _execute_step(
        self,
        step: FlowStep,
        environment: Environment,
        collection: Collection | None,
        overlay: dict[str, str],
        flow_values: dict[str, str],
        cancel_event: asyncio.Event,
    ) -> FlowStepResult:
        step_result = FlowStepResult(step_id=step.id, step_order=step.order, request_id=step.request_id)

        if not step.is_enabled:
            logger.debug("Skipping disabled step %d", step.order)
            step_result.status = FlowStepStatus.SKIPPED
            step_result.completed_at = datetime.utcnow()
            return step_result

        try:
            await self._delay(step, cancel_event)

            request = await self.request_service.get_request(step.request_id)
            if request is None:
                raise EntityNotFoundError("Request", step.request_id)
            step_result.request_name = request.name
            step_result.request_id = request.id

            # Without a flow collection the step uses its request's own collection
            if collection is None and request.collection_id is not None:
                collection = await self.collection_service.get(request.collection_id)

            # Both scopes carry the run's values so resolution sees the latest ones
            scoped_environment = environment.model_copy(deep=True)
            scoped_environment.variables = dict(overlay)
            scoped_collection = None
            if collection is not None:
                scoped_collection = collection.model_copy(deep=True)
                scoped_collection.variables = {**overlay, **collection.variables, **flow_values}

            environment_before = dict(scoped_environment.variables)
            collection_before = dict(scoped_collection.variables) if scoped_collection is not None else {}
            response = await self._run_cancellable(
                self.request_service.execute_request(
                    request, scoped_environment, scoped_collection, persist_variables=False
                ),
                cancel_event,
            )
            step_result.response = response

            _fold_changes(overlay, flow_values, environment_before, scoped_environment.variables)
            if scoped_collection is not None:
                _fold_changes(overlay, flow_values, collection_before, scoped_collection.variables)

            if not is_success_status_code(response.status_code):
                raise RequestFailedError(response.status_code, response.status_message)
            step_result.status = FlowStepStatus.SUCCESS
            logger.info("Step %d (%s) succeeded with %d", step.order, request.name, response.status_code)
        except _StepCancelled:
            raise
        except Exception as e:
            step_result.error_message = str(e)
            if step.continue_on_error:
                step_result.status = FlowStepStatus.FAILED_CONTINUED
            else:
                step_result.status = FlowStepStatus.FAILED
            logger.info("Step %d (%s) failed: %s", step.order, step_result.request_name, e)

        step_result.completed_at = datetime.utcnow()
        return step_result

    @staticmethod
    async def _delay(step: FlowStep, cancel_event: asyncio.Event) -> None:
        if not step.delay_before_execution_ms or step.delay_before_execution_ms <= 0:
            return
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=step.delay_before_execution_ms / 1000)
        except asyncio.TimeoutError:
            return
        raise _StepCancelled()

    @staticmethod
    async def _run_cancellable(
        execution: Awaitable[RequestResponse], cancel_event: asyncio.Event
    ) -> RequestResponse:
        """Run the request, abandoning it if the cancel event fires first."""
        task = asyncio.ensure_future(execution)
        waiter = asyncio.ensure_future(cancel_event.wait())
        try:
            done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            waiter.cancel()

        if task in done:
            return task.result()

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            logger.debug("In-flight request cancelled")
        raise _StepCancelled()

    @staticmethod
    def _finish(result: FlowExecutionResult, status: FlowExecutionStatus) -> FlowExecutionResult:
        result.status = status
        result.completed_at = datetime.utcnow()
        logger.info(
            "Flow %s finished %s after %d steps in %dms",
            result.flow_name, status.value, len(result.step_results), result.total_duration_ms,
        )
        return result


def _fold_changes(
    overlay: dict[str, str],
    flow_values: dict[str, str],
    before: dict[str, str],
    variables: dict[str, str],
) -> None:
    for name, value in variables.items():
        if before.get(name) != value:
            overlay[name] = value
            flow_values[name] = value
