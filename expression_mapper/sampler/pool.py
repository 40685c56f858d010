"""Evaluate a parsed expression over a domain using worker processes."""
import math
from multiprocessing import Pipe, Process
from multiprocessing.connection import Connection, wait
from typing import Any, Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field

from expression_mapper.common.errors import DomainEvaluationError
from expression_mapper.common.evaluator import ExpressionEvaluator
from expression_mapper.common.interval import Interval
from expression_mapper.common.logger import logger
from expression_mapper.common.models import MathGroup, ParsedExpression
from expression_mapper.groups.registry import is_registered
from expression_mapper.sampler.config import SamplerConfig
from expression_mapper.sampler.worker import WorkerProcess


class ParallelSampler(BaseModel):
    """
    Split a domain into contiguous chunks evaluated by worker processes.

    Features:
        - Spawns one worker process per chunk, up to ``max_workers`` at a time.
        - Ensures each worker is joined as soon as its payload is received.
        - Merges values in domain order, whatever order the workers finish in.
        - Falls back to in-process evaluation when one worker is enough.
    """

    model_config = ConfigDict(frozen=True)

    config: SamplerConfig = Field(default_factory=SamplerConfig, description="Worker pool configuration")

    def _chunk(self, points: List[Any]) -> List[List[Any]]:
        """
        Split domain points into ordered chunks.

        :param List[Any] points: Every point of the domain, in order

        :return: Contiguous chunks, at most one per worker, none smaller than ``min_chunk_size`` but the last
        :rtype: List[List[Any]]
        """
        workers = min(self.config.max_workers, math.ceil(len(points) / self.config.min_chunk_size))
        size = max(1, math.ceil(len(points) / max(1, workers)))
        return [points[i : i + size] for i in range(0, len(points), size)]

    def _spawn_worker(
        self, expression: ParsedExpression, group: MathGroup, chunk: List[Any], chunk_index: int
    ) -> Tuple[Process, Connection]:
        """
        Spawn a WorkerProcess for one chunk and return process and pipe.

        :return: Tuple of (Process, parent_pipe)
        :rtype: Tuple[Process, Connection]
        """
        parent_conn, child_conn = Pipe(duplex=False)
        worker = WorkerProcess(
            conn=child_conn,
            group=group.name,
            postfix=expression.postfix,
            points=chunk,
            chunk_index=chunk_index,
        )
        process = Process(target=worker.run)
        process.start()
        # The child owns its end of the pipe from now on
        child_conn.close()
        return process, parent_conn

    def _collect_finished_workers(
        self, active_workers: List[Tuple[Process, Connection]], payloads: Dict[int, Dict[str, Any]]
    ) -> None:
        """
        Wait for at least one worker to report, then collect every available payload.

        Finished workers are removed from the active_workers list.

        :param list active_workers: List of tuples (Process, Pipe)
        :param dict payloads: Payloads received so far, keyed by chunk index
        :raises RuntimeError: If a worker exits without sending its payload
        """
        ready = wait([pipe_conn for _, pipe_conn in active_workers])
        # Iterate in reverse to safely remove finished workers while iterating
        for i in reversed(range(len(active_workers))):
            proc, pipe_conn = active_workers[i]
            if pipe_conn not in ready:
                continue
            try:
                payload = pipe_conn.recv()
            except EOFError:
                raise RuntimeError(f"Worker process {proc.pid} exited without sending results") from None
            finally:
                pipe_conn.close()
                proc.join()
                active_workers.pop(i)
            payloads[payload["chunk"]] = payload

    def evaluate_over_domain(self, expression: ParsedExpression, interval: Interval, group: MathGroup) -> List[Any]:
        """
        Evaluate an expression at every point of an interval.

        :param ParsedExpression expression: Expression parsed for ``group``
        :param Interval interval: Domain of the free variable
        :param MathGroup group: Numeric system, evaluated in process unless it is the registered one

        :return: One value per point, in domain order
        :rtype: List[Any]
        :raises DomainEvaluationError: On the first failing point in domain order, with every value before it
        """
        points: List[Any] = list(interval.points())
        chunks: List[List[Any]] = self._chunk(points)

        if not is_registered(group):
            # Workers only know groups by registry name
            logger.warning(f"🧵 Group {group.name!r} is not the registered one, evaluating in process")
            return ExpressionEvaluator.evaluate_over_domain(expression, interval, group)

        if len(chunks) <= 1:
            return ExpressionEvaluator.evaluate_over_domain(expression, interval, group)

        logger.info(f"🧵 Evaluating {len(points)} point(s) in {len(chunks)} chunk(s)")

        payloads: Dict[int, Dict[str, Any]] = {}
        active_workers: List[Tuple[Process, Connection]] = []
        try:
            for chunk_index, chunk in enumerate(chunks):
                # Wait until a worker slot is available
                while len(active_workers) >= self.config.max_workers:
                    self._collect_finished_workers(active_workers, payloads)

                active_workers.append(self._spawn_worker(expression, group, chunk, chunk_index))

            # Collect remaining active workers
            while active_workers:
                self._collect_finished_workers(active_workers, payloads)
        finally:
            for proc, pipe_conn in active_workers:
                proc.terminate()
                proc.join()
                pipe_conn.close()

        # Merge in domain order, stopping at the first failure
        results: List[Any] = []
        for chunk_index in range(len(chunks)):
            payload = payloads[chunk_index]
            results.extend(payload["results"])
            if "error" in payload:
                point = payload["point"]
                logger.error(f"📉❌ Evaluation failed at {point!r} after {len(results)} point(s)")
                raise DomainEvaluationError(
                    point,
                    results,
                    f"Evaluation failed at {point!r}: {payload['error']}",
                    error_type=payload["error_type"],
                )

        logger.info(f"🧵✅ Evaluated {len(results)} point(s)")
        return results
