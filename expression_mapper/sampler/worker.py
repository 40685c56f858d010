"""Worker process evaluating a parsed expression over a chunk of a domain."""
from multiprocessing.connection import Connection
from typing import Any, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from expression_mapper.common.errors import ExpressionError
from expression_mapper.common.evaluator import ExpressionEvaluator
from expression_mapper.common.logger import logger
from expression_mapper.groups.registry import get_group


class WorkerProcess(BaseModel):
    """
    Worker process responsible for evaluating one contiguous chunk of domain points.

    Lifecycle:
        - Spawned by the parallel sampler
        - Receives one postfix expression and one chunk of points only
        - Sends the computed values, or the values computed before a failure, through a Pipe
        - Terminates immediately after computation

    The numeric system is looked up by name so that only plain data crosses
    the process boundary.
    """

    # Make the Pydantic instance immutable (read-only) for safety
    # Allow arbitrary types like multiprocessing.Connection
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    conn: Connection = Field(..., description="Connection object for sending results back to the sampler")
    group: str = Field(..., description="Registry name of the numeric system")
    postfix: Tuple[str, ...] = Field(..., description="Expression tokens in postfix order")
    points: List[Any] = Field(..., description="Domain points to evaluate, in domain order")
    chunk_index: int = Field(..., ge=0, description="Position of the chunk in the domain")

    @field_validator("group")
    def group_must_be_registered(cls, v: str) -> str:
        """Ensure that the numeric system can be found by the worker."""
        get_group(v)
        return v

    @field_validator("points")
    def points_must_not_be_empty(cls, v: List[Any]) -> List[Any]:
        """Ensure that the chunk holds at least one point."""
        if not v:
            raise ValueError("Chunk cannot be empty")
        return v

    def run(self) -> None:
        """
        Evaluate the expression at every point of the chunk and send the payload through the pipe.

        :return: None
        """
        logger.info(f"👷🏁 Worker started on chunk {self.chunk_index}: {len(self.points)} point(s)")

        results: List[Any] = []
        point: Any = None

        try:
            group = get_group(self.group)
            for point in self.points:
                results.append(ExpressionEvaluator.evaluate_once(self.postfix, point, group))

            # Send values through the connection
            self.conn.send({"chunk": self.chunk_index, "results": results})
            logger.info(f"👷✅ Worker finished on chunk {self.chunk_index}")

        except ExpressionError as exc:
            logger.error(f"👷❌ Worker failed on chunk {self.chunk_index} at {point!r}: {exc}")

            # Send error and the values computed before it
            self.conn.send(
                {
                    "chunk": self.chunk_index,
                    "results": results,
                    "point": point,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                }
            )

        finally:
            # Always close the connection
            self.conn.close()
